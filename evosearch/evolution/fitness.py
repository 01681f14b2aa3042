"""
Fitness evaluation for EvoSearch populations.

Evaluation is the only step of a generation that may run concurrently: every
genome computes its own fitness independently and caches it on itself. The
evaluator runs serially by default and switches to a thread pool when more
than one worker is configured. The pool is always joined before
:meth:`FitnessEvaluator.evaluate` returns, so selection and the monitor only
ever see fully evaluated populations.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence

from loguru import logger

from .genome import Genome


def _evaluate(genome: Genome) -> float:
    return genome.fitness()


class FitnessEvaluator:
    """Evaluate pending genomes serially or on a local thread pool."""

    def __init__(self, max_workers: Optional[int] = None) -> None:
        if max_workers is not None and max_workers < 1:
            raise ValueError("max_workers must be positive")
        self.max_workers = max_workers
        self.backend = "threads" if max_workers and max_workers > 1 else "serial"
        self._last_stats: Dict[str, object] = {}

    def evaluate(self, population: Sequence[Genome]) -> List[float]:
        """
        Make sure every genome of ``population`` has a cached fitness.

        Genomes whose cache is still valid are not evaluated again. Exceptions
        raised by a fitness function propagate to the caller.

        Returns
        -------
        list[float]
            Fitness values in population order.
        """

        seen = set()
        pending: List[Genome] = []
        for genome in population:
            if not genome.is_evaluated and id(genome) not in seen:
                seen.add(id(genome))
                pending.append(genome)

        start = time.perf_counter()
        if pending and self.backend == "threads":
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                list(pool.map(_evaluate, pending))
        else:
            for genome in pending:
                _evaluate(genome)
        self.snapshot(evaluated=len(pending), duration=time.perf_counter() - start)
        return [genome.fitness() for genome in population]

    def snapshot(self, evaluated: int, duration: float) -> Dict[str, object]:
        stats: Dict[str, object] = {
            "backend": self.backend,
            "evaluated": evaluated,
            "duration": round(duration, 6),
            "max_workers": self.max_workers,
        }
        if evaluated:
            logger.debug("Evaluated {} genomes on {} backend in {:.4f}s", evaluated, self.backend, duration)
        self._last_stats = stats
        return stats

    def last_stats(self) -> Dict[str, object]:
        return dict(self._last_stats)


__all__ = ["FitnessEvaluator"]
