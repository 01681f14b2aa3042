"""
Per-generation statistics of an evolutionary run.

The monitor keeps an append-only history of immutable
:class:`GenerationStats` snapshots, answers convergence queries for the
engine and exports the history as records, a pandas DataFrame or CSV.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .genome import Genome
from .population import average_pairwise_diversity, best_individual, fitness_statistics

EXPORT_COLUMNS = [
    "generation",
    "timestamp",
    "population_size",
    "best_fitness",
    "worst_fitness",
    "average_fitness",
    "median_fitness",
    "fitness_std",
    "diversity",
]


@dataclass(frozen=True)
class GenerationStats:
    """Snapshot of one generation; ``best_individual`` is a private clone."""

    generation: int
    timestamp: datetime
    population_size: int
    best_fitness: float
    worst_fitness: float
    average_fitness: float
    median_fitness: float
    fitness_std: float
    diversity: float
    best_individual: Optional[Genome] = None

    def as_record(self) -> Dict[str, Any]:
        return {column: getattr(self, column) for column in EXPORT_COLUMNS}

    def describe(self) -> str:
        return (
            f"Generation {self.generation}: best={self.best_fitness:.4f} "
            f"avg={self.average_fitness:.4f} div={self.diversity:.4f}"
        )


class EvolutionMonitor:
    """Collects :class:`GenerationStats` for every generation of a run."""

    def __init__(self) -> None:
        self.generation_stats: List[GenerationStats] = []
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None

    def start(self) -> None:
        """Reset the history and start the run clock."""
        self.generation_stats = []
        self.start_time = time.perf_counter()
        self.end_time = None

    def finish(self) -> None:
        self.end_time = time.perf_counter()

    @property
    def runtime(self) -> float:
        if self.start_time is None:
            return 0.0
        end = self.end_time if self.end_time is not None else time.perf_counter()
        return end - self.start_time

    def record_generation(self, generation: int, population: Sequence[Genome]) -> Optional[GenerationStats]:
        """Snapshot ``population`` as generation ``generation``; empty populations are ignored."""

        if not population:
            return None
        summary = fitness_statistics(population)
        stats = GenerationStats(
            generation=generation,
            timestamp=datetime.now(),
            population_size=summary.size,
            best_fitness=summary.best,
            worst_fitness=summary.worst,
            average_fitness=summary.mean,
            median_fitness=summary.median,
            fitness_std=summary.std,
            diversity=average_pairwise_diversity(population),
            best_individual=best_individual(population).clone(),
        )
        self.generation_stats.append(stats)
        return stats

    def record_stats(self, stats: GenerationStats) -> None:
        """Append an externally built snapshot (replays, synthetic histories)."""
        self.generation_stats.append(stats)

    @property
    def latest(self) -> Optional[GenerationStats]:
        return self.generation_stats[-1] if self.generation_stats else None

    def best_fitness_evolution(self) -> List[float]:
        return [stats.best_fitness for stats in self.generation_stats]

    def average_fitness_evolution(self) -> List[float]:
        return [stats.average_fitness for stats in self.generation_stats]

    def diversity_evolution(self) -> List[float]:
        return [stats.diversity for stats in self.generation_stats]

    def average_fitness_std(self) -> float:
        if not self.generation_stats:
            return 0.0
        return float(np.mean([stats.fitness_std for stats in self.generation_stats]))

    def converged(self, last_n_generations: int = 10, tolerance: float = 1e-6) -> bool:
        """
        True when the best fitness moved less than ``tolerance`` over the last
        ``last_n_generations`` snapshots. Shorter histories never count as
        converged.
        """

        if last_n_generations < 1 or len(self.generation_stats) < last_n_generations:
            return False
        recent = self.best_fitness_evolution()[-last_n_generations:]
        return max(recent) - min(recent) < tolerance

    def summary(self) -> str:
        if not self.generation_stats:
            return "No evolution data recorded"
        first, last = self.generation_stats[0], self.generation_stats[-1]
        improvement = last.best_fitness - first.best_fitness
        lines = [
            "Evolution Summary:",
            "==================",
            f"Generations: {len(self.generation_stats)}",
            f"Runtime: {self.runtime:.2f} seconds",
            "",
            f"Initial best fitness: {first.best_fitness:.4f}",
            f"Final best fitness: {last.best_fitness:.4f}",
            f"Improvement: {improvement:.4f}",
            "",
            f"Final population diversity: {last.diversity:.4f}",
            f"Average fitness std: {self.average_fitness_std():.4f}",
            "",
            f"Best individual: {last.best_individual!r}",
        ]
        return "\n".join(lines)

    # ----------------------------------------------------------------- export
    def to_records(self) -> List[Dict[str, Any]]:
        return [stats.as_record() for stats in self.generation_stats]

    def to_frame(self) -> pd.DataFrame:
        """History as a DataFrame with one row per generation."""
        return pd.DataFrame(self.to_records(), columns=EXPORT_COLUMNS)

    def export_csv(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.to_frame().to_csv(path, index=False)
        return path

    def __len__(self) -> int:
        return len(self.generation_stats)


__all__ = ["EvolutionMonitor", "GenerationStats", "EXPORT_COLUMNS"]
