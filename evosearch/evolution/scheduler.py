"""
Scheduler utilities running repeated, independently seeded searches.

Evolutionary search is stochastic, so a configuration is judged over many
trials rather than one run. The `EvolutionScheduler` builds a fresh engine
(and fresh operators) per seed, keeps every result and reports success rates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import pandas as pd

from evosearch.utils.logger import EvolutionLogger

from .config import EvolutionConfig
from .engine import EvolutionEngine, EvolutionResult
from .operators import Operator

OperatorFactory = Callable[[], Dict[str, Operator]]


@dataclass
class SchedulerConfig:
    """Configuration for repeated trials."""

    trials: int = 10
    base_seed: int = 0
    run_name: str = "evosearch-trials"

    def seeds(self) -> List[int]:
        return [self.base_seed + trial for trial in range(self.trials)]


@dataclass
class EvolutionScheduler:
    """Run the same search once per seed and aggregate the outcomes."""

    genome_type: Any
    config: EvolutionConfig
    params: Any = None
    operator_factory: Optional[OperatorFactory] = None
    scheduler_config: SchedulerConfig = field(default_factory=SchedulerConfig)
    results: List[EvolutionResult] = field(default_factory=list)

    def build_engine(self, seed: int) -> EvolutionEngine:
        operators = self.operator_factory() if self.operator_factory is not None else {}
        return EvolutionEngine(
            self.genome_type,
            self.config.with_overrides(seed=seed),
            self.params,
            run_name=f"{self.scheduler_config.run_name}-{seed}",
            **operators,
        )

    def run(self, seeds: Optional[Sequence[int]] = None) -> List[EvolutionResult]:
        """Execute one search per seed; results accumulate across calls."""

        seeds = list(seeds) if seeds is not None else self.scheduler_config.seeds()
        logger = EvolutionLogger(self.scheduler_config.run_name, verbose=self.config.verbose)
        with logger.start_run(params={"trials": len(seeds), **self.config.engine_dict()}):
            for seed in seeds:
                result = self.build_engine(seed).run()
                self.results.append(result)
                logger.log_metrics(
                    {"best_fitness": result.best_fitness, "generations": result.generations},
                    step=seed,
                )
        return self.results

    def success_rate(self, goal: Optional[float] = None) -> float:
        """Share of trials whose best fitness reached ``goal`` (default: the configured goal)."""

        goal = self.config.fitness_goal if goal is None else goal
        if goal is None:
            raise ValueError("A fitness goal is required to compute a success rate")
        if not self.results:
            return 0.0
        return sum(1 for result in self.results if result.best_fitness >= goal) / len(self.results)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "trial": index,
                    "best_fitness": result.best_fitness,
                    "generations": result.generations,
                    "termination_reason": result.termination_reason.value if result.termination_reason else None,
                    "runtime": result.runtime,
                }
                for index, result in enumerate(self.results)
            ],
            columns=["trial", "best_fitness", "generations", "termination_reason", "runtime"],
        )


__all__ = ["EvolutionScheduler", "SchedulerConfig"]
