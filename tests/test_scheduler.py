"""Tests for repeated, independently seeded trials."""

import pytest

from evosearch.evolution import EvolutionConfig, EvolutionScheduler, SchedulerConfig
from evosearch.evolution.genome import SequenceSpec
from evosearch.evolution.operators import BitFlipMutation
from evosearch.evolution.problems import OneMaxGenome


def make_scheduler(**options) -> EvolutionScheduler:
    config = EvolutionConfig(population_size=20, max_generations=40, mutation_rate=0.05, **options)
    return EvolutionScheduler(
        OneMaxGenome,
        config,
        SequenceSpec(10),
        operator_factory=lambda: {"mutation": BitFlipMutation()},
        scheduler_config=SchedulerConfig(trials=3, base_seed=5),
    )


def test_seeds_follow_base_seed() -> None:
    assert SchedulerConfig(trials=3, base_seed=5).seeds() == [5, 6, 7]


def test_scheduler_runs_every_trial() -> None:
    scheduler = make_scheduler(fitness_goal=10.0)
    results = scheduler.run()
    assert len(results) == 3
    reached = sum(1 for result in results if result.best_fitness >= 10.0)
    assert scheduler.success_rate() == pytest.approx(reached / 3)
    assert scheduler.success_rate(goal=0.0) == 1.0
    frame = scheduler.to_frame()
    assert list(frame.columns) == ["trial", "best_fitness", "generations", "termination_reason", "runtime"]
    assert len(frame) == 3


def test_trials_are_reproducible() -> None:
    first = [result.best_fitness for result in make_scheduler().run()]
    second = [result.best_fitness for result in make_scheduler().run()]
    assert first == second


def test_each_trial_gets_fresh_operators() -> None:
    scheduler = make_scheduler()
    first, second = scheduler.build_engine(1), scheduler.build_engine(2)
    assert first.mutation is not second.mutation
    assert first.config.seed == 1 and second.config.seed == 2


def test_success_rate_needs_a_goal() -> None:
    scheduler = make_scheduler()
    with pytest.raises(ValueError):
        scheduler.success_rate()
    assert scheduler.success_rate(goal=5.0) == 0.0
