"""Shared fixtures and tiny genome types used across the EvoSearch tests."""

from typing import Callable, List, Sequence

import numpy as np
import pytest

from evosearch.evolution.genome import Genome, RealGenome, SequenceSpec, make_rng


class ValueGenome(RealGenome):
    """Unbounded real genome whose fitness is the sum of its genes."""

    def evaluate(self) -> float:
        return float(sum(self.genes))


class LetterGenome(Genome):
    """Categorical genes; fitness counts the letter ``a``."""

    ALPHABET = "abcd"

    def evaluate(self) -> float:
        return float(sum(1 for gene in self.genes if gene == "a"))

    @classmethod
    def random_instance(cls, params=None, rng=None):
        params = params if params is not None else SequenceSpec(6)
        rng = make_rng(rng)
        return cls([cls.ALPHABET[int(index)] for index in rng.integers(0, 4, size=params.length)], params)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def scored_population() -> Callable[[Sequence[float]], List[ValueGenome]]:
    """Factory building single-gene genomes with the given fitness values."""

    def build(values: Sequence[float]) -> List[ValueGenome]:
        return [ValueGenome([float(value)]) for value in values]

    return build


@pytest.fixture
def letter_genome_type():
    return LetterGenome


@pytest.fixture
def make_stats():
    """Factory for synthetic :class:`GenerationStats` snapshots."""
    from datetime import datetime

    from evosearch.evolution.monitor import GenerationStats

    def build(generation: int = 0, best: float = 0.0, diversity: float = 0.0, size: int = 10) -> GenerationStats:
        return GenerationStats(
            generation=generation,
            timestamp=datetime.now(),
            population_size=size,
            best_fitness=best,
            worst_fitness=best - 1.0,
            average_fitness=best - 0.5,
            median_fitness=best - 0.5,
            fitness_std=0.5,
            diversity=diversity,
        )

    return build
