"""
Selection operators: pick parents from the current population.

Every operator returns exactly the requested number of individuals, drawn
with replacement from the population it was given (the very same objects,
never copies). Populations with equal, zero or negative fitness everywhere
degrade to uniform sampling instead of dividing by zero.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from ..genome import Genome
from .base import SelectionOperator
from .registry import register_operator


def fitness_array(population: Sequence[Genome]) -> np.ndarray:
    return np.asarray([genome.fitness() for genome in population], dtype=float)


def uniform_sample(population: Sequence[Genome], count: int, rng: np.random.Generator) -> List[Genome]:
    indices = rng.integers(0, len(population), size=count)
    return [population[int(index)] for index in indices]


def sample_by_weight(
    population: Sequence[Genome],
    weights: np.ndarray,
    count: int,
    rng: np.random.Generator,
) -> List[Genome]:
    """
    Roulette wheel over ``weights``.

    For each draw a target is taken uniformly from ``[0, total)`` and the
    first individual whose cumulative weight passes it is picked. Negative
    weights count as zero; a non-positive total falls back to uniform sampling.
    """

    weights = np.where(np.isfinite(weights), np.clip(weights, 0.0, None), 0.0)
    total = float(weights.sum())
    if total <= 0.0 or not np.isfinite(total):
        return uniform_sample(population, count, rng)
    cumulative = np.cumsum(weights)
    targets = rng.random(count) * total
    indices = np.minimum(np.searchsorted(cumulative, targets, side="right"), len(population) - 1)
    return [population[int(index)] for index in indices]


@register_operator("selection", "tournament")
class TournamentSelection(SelectionOperator):
    """Best of ``tournament_size`` individuals sampled uniformly with replacement."""

    name = "Tournament Selection"

    def __init__(self, tournament_size: int = 3) -> None:
        if int(tournament_size) < 1:
            raise ValueError("Tournament size must be at least 1")
        self.tournament_size = int(tournament_size)

    @classmethod
    def from_config(cls, config, **params):
        params.setdefault("tournament_size", max(1, int(round(config.selection_pressure))))
        return cls(**params)

    @property
    def description(self) -> str:
        return f"Selects the best individual of random tournaments of size {self.tournament_size}"

    def select(self, population, count, rng):
        if not population or count <= 0:
            return []
        fitness = fitness_array(population)
        contestants = rng.integers(0, len(population), size=(count, self.tournament_size))
        # argmax keeps the first contestant on ties
        winners = contestants[np.arange(count), np.argmax(fitness[contestants], axis=1)]
        return [population[int(index)] for index in winners]

    def __repr__(self) -> str:
        return f"TournamentSelection(tournament_size={self.tournament_size})"


@register_operator("selection", "roulette")
class RouletteSelection(SelectionOperator):
    """Fitness proportionate selection."""

    name = "Fitness Proportionate Selection"
    description = "Selects individuals with probability proportional to their fitness"

    def select(self, population, count, rng):
        if not population or count <= 0:
            return []
        return sample_by_weight(population, fitness_array(population), count, rng)


@register_operator("selection", "rank")
class RankSelection(SelectionOperator):
    """Linear ranking: the best of ``N`` individuals weighs ``N``, the worst weighs 1."""

    name = "Rank Selection"
    description = "Selects proportionally to rank position rather than raw fitness"

    def select(self, population, count, rng):
        if not population or count <= 0:
            return []
        size = len(population)
        order = np.argsort(-fitness_array(population), kind="stable")
        ranked = [population[int(index)] for index in order]
        weights = np.arange(size, 0, -1, dtype=float)
        return sample_by_weight(ranked, weights, count, rng)


@register_operator("selection", "boltzmann")
class BoltzmannSelection(SelectionOperator):
    """
    Weights proportional to ``exp(fitness / temperature)``.

    The temperature is multiplied by ``cooling_rate`` after every call, so
    selection moves from exploratory (hot) to exploitative (cold) over a run.
    Weights are computed relative to the best fitness, which leaves the
    proportions unchanged and keeps ``exp`` from overflowing.
    """

    name = "Boltzmann Selection"

    def __init__(
        self,
        initial_temperature: float = 100.0,
        cooling_rate: float = 0.95,
        min_temperature: float = 1e-8,
    ) -> None:
        if initial_temperature <= 0:
            raise ValueError("Initial temperature must be positive")
        if not 0 < cooling_rate <= 1:
            raise ValueError("Cooling rate must be in (0, 1]")
        self.initial_temperature = float(initial_temperature)
        self.cooling_rate = float(cooling_rate)
        self.min_temperature = float(min_temperature)
        self.temperature = self.initial_temperature

    @property
    def description(self) -> str:
        return f"Annealed selection pressure, current temperature {self.temperature:.4g}"

    def weights(self, population: Sequence[Genome]) -> np.ndarray:
        fitness = fitness_array(population)
        finite = fitness[np.isfinite(fitness)]
        if finite.size == 0:
            return np.ones_like(fitness)
        scaled = (fitness - finite.max()) / self.temperature
        return np.exp(np.where(np.isnan(scaled), -np.inf, scaled))

    def select(self, population, count, rng):
        if not population or count <= 0:
            return []
        selected = sample_by_weight(population, self.weights(population), count, rng)
        self.temperature = max(self.temperature * self.cooling_rate, self.min_temperature)
        return selected

    def reset(self) -> None:
        self.temperature = self.initial_temperature

    def __repr__(self) -> str:
        return f"BoltzmannSelection(temperature={self.temperature:.4g}, cooling_rate={self.cooling_rate})"


@register_operator("selection", "sus")
class StochasticUniversalSampling(SelectionOperator):
    """
    One random offset, then ``count`` evenly spaced pointers on the cumulative
    fitness line. Each individual is picked within one of its expected number
    of copies. The picks are shuffled so consecutive parents are not clustered.
    """

    name = "Stochastic Universal Sampling"
    description = "Evenly spaced pointers over the cumulative fitness line"

    def select(self, population, count, rng):
        if not population or count <= 0:
            return []
        weights = fitness_array(population)
        weights = np.where(np.isfinite(weights), np.clip(weights, 0.0, None), 0.0)
        total = float(weights.sum())
        if total <= 0.0 or not np.isfinite(total):
            return uniform_sample(population, count, rng)
        spacing = total / count
        pointers = rng.random() * spacing + spacing * np.arange(count)
        cumulative = np.cumsum(weights)
        indices = np.minimum(np.searchsorted(cumulative, pointers, side="right"), len(population) - 1)
        return [population[int(index)] for index in rng.permutation(indices)]


__all__ = [
    "TournamentSelection",
    "RouletteSelection",
    "RankSelection",
    "BoltzmannSelection",
    "StochasticUniversalSampling",
    "fitness_array",
    "sample_by_weight",
    "uniform_sample",
]
