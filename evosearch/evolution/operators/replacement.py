"""
Replacement operators: fold offspring into the population.

Each operator returns a new list exactly as long as the population it was
given; the input lists are not modified. Elitist replacement exploits (the
best individual can never be lost) while age-based replacement forces
turnover, and the two are selected independently.
"""

from __future__ import annotations

from typing import List, Optional

import numpy as np

from .base import ReplacementOperator
from .registry import register_operator


def _best_first(genomes) -> list:
    return sorted(genomes, key=lambda genome: genome.fitness(), reverse=True)


@register_operator("replacement", "elitist")
class ElitistReplacement(ReplacementOperator):
    """
    Merge population and offspring, keep the ``N`` fittest.

    The sort is stable and lists the old population first, so on ties the
    incumbents survive. ``elitism_rate`` is only reported through
    :meth:`elite_count` and the description; it does not change who survives.
    """

    name = "Elitist Replacement"

    def __init__(self, elitism_rate: float = 0.1) -> None:
        if not 0.0 <= elitism_rate < 1.0:
            raise ValueError("Elitism rate must be in [0, 1)")
        self.elitism_rate = float(elitism_rate)

    @classmethod
    def from_config(cls, config, **params):
        params.setdefault("elitism_rate", config.elitism_rate)
        return cls(**params)

    @property
    def description(self) -> str:
        return f"Keeps top {round(self.elitism_rate * 100)}% of population"

    def elite_count(self, population_size: int) -> int:
        return int(round(self.elitism_rate * population_size))

    def replace(self, population, offspring, rng):
        return _best_first(list(population) + list(offspring))[: len(population)]

    def __repr__(self) -> str:
        return f"ElitistReplacement(elitism_rate={self.elitism_rate})"


@register_operator("replacement", "generational")
class GenerationalReplacement(ReplacementOperator):
    """Offspring replace the population; too few offspring are topped up with the best parents."""

    name = "Generational Replacement"
    description = "Completely replaces the population with offspring"

    def replace(self, population, offspring, rng):
        size = len(population)
        survivors = list(offspring[:size])
        if len(survivors) < size:
            survivors.extend(_best_first(population)[: size - len(survivors)])
        return survivors


@register_operator("replacement", "steady_state")
class SteadyStateReplacement(ReplacementOperator):
    """The ``replacement_count`` worst individuals make way for the best offspring."""

    name = "Steady State Replacement"

    def __init__(self, replacement_count: int = 2) -> None:
        if replacement_count < 1:
            raise ValueError("Replacement count must be positive")
        self.replacement_count = int(replacement_count)

    @property
    def description(self) -> str:
        return f"Replaces only the {self.replacement_count} worst individuals each generation"

    def replace(self, population, offspring, rng):
        next_population = sorted(population, key=lambda genome: genome.fitness())
        if not offspring:
            return next_population
        ranked = _best_first(offspring)
        count = min(self.replacement_count, len(ranked), len(next_population))
        next_population[:count] = ranked[:count]
        return next_population


@register_operator("replacement", "tournament")
class TournamentReplacement(ReplacementOperator):
    """Every child challenges the worst of a random tournament and takes its slot if fitter."""

    name = "Tournament Replacement"

    def __init__(self, tournament_size: int = 3) -> None:
        if tournament_size < 1:
            raise ValueError("Tournament size must be at least 1")
        self.tournament_size = int(tournament_size)

    @property
    def description(self) -> str:
        return f"Offspring compete against random tournaments of size {self.tournament_size}"

    def replace(self, population, offspring, rng):
        next_population = list(population)
        if not next_population:
            return next_population
        size = min(self.tournament_size, len(next_population))
        for child in offspring:
            contestants = rng.choice(len(next_population), size=size, replace=False)
            fitness = np.asarray([next_population[int(index)].fitness() for index in contestants])
            loser = int(contestants[int(np.argmin(fitness))])
            if child.fitness() > next_population[loser].fitness():
                next_population[loser] = child
        return next_population


@register_operator("replacement", "age_based")
class AgeBasedReplacement(ReplacementOperator):
    """
    Evict the oldest individuals regardless of fitness.

    Up to ``replacement_count`` (all offspring by default) of the oldest
    individuals are replaced by the best offspring, whose age starts at 0.
    Ageing the survivors is left to the engine, which increments
    :attr:`Genome.age` of everybody that lives on into the next generation.
    """

    name = "Age Based Replacement"
    description = "Replaces the oldest individuals to force turnover"

    def __init__(self, replacement_count: Optional[int] = None) -> None:
        if replacement_count is not None and replacement_count < 1:
            raise ValueError("Replacement count must be positive")
        self.replacement_count = replacement_count

    def replace(self, population, offspring, rng):
        next_population: List = sorted(population, key=lambda genome: genome.age, reverse=True)
        ranked = _best_first(offspring)
        count = min(len(ranked), len(next_population))
        if self.replacement_count is not None:
            count = min(count, self.replacement_count)
        for index in range(count):
            ranked[index].age = 0
            next_population[index] = ranked[index]
        return next_population


__all__ = [
    "ElitistReplacement",
    "GenerationalReplacement",
    "SteadyStateReplacement",
    "TournamentReplacement",
    "AgeBasedReplacement",
]
