"""
Abstract interfaces of the four operator families.

Every concrete operator is a pure function of its inputs plus the random
generator handed in by the engine. The only state an operator may keep is
its own schedule (Boltzmann temperature, adaptive mutation rate), which it
updates from :meth:`Operator.observe` or from its own calls.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, List, Sequence, Tuple

import numpy as np
from loguru import logger

from ..genome import Genome

if TYPE_CHECKING:
    from ..config import EvolutionConfig
    from ..monitor import GenerationStats


class Operator(ABC):
    """Common behaviour of selection, crossover, mutation and replacement operators."""

    family: str = ""
    name: str = ""
    description: str = ""

    @classmethod
    def from_config(cls, config: "EvolutionConfig", **params: Any) -> "Operator":
        """Instantiate from engine configuration; subclasses pull defaults from it."""
        return cls(**params)

    def observe(self, stats: "GenerationStats") -> None:
        """Hook called once per generation after the monitor recorded ``stats``."""

    def reset(self) -> None:
        """Restore the operator's initial schedule before a new run."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def __str__(self) -> str:
        return f"{self.name}: {self.description}"


class SelectionOperator(Operator):
    family = "selection"

    @abstractmethod
    def select(self, population: Sequence[Genome], count: int, rng: np.random.Generator) -> List[Genome]:
        """Return exactly ``count`` members of ``population`` (with replacement)."""


class CrossoverOperator(Operator):
    family = "crossover"

    @abstractmethod
    def crossover(self, parent_a: Genome, parent_b: Genome, rng: np.random.Generator) -> Tuple[Genome, ...]:
        """Recombine two parents into new, standalone offspring."""

    def _not_applicable(self, parent_a: Genome, parent_b: Genome, reason: str) -> Tuple[Genome, Genome]:
        logger.debug("{} not applicable ({}); cloning parents", self.name, reason)
        return parent_a.clone(), parent_b.clone()

    def _offspring(self, parent_a: Genome, parent_b: Genome, genes_a: list, genes_b: list) -> Tuple[Genome, Genome]:
        """Spawn children, or clone the parents when the genes break the encoding."""
        try:
            return parent_a.spawn(genes_a), parent_b.spawn(genes_b)
        except ValueError as exc:
            return self._not_applicable(parent_a, parent_b, str(exc))


class MutationOperator(Operator):
    family = "mutation"

    @abstractmethod
    def mutate(self, genome: Genome, rate: float, rng: np.random.Generator) -> Genome:
        """Return a perturbed copy of ``genome``; the input is never modified."""

    def _rebuild(self, genome: Genome, genes: list) -> Genome:
        """Copy with new genes (fresh fitness cache), or a plain clone when invalid."""
        try:
            return genome.spawn(genes)
        except ValueError as exc:
            logger.debug("{} not applicable ({}); returning clone", self.name, exc)
            return genome.clone()


class ReplacementOperator(Operator):
    family = "replacement"

    @abstractmethod
    def replace(
        self,
        population: Sequence[Genome],
        offspring: Sequence[Genome],
        rng: np.random.Generator,
    ) -> List[Genome]:
        """Fold ``offspring`` into ``population``; the result keeps the population size."""


__all__ = [
    "Operator",
    "SelectionOperator",
    "CrossoverOperator",
    "MutationOperator",
    "ReplacementOperator",
]
