"""
Reference problems built on the base encodings.

These genomes are small, well understood benchmarks: OneMax (bit strings),
Sphere (continuous minimisation), 0/1 Knapsack and the travelling salesman
problem. They double as examples of how a problem-specific genome honours the
contract: implement ``evaluate`` and keep problem data in the params object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

import numpy as np

from .genome import BinaryGenome, BoundedSpec, PermutationGenome, RealGenome, SequenceSpec, make_rng


class OneMaxGenome(BinaryGenome):
    """Fitness is the number of set bits."""

    def evaluate(self) -> float:
        return float(self.count_ones())


SPHERE_BOUNDS = (-5.12, 5.12)


class SphereGenome(RealGenome):
    """Sphere function, negated so that maximising fitness minimises ``sum(x**2)``."""

    @classmethod
    def random_instance(cls, params=None, rng: Optional[np.random.Generator] = None):
        params = params if params is not None else BoundedSpec(3, *SPHERE_BOUNDS)
        return super().random_instance(params, rng)

    def evaluate(self) -> float:
        return -float(sum(gene * gene for gene in self.genes))


@dataclass(frozen=True)
class KnapsackSpec:
    """Items as ``(value, weight)`` pairs and the sack capacity."""

    items: Tuple[Tuple[float, float], ...]
    capacity: float

    @classmethod
    def from_lists(cls, values: Sequence[float], weights: Sequence[float], capacity: float) -> "KnapsackSpec":
        if len(values) != len(weights):
            raise ValueError("Values and weights must have the same length")
        return cls(tuple(zip(map(float, values), map(float, weights))), float(capacity))

    @property
    def length(self) -> int:
        return len(self.items)


class KnapsackGenome(BinaryGenome):
    """Bit ``i`` packs item ``i``. Overweight sacks score minus their weight."""

    def evaluate(self) -> float:
        value = weight = 0.0
        for gene, (item_value, item_weight) in zip(self.genes, self.params.items):
            if gene == 1:
                value += item_value
                weight += item_weight
        return -weight if weight > self.params.capacity else value


@dataclass(frozen=True)
class CostMatrix:
    """Pairwise travel costs between cities.

    ``closed`` adds the leg from the last city back to the first.
    """

    costs: Tuple[Tuple[float, ...], ...]
    closed: bool = False
    length: int = field(init=False)

    def __post_init__(self) -> None:
        size = len(self.costs)
        if size < 2:
            raise ValueError("A cost matrix needs at least two cities")
        if any(len(row) != size for row in self.costs):
            raise ValueError("Cost matrix must be square")
        object.__setattr__(self, "length", size)

    @classmethod
    def from_array(cls, costs, closed: bool = False) -> "CostMatrix":
        array = np.asarray(costs, dtype=float)
        return cls(tuple(tuple(float(value) for value in row) for row in array), closed)

    def cost(self, origin: int, destination: int) -> float:
        return self.costs[origin][destination]


class TSPGenome(PermutationGenome):
    """A route visiting every city once; fitness is the negated travel cost."""

    @classmethod
    def random_instance(cls, params=None, rng: Optional[np.random.Generator] = None):
        if params is None:
            raise ValueError("TSPGenome.random_instance requires a CostMatrix")
        rng = make_rng(rng)
        return cls([int(city) for city in rng.permutation(params.length)], params)

    def evaluate(self) -> float:
        route = list(self.genes)
        legs = list(zip(route, route[1:]))
        if self.params.closed:
            legs.append((route[-1], route[0]))
        return -sum(self.params.cost(a, b) for a, b in legs)

    @property
    def total_distance(self) -> float:
        return -self.fitness()


def random_cost_matrix(cities: int, rng: Optional[np.random.Generator] = None, closed: bool = False) -> CostMatrix:
    """Euclidean distances between ``cities`` random points of the unit square."""
    rng = make_rng(rng)
    points = rng.random((cities, 2))
    deltas = points[:, None, :] - points[None, :, :]
    return CostMatrix.from_array(np.sqrt((deltas ** 2).sum(axis=-1)), closed=closed)


__all__ = [
    "OneMaxGenome",
    "SphereGenome",
    "SPHERE_BOUNDS",
    "KnapsackSpec",
    "KnapsackGenome",
    "CostMatrix",
    "TSPGenome",
    "random_cost_matrix",
    "SequenceSpec",
]
