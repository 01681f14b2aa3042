"""
Representation of EvoSearch genomes.

A genome is an ordered, fixed-length sequence of genes with a cached fitness
value. Problem-specific encodings subclass :class:`Genome` (or one of the base
encodings below) and implement :meth:`Genome.evaluate` and
:meth:`Genome.random_instance`.

Problem data is never stored on the class. It lives in an immutable parameter
object handed to :meth:`Genome.random_instance` and retained by every genome
created from it, so several problems can be searched side by side and worker
threads can share it read-only.
"""

from __future__ import annotations

import numbers
from abc import ABC, abstractmethod
from collections.abc import MutableSequence
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Type, TypeVar, Union

import numpy as np

G = TypeVar("G", bound="Genome")

Bound = Union[float, Sequence[float]]


def is_numeric_gene(value: Any) -> bool:
    """True for real-valued genes; booleans are treated as categorical."""
    return isinstance(value, numbers.Real) and not isinstance(value, (bool, np.bool_))


def make_rng(rng: Optional[np.random.Generator] = None) -> np.random.Generator:
    """Return ``rng`` or a fresh, unseeded generator."""
    return rng if rng is not None else np.random.default_rng()


@dataclass(frozen=True)
class SequenceSpec:
    """Parameters of a fixed-length discrete encoding."""

    length: int

    def __post_init__(self) -> None:
        if self.length < 1:
            raise ValueError(f"Genome length must be positive, got {self.length}")


@dataclass(frozen=True)
class BoundedSpec:
    """Parameters of a bounded real-valued encoding.

    ``lower`` and ``upper`` are either scalars shared by every gene or
    per-gene sequences of length ``length``.
    """

    length: int
    lower: Bound = -100.0
    upper: Bound = 100.0

    def __post_init__(self) -> None:
        if self.length < 1:
            raise ValueError(f"Genome length must be positive, got {self.length}")
        for index in range(self.length):
            low, high = self.bounds_for(index)
            if low > high:
                raise ValueError(f"Lower bound {low} exceeds upper bound {high} for gene {index}")

    def bounds_for(self, index: int) -> Tuple[float, float]:
        low = self.lower[index] if isinstance(self.lower, Sequence) else self.lower
        high = self.upper[index] if isinstance(self.upper, Sequence) else self.upper
        return float(low), float(high)


class GeneSequence(MutableSequence):
    """Fixed-length gene container that invalidates its owner's fitness on writes."""

    __slots__ = ("_data", "_owner")

    def __init__(self, owner: "Genome", values: Iterable[Any]) -> None:
        self._data: List[Any] = list(values)
        self._owner = owner

    def __getitem__(self, index):
        return self._data[index]

    def __setitem__(self, index, value) -> None:
        if isinstance(index, slice):
            values = list(value)
            if len(range(*index.indices(len(self._data)))) != len(values):
                raise ValueError("Slice assignment must preserve the genome length")
            self._data[index] = values
        else:
            self._data[index] = value
        self._owner.invalidate_fitness()

    def __delitem__(self, index) -> None:
        raise TypeError("Genome length is fixed; genes cannot be deleted")

    def insert(self, index: int, value: Any) -> None:
        raise TypeError("Genome length is fixed; genes cannot be inserted")

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self):
        return iter(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, GeneSequence):
            return self._data == other._data
        if isinstance(other, (list, tuple)):
            return self._data == list(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def tolist(self) -> List[Any]:
        return list(self._data)

    def __repr__(self) -> str:
        return repr(self._data)


class Genome(ABC):
    """
    Base class for every candidate solution.

    Subclasses implement :meth:`evaluate` (the raw fitness function, higher is
    better) and :meth:`random_instance`. Everything else, caching included, is
    handled here.

    Attributes
    ----------
    params : object
        Immutable problem parameters shared by all genomes of a run.
    normalized_fitness : float or None
        Fitness rescaled to [0, 1] within the current population. Only valid
        for the generation that computed it.
    age : int
        Number of generations this individual has survived.
    """

    def __init__(self, genes: Iterable[Any], params: Any = None) -> None:
        self.params = params
        self._genes = GeneSequence(self, genes)
        self._fitness: Optional[float] = None
        self.normalized_fitness: Optional[float] = None
        self.age = 0
        self.validate()

    @property
    def genes(self) -> GeneSequence:
        return self._genes

    def validate(self) -> None:
        """Check encoding specific invariants; raise ``ValueError`` when broken."""
        if len(self._genes) == 0:
            raise ValueError(f"{type(self).__name__} requires at least one gene")

    @abstractmethod
    def evaluate(self) -> float:
        """Compute the fitness of the current genes."""

    def fitness(self) -> float:
        """Return the cached fitness, computing it on first access."""
        if self._fitness is None:
            self._fitness = float(self.evaluate())
        return self._fitness

    @property
    def is_evaluated(self) -> bool:
        return self._fitness is not None

    def invalidate_fitness(self) -> None:
        self._fitness = None

    def clone(self: G) -> G:
        """Copy genes and params; the copy owns its cache and starts at age 0."""
        twin = self.spawn(self._genes.tolist())
        twin._fitness = self._fitness
        twin.normalized_fitness = self.normalized_fitness
        return twin

    def spawn(self: G, genes: Iterable[Any]) -> G:
        """Build a sibling of the same type and params carrying ``genes``."""
        return type(self)(genes, self.params)

    @classmethod
    @abstractmethod
    def random_instance(cls: Type[G], params: Any = None, rng: Optional[np.random.Generator] = None) -> G:
        """Create a random individual for the initial population."""

    def __len__(self) -> int:
        return len(self._genes)

    def __getitem__(self, index):
        return self._genes[index]

    def __setitem__(self, index, value) -> None:
        self._genes[index] = value

    def __repr__(self) -> str:
        fitness = f"{self._fitness:.6g}" if self._fitness is not None else "?"
        return f"{type(self).__name__}(genes={self._genes!r}, fitness={fitness})"


class BinaryGenome(Genome):
    """Genes restricted to 0 and 1."""

    def validate(self) -> None:
        super().validate()
        if any(gene not in (0, 1) for gene in self._genes):
            raise ValueError("Binary genome must contain only 0s and 1s")

    @classmethod
    def random_instance(cls, params: Any = None, rng: Optional[np.random.Generator] = None):
        params = params if params is not None else SequenceSpec(length=20)
        rng = make_rng(rng)
        return cls([int(bit) for bit in rng.integers(0, 2, size=params.length)], params)

    def flip(self, position: int) -> None:
        self._genes[position] = 1 - self._genes[position]

    def count_ones(self) -> int:
        return sum(1 for gene in self._genes if gene == 1)


class PermutationGenome(Genome):
    """Genes form a permutation of ``0..n-1``."""

    def validate(self) -> None:
        super().validate()
        if sorted(self._genes) != list(range(len(self._genes))):
            raise ValueError(f"Invalid permutation: {self._genes!r}")

    @classmethod
    def random_instance(cls, params: Any = None, rng: Optional[np.random.Generator] = None):
        params = params if params is not None else SequenceSpec(length=10)
        rng = make_rng(rng)
        return cls([int(gene) for gene in rng.permutation(params.length)], params)

    def swap(self, i: int, j: int) -> None:
        self._genes[i], self._genes[j] = self._genes[j], self._genes[i]

    def reverse_segment(self, start: int, finish: int) -> None:
        """Reverse genes ``start..finish`` inclusive."""
        self._genes[start:finish + 1] = self._genes[start:finish + 1][::-1]


class RealGenome(Genome):
    """Numeric genes constrained to the bounds declared by a :class:`BoundedSpec`."""

    def validate(self) -> None:
        super().validate()
        for index, gene in enumerate(self._genes):
            if not is_numeric_gene(gene):
                raise ValueError(f"Gene {index} is not numeric: {gene!r}")
            low, high = self.bounds_for(index)
            if not low <= gene <= high:
                raise ValueError(f"Gene {gene} out of bounds [{low}, {high}]")

    @classmethod
    def random_instance(cls, params: Any = None, rng: Optional[np.random.Generator] = None):
        params = params if params is not None else BoundedSpec(length=3)
        rng = make_rng(rng)
        genes = []
        for index in range(params.length):
            low, high = params.bounds_for(index)
            genes.append(float(rng.uniform(low, high)))
        return cls(genes, params)

    def bounds_for(self, index: int) -> Tuple[float, float]:
        if isinstance(self.params, BoundedSpec):
            return self.params.bounds_for(index)
        return -np.inf, np.inf

    def clip(self, index: int, value: float) -> float:
        low, high = self.bounds_for(index)
        return float(min(max(value, low), high))


def declared_bounds(genome: Genome, index: int) -> Optional[Tuple[float, float]]:
    """Bounds a genome declares for gene ``index`` or ``None``."""
    bounds_for = getattr(genome, "bounds_for", None)
    if bounds_for is None:
        return None
    low, high = bounds_for(index)
    if np.isinf(low) and np.isinf(high):
        return None
    return float(low), float(high)


__all__ = [
    "Genome",
    "GeneSequence",
    "BinaryGenome",
    "PermutationGenome",
    "RealGenome",
    "SequenceSpec",
    "BoundedSpec",
    "declared_bounds",
    "is_numeric_gene",
    "make_rng",
]
