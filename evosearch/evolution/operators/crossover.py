"""
Crossover operators: recombine two parents into two offspring.

All operators preserve the genome length and return brand new genomes; the
parents are never modified. When the parents cannot be recombined by an
operator (different lengths, non-numeric genes for the blending operators,
non-permutations for the order based ones) the parents are cloned instead.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, List, Sequence, Set

import numpy as np

from evosearch.exceptions import InvariantViolationError

from ..genome import Genome, declared_bounds, is_numeric_gene
from .base import CrossoverOperator
from .registry import register_operator


def _clip(genome: Genome, index: int, value: float) -> float:
    bounds = declared_bounds(genome, index)
    if bounds is None:
        return float(value)
    return float(min(max(value, bounds[0]), bounds[1]))


def _all_numeric(*gene_lists: Sequence[Any]) -> bool:
    return all(is_numeric_gene(gene) for genes in gene_lists for gene in genes)


def permutation_compatible(genes_a: Sequence[Any], genes_b: Sequence[Any]) -> bool:
    """Both parents are same-length arrangements of one set of distinct values."""
    if len(genes_a) != len(genes_b) or len(genes_a) < 2:
        return False
    values = set(genes_a)
    return len(values) == len(genes_a) and values == set(genes_b)


def ensure_permutation(child: Sequence[Any], reference: Sequence[Any]) -> None:
    """Raise :class:`InvariantViolationError` unless ``child`` rearranges ``reference``."""
    if Counter(child) != Counter(reference):
        missing = sorted((Counter(reference) - Counter(child)).elements(), key=repr)
        extra = sorted((Counter(child) - Counter(reference)).elements(), key=repr)
        raise InvariantViolationError(
            "Crossover produced an invalid permutation",
            context={"missing": missing, "duplicated": extra},
        )


@register_operator("crossover", "single_point")
class SinglePointCrossover(CrossoverOperator):
    name = "Single Point Crossover"
    description = "Swaps the gene tails of both parents after one random cut point"

    def crossover(self, parent_a, parent_b, rng):
        genes_a, genes_b = parent_a.genes.tolist(), parent_b.genes.tolist()
        size = len(genes_a)
        if size != len(genes_b) or size < 2:
            return self._not_applicable(parent_a, parent_b, "needs equal lengths of at least 2")
        point = int(rng.integers(1, size))
        return self._offspring(
            parent_a,
            parent_b,
            genes_a[:point] + genes_b[point:],
            genes_b[:point] + genes_a[point:],
        )


@register_operator("crossover", "two_point")
class TwoPointCrossover(CrossoverOperator):
    name = "Two Point Crossover"
    description = "Exchanges the segment between two distinct random cut points"

    def crossover(self, parent_a, parent_b, rng):
        genes_a, genes_b = parent_a.genes.tolist(), parent_b.genes.tolist()
        size = len(genes_a)
        if size != len(genes_b) or size < 3:
            return self._not_applicable(parent_a, parent_b, "needs equal lengths of at least 3")
        first, second = sorted(int(cut) for cut in rng.choice(np.arange(1, size), size=2, replace=False))
        return self._offspring(
            parent_a,
            parent_b,
            genes_a[:first] + genes_b[first:second] + genes_a[second:],
            genes_b[:first] + genes_a[first:second] + genes_b[second:],
        )


@register_operator("crossover", "uniform")
class UniformCrossover(CrossoverOperator):
    """Per gene, the first child inherits from parent A with probability ``bias``."""

    name = "Uniform Crossover"
    description = "Chooses every gene independently from either parent"

    def __init__(self, bias: float = 0.5) -> None:
        if not 0.0 <= bias <= 1.0:
            raise ValueError("Bias must be between 0 and 1")
        self.bias = float(bias)

    def crossover(self, parent_a, parent_b, rng):
        genes_a, genes_b = parent_a.genes.tolist(), parent_b.genes.tolist()
        if len(genes_a) != len(genes_b):
            return self._not_applicable(parent_a, parent_b, "parents differ in length")
        mask = rng.random(len(genes_a)) < self.bias
        child_a = [a if take else b for a, b, take in zip(genes_a, genes_b, mask)]
        child_b = [b if take else a for a, b, take in zip(genes_a, genes_b, mask)]
        return self._offspring(parent_a, parent_b, child_a, child_b)

    def __repr__(self) -> str:
        return f"UniformCrossover(bias={self.bias})"


@register_operator("crossover", "arithmetic")
class ArithmeticCrossover(CrossoverOperator):
    """Weighted average of numeric parents: ``alpha * a + (1 - alpha) * b`` and its mirror."""

    name = "Arithmetic Crossover"
    description = "Blends numeric parents with a fixed weight"

    def __init__(self, alpha: float = 0.5) -> None:
        if not 0.0 <= alpha <= 1.0:
            raise ValueError("Alpha must be between 0 and 1")
        self.alpha = float(alpha)

    def crossover(self, parent_a, parent_b, rng):
        genes_a, genes_b = parent_a.genes.tolist(), parent_b.genes.tolist()
        if len(genes_a) != len(genes_b):
            return self._not_applicable(parent_a, parent_b, "parents differ in length")
        if not _all_numeric(genes_a, genes_b):
            return self._not_applicable(parent_a, parent_b, "non-numeric genes")
        alpha = self.alpha
        child_a = [_clip(parent_a, i, alpha * x + (1 - alpha) * y) for i, (x, y) in enumerate(zip(genes_a, genes_b))]
        child_b = [_clip(parent_b, i, (1 - alpha) * x + alpha * y) for i, (x, y) in enumerate(zip(genes_a, genes_b))]
        return self._offspring(parent_a, parent_b, child_a, child_b)

    def __repr__(self) -> str:
        return f"ArithmeticCrossover(alpha={self.alpha})"


@register_operator("crossover", "sbx")
class SimulatedBinaryCrossover(CrossoverOperator):
    """
    Simulated binary crossover (Deb & Agrawal).

    Each gene pair recombines with probability ``gene_probability``. The
    spread factor ``beta`` follows a polynomial distribution with index
    ``eta``; a large ``eta`` keeps children close to their parents. Children
    are clipped to the bounds the genome declares.
    """

    name = "Simulated Binary Crossover"
    description = "Polynomial spread around numeric parents"

    def __init__(self, eta: float = 2.0, gene_probability: float = 0.5) -> None:
        if eta < 0:
            raise ValueError("Distribution index must be non-negative")
        if not 0.0 <= gene_probability <= 1.0:
            raise ValueError("Gene probability must be between 0 and 1")
        self.eta = float(eta)
        self.gene_probability = float(gene_probability)

    def spread_factor(self, u: float) -> float:
        exponent = 1.0 / (self.eta + 1.0)
        if u <= 0.5:
            return (2.0 * u) ** exponent
        return (1.0 / (2.0 * (1.0 - u))) ** exponent

    def crossover(self, parent_a, parent_b, rng):
        genes_a, genes_b = parent_a.genes.tolist(), parent_b.genes.tolist()
        if len(genes_a) != len(genes_b):
            return self._not_applicable(parent_a, parent_b, "parents differ in length")
        if not _all_numeric(genes_a, genes_b):
            return self._not_applicable(parent_a, parent_b, "non-numeric genes")
        child_a, child_b = list(genes_a), list(genes_b)
        for index, (x1, x2) in enumerate(zip(genes_a, genes_b)):
            if rng.random() >= self.gene_probability or abs(x1 - x2) <= 1e-14:
                continue
            beta = self.spread_factor(float(rng.random()))
            child_a[index] = _clip(parent_a, index, 0.5 * ((1 + beta) * x1 + (1 - beta) * x2))
            child_b[index] = _clip(parent_b, index, 0.5 * ((1 - beta) * x1 + (1 + beta) * x2))
        return self._offspring(parent_a, parent_b, child_a, child_b)

    def __repr__(self) -> str:
        return f"SimulatedBinaryCrossover(eta={self.eta})"


@register_operator("crossover", "order")
class OrderCrossover(CrossoverOperator):
    """
    Order crossover (OX).

    Child one keeps parent A's slice ``[start, stop]`` in place; the other
    positions, starting right after the slice and wrapping around, receive
    the genes of parent B in B's order (also read from just after the slice)
    skipping the ones already copied. Child two is built symmetrically.
    """

    name = "Order Crossover"
    description = "Keeps a slice of one parent and the relative order of the other"

    @staticmethod
    def order_child(donor: Sequence[Any], filler: Sequence[Any], start: int, stop: int) -> List[Any]:
        size = len(donor)
        child: List[Any] = [None] * size
        child[start:stop + 1] = donor[start:stop + 1]
        placed = set(donor[start:stop + 1])
        position = (stop + 1) % size
        for offset in range(size):
            gene = filler[(stop + 1 + offset) % size]
            if gene in placed:
                continue
            child[position] = gene
            placed.add(gene)
            position = (position + 1) % size
        return child

    def crossover(self, parent_a, parent_b, rng):
        genes_a, genes_b = parent_a.genes.tolist(), parent_b.genes.tolist()
        if not permutation_compatible(genes_a, genes_b):
            return self._not_applicable(parent_a, parent_b, "parents are not compatible permutations")
        start, stop = sorted(int(cut) for cut in rng.choice(len(genes_a), size=2, replace=False))
        child_a = self.order_child(genes_a, genes_b, start, stop)
        child_b = self.order_child(genes_b, genes_a, start, stop)
        ensure_permutation(child_a, genes_a)
        ensure_permutation(child_b, genes_a)
        return self._offspring(parent_a, parent_b, child_a, child_b)


@register_operator("crossover", "cycle")
class CycleCrossover(CrossoverOperator):
    """
    Cycle crossover (CX).

    Positions are partitioned into cycles: starting from position ``p``, the
    value of parent B at ``p`` is looked up in parent A, giving the next
    position, until the walk returns to ``p``. Whole cycles are inherited from
    alternating parents, so every child gene stays at a position it held in
    one of the parents.
    """

    name = "Cycle Crossover"
    description = "Inherits whole position cycles from alternating parents"

    @staticmethod
    def cycles(genes_a: Sequence[Any], genes_b: Sequence[Any]) -> List[List[int]]:
        position_in_a = {gene: index for index, gene in enumerate(genes_a)}
        visited = [False] * len(genes_a)
        result: List[List[int]] = []
        for start in range(len(genes_a)):
            if visited[start]:
                continue
            cycle: List[int] = []
            index = start
            while not visited[index]:
                visited[index] = True
                cycle.append(index)
                index = position_in_a[genes_b[index]]
            result.append(cycle)
        return result

    def crossover(self, parent_a, parent_b, rng):
        genes_a, genes_b = parent_a.genes.tolist(), parent_b.genes.tolist()
        if not permutation_compatible(genes_a, genes_b):
            return self._not_applicable(parent_a, parent_b, "parents are not compatible permutations")
        child_a, child_b = list(genes_a), list(genes_b)
        for number, cycle in enumerate(self.cycles(genes_a, genes_b)):
            if number % 2 == 0:
                continue
            for index in cycle:
                child_a[index], child_b[index] = genes_b[index], genes_a[index]
        ensure_permutation(child_a, genes_a)
        ensure_permutation(child_b, genes_a)
        return self._offspring(parent_a, parent_b, child_a, child_b)


class _GeneArena:
    """Remaining genes with O(1) membership, removal and random access."""

    def __init__(self, genes: Sequence[Any]) -> None:
        self.items: List[Any] = list(genes)
        self.slots: Dict[Any, int] = {gene: index for index, gene in enumerate(self.items)}

    def remove(self, gene: Any) -> None:
        index = self.slots.pop(gene)
        last = self.items.pop()
        if index < len(self.items):
            self.items[index] = last
            self.slots[last] = index

    def slot(self, gene: Any) -> int:
        return self.slots[gene]

    def __len__(self) -> int:
        return len(self.items)


@register_operator("crossover", "edge_recombination")
class EdgeRecombinationCrossover(CrossoverOperator):
    """
    Edge recombination (ERX) for tour-like permutations.

    An adjacency table maps every gene to its neighbours in both parents
    (tours are treated as cyclic). Starting from a parent's first gene, the
    next gene is the current gene's remaining neighbour with the fewest
    remaining neighbours of its own, ties broken at random; when the current
    gene has no neighbour left, a random remaining gene is taken. Used genes
    are removed from the arena and from every neighbour set, so each step
    costs time proportional to the degree of the current gene.
    """

    name = "Edge Recombination Crossover"
    description = "Builds children from edges shared by both parent tours"

    @staticmethod
    def adjacency(genes_a: Sequence[Any], genes_b: Sequence[Any]) -> Dict[Any, Set[Any]]:
        table: Dict[Any, Set[Any]] = {gene: set() for gene in genes_a}
        for parent in (genes_a, genes_b):
            size = len(parent)
            for index, gene in enumerate(parent):
                table[gene].add(parent[index - 1])
                table[gene].add(parent[(index + 1) % size])
        for gene, neighbours in table.items():
            neighbours.discard(gene)
        return table

    @staticmethod
    def build_child(
        first: Any,
        adjacency: Dict[Any, Set[Any]],
        genes: Sequence[Any],
        rng: np.random.Generator,
    ) -> List[Any]:
        table = {gene: set(neighbours) for gene, neighbours in adjacency.items()}
        arena = _GeneArena(genes)
        child: List[Any] = []
        current = first
        while True:
            child.append(current)
            arena.remove(current)
            candidates = table.pop(current)
            for neighbour in candidates:
                table[neighbour].discard(current)
            if not len(arena):
                return child
            if candidates:
                fewest = min(len(table[gene]) for gene in candidates)
                pool = sorted((gene for gene in candidates if len(table[gene]) == fewest), key=arena.slot)
            else:
                pool = arena.items
            current = pool[int(rng.integers(len(pool)))]

    def crossover(self, parent_a, parent_b, rng):
        genes_a, genes_b = parent_a.genes.tolist(), parent_b.genes.tolist()
        if not permutation_compatible(genes_a, genes_b):
            return self._not_applicable(parent_a, parent_b, "parents are not compatible permutations")
        table = self.adjacency(genes_a, genes_b)
        child_a = self.build_child(genes_a[0], table, genes_a, rng)
        child_b = self.build_child(genes_b[0], table, genes_a, rng)
        ensure_permutation(child_a, genes_a)
        ensure_permutation(child_b, genes_a)
        return self._offspring(parent_a, parent_b, child_a, child_b)


__all__ = [
    "SinglePointCrossover",
    "TwoPointCrossover",
    "UniformCrossover",
    "ArithmeticCrossover",
    "SimulatedBinaryCrossover",
    "OrderCrossover",
    "CycleCrossover",
    "EdgeRecombinationCrossover",
    "ensure_permutation",
    "permutation_compatible",
]
