"""
Mutation operators: perturb a single genome.

``rate`` is the per-gene probability for bit-flip, Gaussian and polynomial
mutation and the per-individual probability for the structural operators
(swap, adjacent swap, inversion, scramble). The input genome is never
modified: a clone is returned when nothing triggers, and a freshly spawned
genome (empty fitness cache) when genes changed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Sequence, Tuple, Union

import numpy as np

from ..genome import Genome, declared_bounds, is_numeric_gene
from .base import MutationOperator
from .registry import create_operator, register_operator

if TYPE_CHECKING:
    from ..monitor import GenerationStats

BoundsLike = Union[Tuple[float, float], Sequence[Tuple[float, float]], None]


def _segment(size: int, rng: np.random.Generator) -> Tuple[int, int]:
    first, second = sorted(int(point) for point in rng.integers(0, size, size=2))
    return first, second


@register_operator("mutation", "bit_flip")
class BitFlipMutation(MutationOperator):
    name = "Bit Flip Mutation"
    description = "Flips each bit with the given probability"

    def mutate(self, genome, rate, rng):
        genes = genome.genes.tolist()
        if any(gene not in (0, 1) for gene in genes):
            return genome.clone()
        mask = rng.random(len(genes)) < rate
        if not mask.any():
            return genome.clone()
        return self._rebuild(genome, [1 - gene if flip else gene for gene, flip in zip(genes, mask)])


@register_operator("mutation", "swap")
class SwapMutation(MutationOperator):
    name = "Swap Mutation"
    description = "Swaps two random positions of the chromosome"

    def mutate(self, genome, rate, rng):
        genes = genome.genes.tolist()
        if len(genes) < 2 or rng.random() >= rate:
            return genome.clone()
        i, j = (int(index) for index in rng.choice(len(genes), size=2, replace=False))
        genes[i], genes[j] = genes[j], genes[i]
        return self._rebuild(genome, genes)


@register_operator("mutation", "adjacent_swap")
class AdjacentSwapMutation(MutationOperator):
    """
    Swap a random gene with its right neighbour.

    Triggers with probability ``(1 - normalized_fitness) * rate``, so the
    best individuals of a generation are left alone and the worst ones are
    perturbed the most. Genomes that were never normalised, such as fresh
    crossover children, are returned unchanged.
    """

    name = "Adjacent Swap Mutation"
    description = "Fitness dependent swap of two neighbouring genes"

    def mutate(self, genome, rate, rng):
        genes = genome.genes.tolist()
        normalized = genome.normalized_fitness
        if normalized is None or len(genes) < 2 or rng.random() >= (1.0 - normalized) * rate:
            return genome.clone()
        index = int(rng.integers(0, len(genes) - 1))
        genes[index], genes[index + 1] = genes[index + 1], genes[index]
        return self._rebuild(genome, genes)


@register_operator("mutation", "gaussian")
class GaussianMutation(MutationOperator):
    """Zero-mean normal noise with standard deviation ``sigma`` on numeric genes."""

    name = "Gaussian Mutation"

    def __init__(self, sigma: float = 0.1) -> None:
        if sigma <= 0:
            raise ValueError("Sigma must be positive")
        self.sigma = float(sigma)

    @property
    def description(self) -> str:
        return f"Adds normal noise with standard deviation {self.sigma} to numeric genes"

    def mutate(self, genome, rate, rng):
        genes = genome.genes.tolist()
        changed = False
        for index, gene in enumerate(genes):
            if not is_numeric_gene(gene) or rng.random() >= rate:
                continue
            value = gene + float(rng.normal(0.0, self.sigma))
            bounds = declared_bounds(genome, index)
            if bounds is not None:
                value = min(max(value, bounds[0]), bounds[1])
            genes[index] = float(value)
            changed = True
        return self._rebuild(genome, genes) if changed else genome.clone()

    def __repr__(self) -> str:
        return f"GaussianMutation(sigma={self.sigma})"


@register_operator("mutation", "polynomial")
class PolynomialMutation(MutationOperator):
    """
    Bounded polynomial mutation (Deb & Goyal).

    Parameters
    ----------
    eta : float
        Distribution index; higher values produce smaller perturbations.
    bounds : tuple or list of tuples, optional
        ``(low, high)`` shared by every gene or one pair per gene. Without
        operator bounds a window of ±1 around the gene is used. The bounds a
        genome declares always apply on top, so results never leave them.
    """

    name = "Polynomial Mutation"

    def __init__(self, eta: float = 20.0, bounds: BoundsLike = None) -> None:
        if eta < 0:
            raise ValueError("Distribution index must be non-negative")
        self.eta = float(eta)
        self.bounds = bounds

    @property
    def description(self) -> str:
        return f"Bounded polynomial perturbation with distribution index {self.eta}"

    def window(self, genome: Genome, index: int, gene: float) -> Tuple[float, float]:
        if self.bounds is None:
            low, high = gene - 1.0, gene + 1.0
        elif isinstance(self.bounds[0], (tuple, list)):
            low, high = self.bounds[index]
        else:
            low, high = self.bounds
        declared = declared_bounds(genome, index)
        if declared is not None:
            narrowed = max(low, declared[0]), min(high, declared[1])
            low, high = narrowed if narrowed[0] <= narrowed[1] else declared
        return float(low), float(high)

    def perturb(self, gene: float, low: float, high: float, u: float) -> float:
        span = high - low
        gene = min(max(gene, low), high)
        delta1 = (gene - low) / span
        delta2 = (high - gene) / span
        exponent = 1.0 / (self.eta + 1.0)
        if u <= 0.5:
            value = 2.0 * u + (1.0 - 2.0 * u) * (1.0 - delta1) ** (self.eta + 1.0)
            delta_q = value ** exponent - 1.0
        else:
            value = 2.0 * (1.0 - u) + 2.0 * (u - 0.5) * (1.0 - delta2) ** (self.eta + 1.0)
            delta_q = 1.0 - value ** exponent
        return float(min(max(gene + delta_q * span, low), high))

    def mutate(self, genome, rate, rng):
        genes = genome.genes.tolist()
        changed = False
        for index, gene in enumerate(genes):
            if not is_numeric_gene(gene) or rng.random() >= rate:
                continue
            low, high = self.window(genome, index, float(gene))
            if high <= low:
                continue
            genes[index] = self.perturb(float(gene), low, high, float(rng.random()))
            changed = True
        return self._rebuild(genome, genes) if changed else genome.clone()

    def __repr__(self) -> str:
        return f"PolynomialMutation(eta={self.eta}, bounds={self.bounds!r})"


@register_operator("mutation", "inversion")
class InversionMutation(MutationOperator):
    name = "Inversion Mutation"
    description = "Reverses a random contiguous segment"

    def mutate(self, genome, rate, rng):
        genes = genome.genes.tolist()
        if len(genes) < 2 or rng.random() >= rate:
            return genome.clone()
        start, stop = _segment(len(genes), rng)
        if start == stop:
            return genome.clone()
        genes[start:stop + 1] = genes[start:stop + 1][::-1]
        return self._rebuild(genome, genes)


@register_operator("mutation", "scramble")
class ScrambleMutation(MutationOperator):
    name = "Scramble Mutation"
    description = "Shuffles a random contiguous segment"

    def mutate(self, genome, rate, rng):
        genes = genome.genes.tolist()
        if len(genes) < 2 or rng.random() >= rate:
            return genome.clone()
        start, stop = _segment(len(genes), rng)
        if start == stop:
            return genome.clone()
        segment = genes[start:stop + 1]
        genes[start:stop + 1] = [segment[int(position)] for position in rng.permutation(len(segment))]
        return self._rebuild(genome, genes)


@register_operator("mutation", "adaptive")
class AdaptiveMutation(MutationOperator):
    """
    Wraps another mutation operator and drives its rate from population diversity.

    The effective rate moves linearly between ``max_rate`` (no diversity left)
    and ``min_rate`` (diversity at or above ``reference_diversity``). When no
    reference is given, the first positive diversity observed becomes the
    reference, so the rate starts low and rises as the population converges.
    The rate handed to :meth:`mutate` by the engine is ignored.
    """

    def __init__(
        self,
        base: MutationOperator,
        min_rate: float = 0.01,
        max_rate: float = 0.1,
        reference_diversity: Optional[float] = None,
    ) -> None:
        if not 0.0 <= min_rate <= max_rate <= 1.0:
            raise ValueError("Rates must satisfy 0 <= min_rate <= max_rate <= 1")
        if reference_diversity is not None and reference_diversity <= 0:
            raise ValueError("Reference diversity must be positive")
        self.base = base
        self.min_rate = float(min_rate)
        self.max_rate = float(max_rate)
        self.initial_reference = reference_diversity
        self.reference_diversity = reference_diversity
        self.diversity: Optional[float] = None

    @classmethod
    def from_config(cls, config, base: Any = "swap", base_params: Optional[dict] = None, **params):
        if isinstance(base, str):
            base = create_operator("mutation", base, config, **(base_params or {}))
        return cls(base, **params)

    @property
    def name(self) -> str:  # type: ignore[override]
        return f"Adaptive {self.base.name}"

    @property
    def description(self) -> str:  # type: ignore[override]
        return (
            f"{self.base.description}; rate adapts to diversity, currently {self.current_rate:.4f} "
            f"(range {self.min_rate}-{self.max_rate})"
        )

    @property
    def current_rate(self) -> float:
        if self.diversity is None or not self.reference_diversity:
            return self.max_rate
        factor = 1.0 - min(self.diversity / self.reference_diversity, 1.0)
        return self.min_rate + factor * (self.max_rate - self.min_rate)

    def update_diversity(self, diversity: float) -> None:
        self.diversity = max(float(diversity), 0.0)
        if self.reference_diversity is None and self.diversity > 0:
            self.reference_diversity = self.diversity

    def observe(self, stats: "GenerationStats") -> None:
        self.update_diversity(stats.diversity)
        self.base.observe(stats)

    def reset(self) -> None:
        self.reference_diversity = self.initial_reference
        self.diversity = None
        self.base.reset()

    def mutate(self, genome, rate, rng):
        return self.base.mutate(genome, self.current_rate, rng)

    def __repr__(self) -> str:
        return f"AdaptiveMutation({self.base!r}, min_rate={self.min_rate}, max_rate={self.max_rate})"


__all__ = [
    "BitFlipMutation",
    "SwapMutation",
    "AdjacentSwapMutation",
    "GaussianMutation",
    "PolynomialMutation",
    "InversionMutation",
    "ScrambleMutation",
    "AdaptiveMutation",
]
