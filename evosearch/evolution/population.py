"""
Population utilities for EvoSearch evolution cycles.

Distance metrics between genomes, population diversity, descriptive fitness
statistics and the per-generation fitness normalisation all live here, next
to the `PopulationManager` that seeds and holds the population for the
engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence

import numpy as np

from .genome import BinaryGenome, Genome, PermutationGenome, RealGenome, is_numeric_gene


def _is_numeric(genes: Sequence[Any]) -> bool:
    return all(is_numeric_gene(gene) for gene in genes)


def hamming_distance(genes_a: Sequence[Any], genes_b: Sequence[Any]) -> float:
    """Number of positions holding different genes."""
    return float(sum(1 for a, b in zip(genes_a, genes_b) if a != b))


def euclidean_distance(genes_a: Sequence[float], genes_b: Sequence[float]) -> float:
    return float(np.linalg.norm(np.asarray(genes_a, dtype=float) - np.asarray(genes_b, dtype=float)))


def genome_distance(first: Genome, second: Genome) -> float:
    """
    Distance between two genomes.

    Euclidean for continuous genomes, Hamming otherwise. Binary genomes are
    numeric but discrete, so they use Hamming too. Genomes of different
    lengths are not comparable and score 0.
    """

    genes_a, genes_b = list(first.genes), list(second.genes)
    if len(genes_a) != len(genes_b):
        return 0.0
    if _is_continuous(first) and _is_continuous(second):
        return euclidean_distance(genes_a, genes_b)
    return hamming_distance(genes_a, genes_b)


def _is_continuous(genome: Genome) -> bool:
    if isinstance(genome, RealGenome):
        return True
    if isinstance(genome, (BinaryGenome, PermutationGenome)):
        return False
    genes = list(genome.genes)
    return _is_numeric(genes) and any(isinstance(gene, float) for gene in genes)


def average_pairwise_diversity(population: Sequence[Genome]) -> float:
    """
    Mean distance over all unordered pairs of the population.

    Vectorised with numpy when every genome has the same length; mixed
    lengths fall back to :func:`genome_distance` pair by pair.
    """

    size = len(population)
    if size <= 1:
        return 0.0
    rows = [list(genome.genes) for genome in population]
    lengths = {len(row) for row in rows}
    if len(lengths) != 1:
        total = sum(
            genome_distance(population[i], population[j]) for i in range(size) for j in range(i + 1, size)
        )
        return float(total / (size * (size - 1) / 2))

    upper = np.triu_indices(size, k=1)
    if all(_is_continuous(genome) for genome in population):
        matrix = np.asarray(rows, dtype=float)
        deltas = matrix[:, None, :] - matrix[None, :, :]
        distances = np.sqrt((deltas ** 2).sum(axis=-1))
    else:
        if all(_is_numeric(row) for row in rows):
            matrix = np.asarray(rows, dtype=float)
        else:
            matrix = np.empty((size, len(rows[0])), dtype=object)
            for index, row in enumerate(rows):
                for position, gene in enumerate(row):
                    matrix[index, position] = gene
        distances = (matrix[:, None, :] != matrix[None, :, :]).sum(axis=-1).astype(float)
    return float(distances[upper].mean())


@dataclass(frozen=True)
class FitnessSummary:
    """Descriptive statistics of a population's fitness values."""

    size: int
    best: float
    worst: float
    mean: float
    median: float
    std: float

    def as_dict(self) -> dict:
        return {
            "size": self.size,
            "best_fitness": self.best,
            "worst_fitness": self.worst,
            "average_fitness": self.mean,
            "median_fitness": self.median,
            "fitness_std": self.std,
        }


def fitness_statistics(population: Sequence[Genome]) -> FitnessSummary:
    """Best, worst, mean, median and population standard deviation of fitness."""
    if not population:
        raise ValueError("Cannot summarise an empty population")
    values = np.asarray([genome.fitness() for genome in population], dtype=float)
    return FitnessSummary(
        size=len(population),
        best=float(values.max()),
        worst=float(values.min()),
        mean=float(values.mean()),
        median=float(np.median(values)),
        std=float(values.std()),
    )


def best_individual(population: Sequence[Genome]) -> Genome:
    """Highest fitness genome; ties go to the first one encountered."""
    if not population:
        raise ValueError("Cannot pick the best individual of an empty population")
    return max(population, key=lambda genome: genome.fitness())


def rank_by_fitness(population: Sequence[Genome], reverse: bool = True) -> List[Genome]:
    """Stable sort by fitness, best first unless ``reverse`` is False."""
    return sorted(population, key=lambda genome: genome.fitness(), reverse=reverse)


def normalize_fitness(population: Sequence[Genome]) -> None:
    """
    Rescale fitness to [0, 1] on each genome's ``normalized_fitness``.

    The best individual gets 1 and the worst 0. When every fitness is equal
    everybody gets 1.
    """

    if not population:
        return
    values = [genome.fitness() for genome in population]
    best, worst = max(values), min(values)
    spread = best - worst
    for genome, value in zip(population, values):
        genome.normalized_fitness = (value - worst) / spread if spread > 0 else 1.0


@dataclass
class PopulationManager:
    """Container around the list of genomes the engine evolves."""

    factory: Callable[..., Genome]
    population_size: int
    params: Any = None
    genomes: List[Genome] = field(default_factory=list)

    def seed(self, rng: Optional[np.random.Generator] = None) -> None:
        """Populate the manager with fresh random genomes."""
        self.genomes = [self.factory(self.params, rng) for _ in range(self.population_size)]

    def sort(self, key: Optional[Callable[[Genome], float]] = None, reverse: bool = True) -> None:
        """Sort genomes in place, by fitness unless another key is given."""
        self.genomes.sort(key=key or (lambda genome: genome.fitness()), reverse=reverse)

    def top_k(self, k: int) -> Sequence[Genome]:
        """Return the best performing genomes without reordering the population."""
        return rank_by_fitness(self.genomes)[:k]

    def best(self) -> Genome:
        return best_individual(self.genomes)

    def statistics(self) -> FitnessSummary:
        return fitness_statistics(self.genomes)

    def diversity(self) -> float:
        return average_pairwise_diversity(self.genomes)

    def normalize(self) -> None:
        normalize_fitness(self.genomes)

    def __len__(self) -> int:
        return len(self.genomes)

    def __iter__(self):
        return iter(self.genomes)
