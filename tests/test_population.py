"""
Tests for population utilities: distances, diversity, statistics and normalisation.
"""

import numpy as np
import pytest

from evosearch.evolution.genome import SequenceSpec
from evosearch.evolution.population import (
    PopulationManager,
    average_pairwise_diversity,
    best_individual,
    euclidean_distance,
    fitness_statistics,
    genome_distance,
    hamming_distance,
    normalize_fitness,
    rank_by_fitness,
)
from evosearch.evolution.problems import OneMaxGenome, SphereGenome


def test_distance_metrics() -> None:
    assert hamming_distance([0, 1, 1], [1, 1, 0]) == 2.0
    assert euclidean_distance([0.0, 0.0], [3.0, 4.0]) == pytest.approx(5.0)


def test_genome_distance_picks_metric_by_encoding(letter_genome_type) -> None:
    """Real genomes use Euclidean distance, discrete ones Hamming."""
    assert genome_distance(SphereGenome([0.0, 0.0, 0.0]), SphereGenome([3.0, 4.0, 0.0])) == pytest.approx(5.0)
    assert genome_distance(OneMaxGenome([0, 0, 0]), OneMaxGenome([1, 1, 0])) == 2.0
    letters = letter_genome_type
    assert genome_distance(letters(list("abcd")), letters(list("abdd"))) == 1.0
    assert genome_distance(OneMaxGenome([0, 1]), OneMaxGenome([0, 1, 1])) == 0.0


def test_average_pairwise_diversity() -> None:
    population = [OneMaxGenome([0, 0]), OneMaxGenome([1, 1]), OneMaxGenome([1, 0])]
    # pairs: (00, 11) = 2, (00, 10) = 1, (11, 10) = 1
    assert average_pairwise_diversity(population) == pytest.approx(4 / 3)
    assert average_pairwise_diversity(population[:1]) == 0.0


def test_average_pairwise_diversity_for_categorical_genes(letter_genome_type) -> None:
    population = [letter_genome_type(list("aaaa")), letter_genome_type(list("abab")), letter_genome_type(list("aaab"))]
    # pairs: 2, 1, 1
    assert average_pairwise_diversity(population) == pytest.approx(4 / 3)


def test_average_pairwise_diversity_continuous() -> None:
    population = [SphereGenome([0.0, 0.0, 0.0]), SphereGenome([3.0, 4.0, 0.0])]
    assert average_pairwise_diversity(population) == pytest.approx(5.0)


def test_fitness_statistics(scored_population) -> None:
    summary = fitness_statistics(scored_population([1.0, 2.0, 3.0, 10.0]))
    assert summary.size == 4
    assert summary.best == 10.0
    assert summary.worst == 1.0
    assert summary.mean == pytest.approx(4.0)
    assert summary.median == pytest.approx(2.5)
    assert summary.std == pytest.approx(np.std([1.0, 2.0, 3.0, 10.0]))
    assert summary.as_dict()["average_fitness"] == pytest.approx(4.0)
    with pytest.raises(ValueError):
        fitness_statistics([])


def test_best_individual_prefers_first_on_ties(scored_population) -> None:
    population = scored_population([1.0, 5.0, 5.0])
    assert best_individual(population) is population[1]
    ranked = rank_by_fitness(population)
    assert ranked[0] is population[1]
    assert ranked[-1] is population[0]


def test_normalize_fitness(scored_population) -> None:
    population = scored_population([0.0, 5.0, 10.0])
    normalize_fitness(population)
    assert [genome.normalized_fitness for genome in population] == [0.0, 0.5, 1.0]
    flat = scored_population([3.0, 3.0])
    normalize_fitness(flat)
    assert [genome.normalized_fitness for genome in flat] == [1.0, 1.0]


def test_population_seed_initialises_the_requested_size() -> None:
    """Seeding a population should create the requested number of genomes."""
    manager = PopulationManager(factory=OneMaxGenome.random_instance, population_size=5, params=SequenceSpec(8))
    manager.seed(np.random.default_rng(0))
    assert len(manager) == 5
    assert all(len(genome) == 8 for genome in manager)


def test_population_manager_ranking() -> None:
    manager = PopulationManager(factory=OneMaxGenome.random_instance, population_size=3)
    manager.genomes = [OneMaxGenome([0, 0]), OneMaxGenome([1, 1]), OneMaxGenome([1, 0])]
    assert [genome.fitness() for genome in manager.top_k(2)] == [2.0, 1.0]
    assert manager.best().fitness() == 2.0
    manager.sort()
    assert [genome.fitness() for genome in manager.genomes] == [2.0, 1.0, 0.0]
    assert manager.statistics().best == 2.0
