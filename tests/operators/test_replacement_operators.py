"""Tests for the replacement operators."""

import pytest

from evosearch.evolution import EvolutionConfig
from evosearch.evolution.operators import (
    AgeBasedReplacement,
    ElitistReplacement,
    GenerationalReplacement,
    SteadyStateReplacement,
    TournamentReplacement,
    create_operator,
    list_operators,
)


def values(genomes):
    return [genome.fitness() for genome in genomes]


@pytest.mark.parametrize("name", list_operators()["replacement"])
@pytest.mark.parametrize("offspring_count", [0, 3, 6, 9])
def test_replacement_keeps_population_size(name, offspring_count, rng, scored_population) -> None:
    """Whatever the number of offspring, the population size never changes."""
    population = scored_population([4.0, 2.0, 7.0, 1.0, 3.0, 5.0])
    offspring = scored_population([float(value) for value in range(offspring_count)])
    before = list(population)
    result = create_operator("replacement", name).replace(population, offspring, rng)
    assert len(result) == 6
    assert population == before


def test_elitist_keeps_the_fittest(rng, scored_population) -> None:
    population = scored_population([1.0, 2.0, 3.0])
    offspring = scored_population([0.0, 5.0])
    assert values(ElitistReplacement().replace(population, offspring, rng)) == [5.0, 3.0, 2.0]


def test_elitist_prefers_incumbents_on_ties(rng, scored_population) -> None:
    population = scored_population([2.0, 2.0])
    offspring = scored_population([2.0, 2.0])
    result = ElitistReplacement().replace(population, offspring, rng)
    assert result[0] is population[0] and result[1] is population[1]


def test_elitist_rate_comes_from_config() -> None:
    operator = create_operator("replacement", "elitist", EvolutionConfig(elitism_rate=0.25))
    assert operator.elitism_rate == 0.25
    assert operator.elite_count(40) == 10
    assert operator.description == "Keeps top 25% of population"
    with pytest.raises(ValueError):
        ElitistReplacement(elitism_rate=1.0)


def test_elitism_rate_does_not_change_survivors(rng, scored_population) -> None:
    population = scored_population([1.0, 4.0, 3.0, 2.0])
    offspring = scored_population([6.0, 0.5, 5.0])
    survivors = [values(ElitistReplacement(rate).replace(population, offspring, rng)) for rate in (0.0, 0.25, 0.75)]
    assert survivors == [[6.0, 5.0, 4.0, 3.0]] * 3
    assert "not enforced" in EvolutionConfig.explain("engine.elitism_rate")


def test_generational_pads_with_best_parents(rng, scored_population) -> None:
    population = scored_population([1.0, 2.0, 3.0])
    assert values(GenerationalReplacement().replace(population, scored_population([7.0]), rng)) == [7.0, 3.0, 2.0]
    offspring = scored_population([0.0, 0.0, 0.0, 9.0])
    assert values(GenerationalReplacement().replace(population, offspring, rng)) == [0.0, 0.0, 0.0]


def test_steady_state_replaces_the_worst(rng, scored_population) -> None:
    population = scored_population([5.0, 1.0, 3.0])
    offspring = scored_population([4.0, 0.0, 9.0])
    result = SteadyStateReplacement(replacement_count=2).replace(population, offspring, rng)
    assert sorted(values(result)) == [4.0, 5.0, 9.0]


def test_tournament_replacement_only_admits_fitter_children(rng, scored_population) -> None:
    population = scored_population([1.0, 2.0, 3.0])
    operator = TournamentReplacement(tournament_size=3)
    assert operator.replace(population, scored_population([0.5]), rng) == population
    result = operator.replace(population, scored_population([10.0]), rng)
    assert sorted(values(result)) == [2.0, 3.0, 10.0]


def test_age_based_evicts_the_oldest(rng, scored_population) -> None:
    population = scored_population([1.0, 2.0, 3.0])
    for genome, age in zip(population, (3, 1, 5)):
        genome.age = age
    offspring = scored_population([2.0, 8.0])
    offspring[1].age = 4
    result = AgeBasedReplacement(replacement_count=1).replace(population, offspring, rng)
    assert result[0] is offspring[1]
    assert result[0].age == 0
    assert population[2] not in result
    assert [genome.age for genome in result[1:]] == [3, 1]


def test_age_based_uses_every_offspring_by_default(rng, scored_population) -> None:
    population = scored_population([1.0, 2.0, 3.0, 4.0])
    for age, genome in enumerate(population):
        genome.age = age
    result = AgeBasedReplacement().replace(population, scored_population([0.0, 0.0]), rng)
    assert [genome.age for genome in result] == [0, 0, 1, 0]
    assert population[3] not in result and population[2] not in result
