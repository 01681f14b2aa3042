"""Tests for the operator registry."""

import pytest

from evosearch.evolution import EvolutionConfig
from evosearch.evolution.operators import (
    DEFAULT_OPERATORS,
    FAMILIES,
    BitFlipMutation,
    ElitistReplacement,
    GaussianMutation,
    OrderCrossover,
    RankSelection,
    SinglePointCrossover,
    SwapMutation,
    TournamentSelection,
    build_operators,
    create_operator,
    get_operator,
    list_operators,
    operator_registry,
)
from evosearch.evolution.operators.base import SelectionOperator
from evosearch.evolution.operators.registry import OperatorRegistry, register_operator


def test_every_family_has_operators() -> None:
    available = list_operators()
    assert set(available) == set(FAMILIES)
    assert "order" in available["crossover"]
    assert "polynomial" in available["mutation"]
    assert "age_based" in available["replacement"]
    for family, name in DEFAULT_OPERATORS.items():
        assert (family, name) in operator_registry


def test_lookup_normalises_names() -> None:
    assert get_operator("mutation", "Bit-Flip") is BitFlipMutation
    assert get_operator(" Crossover ", "order") is OrderCrossover


def test_unknown_names_raise() -> None:
    with pytest.raises(KeyError, match="Available"):
        get_operator("selection", "lottery")
    with pytest.raises(ValueError):
        get_operator("breeding", "tournament")
    assert ("breeding", "tournament") not in operator_registry
    assert "tournament" not in operator_registry


def test_create_operator_passes_params() -> None:
    operator = create_operator("mutation", "gaussian", sigma=0.3)
    assert isinstance(operator, GaussianMutation)
    assert operator.sigma == 0.3
    with pytest.raises(TypeError):
        create_operator("mutation", "bit_flip", sigma=0.3)


def test_build_operators_defaults() -> None:
    operators = build_operators(EvolutionConfig())
    assert isinstance(operators["selection"], TournamentSelection)
    assert isinstance(operators["crossover"], SinglePointCrossover)
    assert isinstance(operators["mutation"], SwapMutation)
    assert isinstance(operators["replacement"], ElitistReplacement)


def test_build_operators_from_config() -> None:
    config = EvolutionConfig(
        operators={"selection": "rank", "mutation": {"name": "gaussian", "params": {"sigma": 0.5}}}
    )
    operators = build_operators(config)
    assert isinstance(operators["selection"], RankSelection)
    assert operators["mutation"].sigma == 0.5


def test_private_registry_and_decorator(monkeypatch) -> None:
    monkeypatch.setattr(operator_registry, "_registry", dict(operator_registry._registry))
    registry = OperatorRegistry()

    class Everyone(SelectionOperator):
        name = "Everyone"

        def select(self, population, count, rng):
            return list(population)[:count]

    registry.register("selection", "everyone", Everyone)
    assert registry.get("selection", "EVERYONE") is Everyone
    assert registry.names("selection") == ["everyone"]
    assert ("selection", "everyone") not in operator_registry
    assert register_operator("selection", "everyone-else")(Everyone) is Everyone
    assert get_operator("selection", "everyone_else") is Everyone
