"""Operator family exports; importing this package registers every built-in operator."""

from .base import CrossoverOperator, MutationOperator, Operator, ReplacementOperator, SelectionOperator
from .crossover import (
    ArithmeticCrossover,
    CycleCrossover,
    EdgeRecombinationCrossover,
    OrderCrossover,
    SimulatedBinaryCrossover,
    SinglePointCrossover,
    TwoPointCrossover,
    UniformCrossover,
    ensure_permutation,
)
from .mutation import (
    AdaptiveMutation,
    AdjacentSwapMutation,
    BitFlipMutation,
    GaussianMutation,
    InversionMutation,
    PolynomialMutation,
    ScrambleMutation,
    SwapMutation,
)
from .registry import (
    DEFAULT_OPERATORS,
    FAMILIES,
    build_operators,
    create_operator,
    get_operator,
    list_operators,
    operator_registry,
    register_operator,
)
from .replacement import (
    AgeBasedReplacement,
    ElitistReplacement,
    GenerationalReplacement,
    SteadyStateReplacement,
    TournamentReplacement,
)
from .selection import (
    BoltzmannSelection,
    RankSelection,
    RouletteSelection,
    StochasticUniversalSampling,
    TournamentSelection,
)

__all__ = [
    "Operator",
    "SelectionOperator",
    "CrossoverOperator",
    "MutationOperator",
    "ReplacementOperator",
    "TournamentSelection",
    "RouletteSelection",
    "RankSelection",
    "BoltzmannSelection",
    "StochasticUniversalSampling",
    "SinglePointCrossover",
    "TwoPointCrossover",
    "UniformCrossover",
    "ArithmeticCrossover",
    "SimulatedBinaryCrossover",
    "OrderCrossover",
    "CycleCrossover",
    "EdgeRecombinationCrossover",
    "ensure_permutation",
    "BitFlipMutation",
    "SwapMutation",
    "AdjacentSwapMutation",
    "GaussianMutation",
    "PolynomialMutation",
    "InversionMutation",
    "ScrambleMutation",
    "AdaptiveMutation",
    "ElitistReplacement",
    "GenerationalReplacement",
    "SteadyStateReplacement",
    "TournamentReplacement",
    "AgeBasedReplacement",
    "FAMILIES",
    "DEFAULT_OPERATORS",
    "operator_registry",
    "register_operator",
    "list_operators",
    "get_operator",
    "create_operator",
    "build_operators",
]
