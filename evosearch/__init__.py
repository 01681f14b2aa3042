"""Top-level package exposing the EvoSearch engine, configuration and operators."""

from .evolution import (
    EngineState,
    EvolutionConfig,
    EvolutionEngine,
    EvolutionMonitor,
    EvolutionResult,
    Genome,
)
from .evolution.operators import create_operator, list_operators
from .exceptions import (
    EvoSearchConfigError,
    EvoSearchError,
    EvoSearchRuntimeError,
    GenomeContractError,
    InvariantViolationError,
)

__version__ = "0.1.0"

__all__ = [
    "EngineState",
    "EvolutionConfig",
    "EvolutionEngine",
    "EvolutionMonitor",
    "EvolutionResult",
    "Genome",
    "create_operator",
    "list_operators",
    "EvoSearchError",
    "EvoSearchConfigError",
    "EvoSearchRuntimeError",
    "GenomeContractError",
    "InvariantViolationError",
    "__version__",
]
