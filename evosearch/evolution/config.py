"""
Validated hyperparameter bundle for an evolutionary run.

`EvolutionConfig` is immutable once constructed: every field is checked in
``__post_init__`` and derivations go through :meth:`EvolutionConfig.with_overrides`,
which validates again. The ``operators`` section is stored as read-only
mappings. Configurations can also be built from the named
profiles or loaded from mappings, YAML/JSON files and YAML strings via the
OmegaConf based :class:`~evosearch.utils.ConfigLoader`.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import numpy as np

from evosearch.exceptions import EvoSearchConfigError
from evosearch.utils import config_reference
from evosearch.utils.config_loader import ConfigLike, ConfigLoader

OPERATOR_FAMILIES = ("selection", "crossover", "mutation", "replacement")


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool) and math.isfinite(value)


@dataclass(frozen=True)
class EvolutionConfig:
    """Hyperparameters guiding the evolutionary search."""

    population_size: int = 50
    max_generations: int = 100
    mutation_rate: float = 0.01
    crossover_rate: float = 0.8
    elitism_rate: float = 0.1
    selection_pressure: float = 2
    convergence_threshold: float = 1e-6
    convergence_generations: int = 10
    fitness_goal: Optional[float] = None
    time_limit: Optional[float] = None
    verbose: bool = False
    seed: Optional[int] = None
    max_workers: Optional[int] = None
    operators: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self._require_int("population_size", minimum=2, message="Population size must be at least 2")
        self._require_int("max_generations", minimum=1, message="Max generations must be positive")
        self._require_int(
            "convergence_generations", minimum=1, message="Convergence generations must be positive"
        )
        for name in ("mutation_rate", "crossover_rate", "elitism_rate"):
            value = getattr(self, name)
            if not _is_number(value) or not 0.0 <= value <= 1.0:
                raise EvoSearchConfigError(
                    f"{name.replace('_', ' ').capitalize()} must be between 0 and 1, got {value!r}",
                    context={"field": name, "value": value},
                )
        if self.elitism_rate >= 1.0:
            raise EvoSearchConfigError("Elitism rate must be less than 1.0", context={"field": "elitism_rate"})
        for name in ("selection_pressure", "convergence_threshold"):
            self._require_positive(name)
        if self.time_limit is not None:
            self._require_positive("time_limit")
        if self.fitness_goal is not None and not _is_number(self.fitness_goal):
            raise EvoSearchConfigError("Fitness goal must be a number", context={"field": "fitness_goal"})
        if self.seed is not None and not isinstance(self.seed, (int, np.integer)):
            raise EvoSearchConfigError("Seed must be an integer", context={"field": "seed"})
        if self.max_workers is not None:
            self._require_int("max_workers", minimum=1, message="Max workers must be positive")
        self._validate_operators()

    def _require_int(self, name: str, minimum: int, message: str) -> None:
        value = getattr(self, name)
        if not isinstance(value, (int, np.integer)) or isinstance(value, bool) or value < minimum:
            raise EvoSearchConfigError(f"{message}, got {value!r}", context={"field": name, "value": value})

    def _require_positive(self, name: str) -> None:
        value = getattr(self, name)
        if not _is_number(value) or value <= 0:
            label = name.replace("_", " ").capitalize()
            raise EvoSearchConfigError(f"{label} must be positive, got {value!r}", context={"field": name})

    def _validate_operators(self) -> None:
        normalised: Dict[str, Mapping[str, Any]] = {}
        for family, spec in dict(self.operators or {}).items():
            if family not in OPERATOR_FAMILIES:
                raise EvoSearchConfigError(
                    f"Unknown operator family '{family}'. Options: {list(OPERATOR_FAMILIES)}",
                    context={"family": family},
                )
            if spec is None:
                continue
            if isinstance(spec, str):
                spec = {"name": spec}
            if not isinstance(spec, Mapping) or not isinstance(spec.get("name"), str):
                raise EvoSearchConfigError(
                    f"Operator '{family}' must be a name or a mapping with a 'name' key",
                    context={"family": family},
                )
            unknown = set(spec) - {"name", "params"}
            if unknown:
                raise EvoSearchConfigError(
                    f"Unknown keys for operator '{family}': {sorted(unknown)}", context={"family": family}
                )
            params = MappingProxyType(dict(spec.get("params") or {}))
            normalised[family] = MappingProxyType({"name": spec["name"], "params": params})
        object.__setattr__(self, "operators", MappingProxyType(normalised))

    # ------------------------------------------------------------ derivation
    def with_overrides(self, **options: Any) -> "EvolutionConfig":
        """Return a validated copy with ``options`` applied."""

        known = {item.name for item in fields(self)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise EvoSearchConfigError(f"Unknown configuration parameter: {', '.join(unknown)}")
        return replace(self, **options)

    def to_dict(self) -> Dict[str, Any]:
        data = {item.name: getattr(self, item.name) for item in fields(self)}
        data["operators"] = {
            family: {"name": spec["name"], "params": dict(spec["params"])} for family, spec in self.operators.items()
        }
        return data

    def engine_dict(self) -> Dict[str, Any]:
        """Scalar hyperparameters only, as logged at the start of a run."""
        data = self.to_dict()
        data.pop("operators")
        return data

    def make_rng(self) -> np.random.Generator:
        """Random generator for one run, seeded from :attr:`seed`."""
        return np.random.default_rng(self.seed)

    def describe(self) -> str:
        lines = ["Evolution Configuration:", "========================"]
        for key, value in self.engine_dict().items():
            label = key.replace("_", " ").title()
            lines.append(f"{label}: {'None' if value is None else value}")
        for family, spec in self.operators.items():
            lines.append(f"{family.title()} Operator: {spec['name']} {dict(spec['params']) or ''}".rstrip())
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.describe()

    @staticmethod
    def explain(key: Optional[str] = None) -> str:
        """Explain one parameter, or every engine parameter when ``key`` is omitted."""
        if key is not None:
            return config_reference.explain(key)
        return "\n".join(config_reference.explain(f"engine.{item.name}") for item in config_reference.iter_fields("engine"))

    # ----------------------------------------------------------- constructors
    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "EvolutionConfig":
        """Build from ``{"engine": {...}, "operators": {...}}``."""
        engine = dict(data.get("engine") or {})
        operators = dict(data.get("operators") or {})
        return cls(**engine, operators=operators)

    @classmethod
    def from_preset(cls, name: str, **overrides: Any) -> "EvolutionConfig":
        """Build from a named profile (``default``, ``exploration``, ``exploitation``, ``balanced``)."""
        return cls.load(profile=name).with_overrides(**overrides)

    @classmethod
    def load(
        cls,
        source: Optional[ConfigLike] = None,
        overrides: Optional[Mapping[str, Any]] = None,
        profile: Optional[str] = None,
    ) -> "EvolutionConfig":
        """Merge schema defaults, a profile, ``source`` and ``overrides`` then validate."""
        loaded = ConfigLoader().load(source, overrides=overrides, profile=profile)
        return cls.from_mapping(loaded.to_dict())


__all__ = ["EvolutionConfig", "OPERATOR_FAMILIES"]
