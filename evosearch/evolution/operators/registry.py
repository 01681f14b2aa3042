"""Operator registry used by EvoSearch to resolve operators by name."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional, Tuple, Type

from .base import Operator

if TYPE_CHECKING:
    from ..config import EvolutionConfig

FAMILIES = ("selection", "crossover", "mutation", "replacement")

# Used when the configuration does not name an operator for a family.
DEFAULT_OPERATORS: Dict[str, str] = {
    "selection": "tournament",
    "crossover": "single_point",
    "mutation": "swap",
    "replacement": "elitist",
}


class OperatorRegistry:
    """Light-weight registry storing operator classes by family and name."""

    def __init__(self) -> None:
        self._registry: Dict[Tuple[str, str], Type[Operator]] = {}

    @staticmethod
    def _key(family: str, name: str) -> Tuple[str, str]:
        family_key = family.strip().lower()
        if family_key not in FAMILIES:
            raise ValueError(f"Unknown operator family '{family}'. Options: {list(FAMILIES)}")
        name_key = name.strip().lower().replace("-", "_")
        if not name_key:
            raise ValueError("Operator name cannot be empty.")
        return family_key, name_key

    def register(self, family: str, name: str, operator_cls: Type[Operator]) -> None:
        self._registry[self._key(family, name)] = operator_cls

    def get(self, family: str, name: str) -> Type[Operator]:
        key = self._key(family, name)
        if key not in self._registry:
            raise KeyError(
                f"Operator '{name}' is not registered for {key[0]}. Available: {sorted(self.names(key[0]))}"
            )
        return self._registry[key]

    def names(self, family: str) -> list:
        family_key = family.strip().lower()
        return sorted(name for fam, name in self._registry if fam == family_key)

    def available(self) -> Dict[str, list]:
        return {family: self.names(family) for family in FAMILIES}

    def __contains__(self, item: object) -> bool:
        if not isinstance(item, tuple) or len(item) != 2:
            return False
        try:
            return self._key(*item) in self._registry
        except (TypeError, ValueError, AttributeError):
            return False

    def __iter__(self) -> Iterable[Tuple[str, str]]:
        return iter(sorted(self._registry))


operator_registry = OperatorRegistry()


def register_operator(family: str, name: str):
    """Decorator registering operators in the global registry."""

    def decorator(cls: Type[Operator]) -> Type[Operator]:
        operator_registry.register(family, name, cls)
        return cls

    return decorator


def list_operators() -> Dict[str, list]:
    return operator_registry.available()


def get_operator(family: str, name: str) -> Type[Operator]:
    return operator_registry.get(family, name)


def create_operator(
    family: str,
    name: str,
    config: Optional["EvolutionConfig"] = None,
    **params: Any,
) -> Operator:
    """Instantiate a registered operator, drawing defaults from ``config`` when given."""

    operator_cls = get_operator(family, name)
    if config is None:
        return operator_cls(**params)
    return operator_cls.from_config(config, **params)


def build_operators(config: "EvolutionConfig") -> Dict[str, Operator]:
    """One operator per family, as named in ``config.operators`` or the defaults."""

    operators: Dict[str, Operator] = {}
    for family in FAMILIES:
        spec = config.operators.get(family) or {"name": DEFAULT_OPERATORS[family], "params": {}}
        operators[family] = create_operator(family, spec["name"], config, **spec.get("params", {}))
    return operators


__all__ = [
    "FAMILIES",
    "DEFAULT_OPERATORS",
    "OperatorRegistry",
    "operator_registry",
    "register_operator",
    "list_operators",
    "get_operator",
    "create_operator",
    "build_operators",
]
