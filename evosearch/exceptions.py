"""
Centralised exception hierarchy for EvoSearch.

The engine raises typed exceptions instead of bare ``ValueError`` or
``RuntimeError`` instances so callers can tell a bad configuration apart from a
genome type that does not honour the contract, or from a broken operator.
Every class also derives from the matching builtin so generic handlers keep
working.
"""

from __future__ import annotations

from typing import Any


class EvoSearchError(Exception):
    """Base class for all EvoSearch specific exceptions."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = context or {}


class EvoSearchConfigError(EvoSearchError, ValueError):
    """Raised when a configuration value is outside its validated range."""


class GenomeContractError(EvoSearchError, TypeError):
    """Raised when a genome type lacks a capability the engine relies on."""


class InvariantViolationError(EvoSearchError, AssertionError):
    """Raised when an operator breaks a structural invariant of the search."""


class EvoSearchRuntimeError(EvoSearchError, RuntimeError):
    """Raised for misuse of the engine life cycle."""


__all__ = [
    "EvoSearchError",
    "EvoSearchConfigError",
    "GenomeContractError",
    "InvariantViolationError",
    "EvoSearchRuntimeError",
]
