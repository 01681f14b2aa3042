"""
Logging utilities built on Loguru.

The `EvolutionLogger` offers a small convenience layer the engine uses to
announce runs and emit per-generation metrics. Metrics go to DEBUG unless the
run is verbose, in which case they are promoted to INFO so they show up on a
default Loguru sink.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Mapping, Optional

from loguru import logger


class EvolutionLogger:
    """Thin convenience wrapper around Loguru."""

    def __init__(self, run_name: str = "evosearch", verbose: bool = False) -> None:
        self.run_name = run_name
        self.verbose = verbose
        self._logger = logger.bind(run=run_name)

    @property
    def level(self) -> str:
        return "INFO" if self.verbose else "DEBUG"

    @contextmanager
    def start_run(self, run_name: Optional[str] = None, params: Optional[Mapping[str, Any]] = None) -> Iterator[None]:
        """Context manager that brackets a run with start and completion messages."""

        name = run_name or self.run_name
        self._logger.log(self.level, "Starting EvoSearch run: {}", name)
        if params:
            self._logger.log(self.level, "Parameters: {}", dict(params))
        yield
        self._logger.log(self.level, "Completed EvoSearch run: {}", name)

    def log_metrics(self, metrics: Dict[str, float], step: Optional[int] = None) -> None:
        """Emit metrics for one generation."""
        self._logger.log(self.level, "Metrics@{}: {}", step if step is not None else "-", metrics)

    def log_message(self, message: str) -> None:
        """Log a simple message at the run's level."""
        self._logger.log(self.level, message)
