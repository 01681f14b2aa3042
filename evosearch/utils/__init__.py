"""Utility exports for EvoSearch."""

from .config_loader import ConfigLoader, LoadedConfig
from .logger import EvolutionLogger

__all__ = ["ConfigLoader", "LoadedConfig", "EvolutionLogger"]
