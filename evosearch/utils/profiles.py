"""
Predefined configuration profiles for EvoSearch.

Profiles provide shortcuts for common search modes, from the balanced
default to exploration heavy (large, highly mutated populations) and
exploitation heavy (small, elitist populations) runs. They are merged on top
of the schema defaults before user configuration and overrides are applied.
"""

from __future__ import annotations

from typing import Dict

from omegaconf import OmegaConf


PROFILES: Dict[str, Dict[str, object]] = {
    "default": {
        "engine": {
            "population_size": 50,
            "max_generations": 100,
            "mutation_rate": 0.01,
            "crossover_rate": 0.8,
            "elitism_rate": 0.1,
            "selection_pressure": 2,
            "convergence_threshold": 1e-6,
            "convergence_generations": 10,
            "verbose": False,
        },
    },
    "exploration": {
        "engine": {
            "population_size": 100,
            "max_generations": 200,
            "mutation_rate": 0.1,
            "crossover_rate": 0.7,
            "elitism_rate": 0.05,
            "selection_pressure": 1.5,
            "convergence_threshold": 1e-8,
            "convergence_generations": 20,
            "verbose": True,
        },
    },
    "exploitation": {
        "engine": {
            "population_size": 30,
            "max_generations": 50,
            "mutation_rate": 0.005,
            "crossover_rate": 0.9,
            "elitism_rate": 0.2,
            "selection_pressure": 3,
            "convergence_threshold": 1e-4,
            "convergence_generations": 5,
            "verbose": False,
        },
    },
    "balanced": {
        "engine": {
            "population_size": 75,
            "max_generations": 150,
            "mutation_rate": 0.02,
            "crossover_rate": 0.85,
            "elitism_rate": 0.15,
            "selection_pressure": 2.5,
            "convergence_threshold": 1e-5,
            "convergence_generations": 15,
            "verbose": False,
        },
    },
}


def list_profiles() -> Dict[str, Dict[str, object]]:
    """Return a copy of the registered profiles."""

    return {name: OmegaConf.to_container(OmegaConf.create(conf), resolve=True) for name, conf in PROFILES.items()}


def get_profile(name: str) -> Dict[str, object]:
    """Return a profile configuration by name."""

    if name not in PROFILES:
        raise KeyError(f"Unknown profile '{name}'. Available profiles: {list(PROFILES)}")
    return OmegaConf.to_container(OmegaConf.create(PROFILES[name]), resolve=True)
