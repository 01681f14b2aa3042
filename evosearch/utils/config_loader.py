"""
Unified configuration loader for EvoSearch.

Configurations can be provided as dictionaries, JSON/YAML files, or YAML
strings and are merged on top of the schema defaults (and optionally a named
profile). Every section and key of the merged result is checked against the
configuration schema so typos surface before a run starts.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional, Union

import yaml
from omegaconf import DictConfig, OmegaConf

from evosearch.exceptions import EvoSearchConfigError

from .config_reference import CONFIG_SCHEMA, defaults
from .profiles import get_profile


ConfigLike = Union[str, Path, Mapping[str, Any], DictConfig]


@dataclass
class LoadedConfig:
    """Container that exposes both OmegaConf and plain-dict views."""

    data: DictConfig

    def to_dict(self) -> Dict[str, Any]:
        return OmegaConf.to_container(self.data, resolve=True)  # type: ignore[return-value]

    def __getitem__(self, item: str) -> Any:
        return self.data[item]


def schema_defaults() -> Dict[str, Any]:
    """Defaults for every section; operator choices start empty."""

    return {"engine": defaults("engine"), "operators": {}}


class ConfigLoader:
    """
    Load and merge EvoSearch configuration sources.

    Parameters
    ----------
    global_config : Optional[ConfigLike]
        Optional path or mapping containing default configuration values.
        The schema defaults are used when omitted.
    """

    def __init__(self, global_config: Optional[ConfigLike] = None) -> None:
        base = OmegaConf.create(schema_defaults())
        if global_config is not None:
            base = OmegaConf.merge(base, self._coerce(global_config))
        self._global_conf = base

    def _coerce(self, source: ConfigLike) -> DictConfig:
        """Convert arbitrary config-like inputs into an OmegaConf instance."""
        if isinstance(source, DictConfig):
            return source
        if isinstance(source, Mapping):
            return OmegaConf.create(dict(source))
        if isinstance(source, Path):
            return self._load_path(source)
        if isinstance(source, str):
            potential_path = Path(source)
            if potential_path.suffix.lower() in {".yaml", ".yml", ".json"}:
                return self._load_path(potential_path)
            try:
                parsed = yaml.safe_load(source)
            except yaml.YAMLError as exc:
                raise EvoSearchConfigError(f"Failed to parse configuration string: {exc}") from exc
            if not isinstance(parsed, MutableMapping):
                raise EvoSearchConfigError("Configuration string must evaluate to a mapping.")
            return OmegaConf.create(dict(parsed))
        raise TypeError(f"Unsupported configuration source: {type(source)!r}")

    def _load_path(self, path: Path) -> DictConfig:
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        suffix = path.suffix.lower()
        if suffix in {".yaml", ".yml"}:
            loaded = OmegaConf.load(path)
            if not isinstance(loaded, DictConfig):
                raise EvoSearchConfigError(f"Configuration file must contain a mapping: {path}")
            return loaded
        if suffix == ".json":
            return OmegaConf.create(yaml.safe_load(path.read_text(encoding="utf-8")))
        raise EvoSearchConfigError(f"Unsupported configuration file format: '{suffix}'. Expected YAML or JSON.")

    @staticmethod
    def _validate(merged: DictConfig) -> None:
        for section in merged.keys():
            if section not in CONFIG_SCHEMA:
                raise EvoSearchConfigError(
                    f"Unknown configuration section '{section}'. Options: {list(CONFIG_SCHEMA)}",
                    context={"section": section},
                )
            values = merged[section]
            if values is None:
                continue
            if not isinstance(values, DictConfig):
                raise EvoSearchConfigError(f"Configuration section '{section}' must be a mapping.")
            for key in values.keys():
                if key not in CONFIG_SCHEMA[section]:
                    raise EvoSearchConfigError(
                        f"Unknown configuration key '{section}.{key}'.",
                        context={"section": section, "key": key},
                    )

    def load(
        self,
        config: Optional[ConfigLike] = None,
        overrides: Optional[Mapping[str, Any]] = None,
        profile: Optional[str] = None,
    ) -> LoadedConfig:
        """Merge defaults, an optional profile, additional configuration and overrides."""

        merged = self._global_conf.copy()

        if profile is not None:
            try:
                merged = OmegaConf.merge(merged, get_profile(profile))
            except KeyError as exc:
                raise EvoSearchConfigError(str(exc.args[0]), context={"profile": profile}) from exc

        if config is not None:
            merged = OmegaConf.merge(merged, self._coerce(config))

        if overrides:
            merged = OmegaConf.merge(merged, dict(overrides))

        self._validate(merged)
        return LoadedConfig(merged)
