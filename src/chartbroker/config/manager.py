"""Configuration manager: JSON file plus environment overrides."""

import json
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from chartbroker.config.platform_dirs import get_config_location
from chartbroker.config.schemas.app_schema import AppConfig
from chartbroker.domain.base.exceptions import ConfigurationError

CONFIG_FILE_ENV = "CHARTBROKER_CONFIG_FILE"
ENV_PREFIX = "CHARTBROKER_"
CONFIG_FILE_NAME = "config.json"


def find_config_file(explicit: Optional[str] = None) -> Optional[Path]:
    """Locate the config file; an explicit or env-supplied path must exist."""
    if explicit:
        return Path(explicit)
    if env_path := os.environ.get(CONFIG_FILE_ENV):
        return Path(env_path)
    candidate = get_config_location() / CONFIG_FILE_NAME
    return candidate if candidate.exists() else None


def env_overrides(environ: Optional[dict[str, str]] = None) -> dict[str, dict[str, str]]:
    """Collect ``CHARTBROKER_<SECTION>__<FIELD>`` variables into nested overrides."""
    environ = os.environ if environ is None else environ
    overrides: dict[str, dict[str, str]] = {}
    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX) or "__" not in key:
            continue
        section, _, field = key[len(ENV_PREFIX):].partition("__")
        if section and field:
            overrides.setdefault(section.lower(), {})[field.lower()] = value
    return overrides


class ConfigurationManager:
    """Loads and validates AppConfig."""

    def __init__(
        self,
        config_file: Optional[str] = None,
        overrides: Optional[dict[str, dict[str, Any]]] = None,
        environ: Optional[dict[str, str]] = None,
    ) -> None:
        self.config_path = find_config_file(config_file)
        self._overrides = overrides or {}
        self._environ = environ
        self._config: Optional[AppConfig] = None

    def _read_file(self) -> dict[str, Any]:
        if self.config_path is None:
            return {}
        try:
            with open(self.config_path) as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f"configuration file not found: {self.config_path}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"invalid JSON in {self.config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"{self.config_path} must contain a JSON object")
        return data

    def raw_config(self) -> dict[str, Any]:
        data = self._read_file()
        for layer in (env_overrides(self._environ), self._overrides):
            for section, values in layer.items():
                merged = dict(data.get(section) or {})
                merged.update({k: v for k, v in values.items() if v is not None})
                data[section] = merged
        return data

    @property
    def app_config(self) -> AppConfig:
        if self._config is None:
            try:
                self._config = AppConfig.model_validate(self.raw_config())
            except PydanticValidationError as e:
                raise ConfigurationError(f"invalid configuration: {e}") from e
        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """Dotted lookup, e.g. ``get("broker.default_namespace")``."""
        current: Any = self.app_config
        for part in key.split("."):
            if not hasattr(current, part):
                return default
            current = getattr(current, part)
        return current
