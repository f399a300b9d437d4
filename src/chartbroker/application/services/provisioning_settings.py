"""Operator-supplied provisioning settings.

A YAML document keyed by service ID. When a service defines
``overrideParams`` those values replace whatever the caller sent::

    mariadb:
      overrideParams:
        db:
          user: admin
"""

from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from chartbroker.domain.base.exceptions import ConfigurationError
from chartbroker.providers.registry import BUILTIN_PROVIDERS


class ServiceProvisioningSettings(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    override_params: Optional[dict[str, Any]] = Field(default=None, alias="overrideParams")


class ProvisioningSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    services: dict[str, ServiceProvisioningSettings] = Field(default_factory=dict)

    def for_service(self, service_id: str) -> Optional[ServiceProvisioningSettings]:
        return self.services.get(service_id)

    def override_params(self, service_id: str) -> Optional[dict[str, Any]]:
        settings = self.for_service(service_id)
        if settings is None:
            return None
        return settings.override_params

    @classmethod
    def from_yaml(cls, text: str, known_services: Optional[set[str]] = None) -> "ProvisioningSettings":
        """Parse strictly: unknown services and unknown fields are rejected."""
        known = known_services if known_services is not None else set(BUILTIN_PROVIDERS)
        try:
            raw = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"invalid provisioning settings: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigurationError("invalid provisioning settings: expected a mapping of services")
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ConfigurationError(f"invalid provisioning settings: unknown services {', '.join(unknown)}")
        try:
            services = {name: ServiceProvisioningSettings.model_validate(value or {}) for name, value in raw.items()}
        except PydanticValidationError as e:
            raise ConfigurationError(f"invalid provisioning settings: {e}") from e
        return cls(services=services)

    @classmethod
    def load(cls, path: Union[str, Path], known_services: Optional[set[str]] = None) -> "ProvisioningSettings":
        try:
            text = Path(path).read_text()
        except OSError as e:
            raise ConfigurationError(f"could not read provisioning settings {path}: {e}") from e
        return cls.from_yaml(text, known_services)
