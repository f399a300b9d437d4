"""Command DTOs for the broker verbs."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class BaseCommand(BaseModel):
    """Base for immutable commands."""

    model_config = ConfigDict(frozen=True)


class ProvisionInstanceCommand(BaseCommand):
    """Provision a new service instance."""

    instance_id: str
    service_id: str
    plan_id: str
    accepts_incomplete: bool = False
    parameters: dict[str, Any] = Field(default_factory=dict)
    context: dict[str, Any] = Field(default_factory=dict)
    namespace: str | None = None


class UpdateInstanceCommand(BaseCommand):
    """Update an instance. Accepted but not acted upon."""

    instance_id: str
    service_id: str
    plan_id: str | None = None
    accepts_incomplete: bool = False
    parameters: dict[str, Any] = Field(default_factory=dict)


class DeprovisionInstanceCommand(BaseCommand):
    """Remove an instance and its release."""

    instance_id: str
    accepts_incomplete: bool = False
    service_id: str | None = None
    plan_id: str | None = None


class BindInstanceCommand(BaseCommand):
    """Create a binding exposing credentials for an instance."""

    instance_id: str
    binding_id: str
    service_id: str
    plan_id: str | None = None
    accepts_incomplete: bool = False
    parameters: dict[str, Any] = Field(default_factory=dict)


class UnbindInstanceCommand(BaseCommand):
    """Remove a binding."""

    instance_id: str
    binding_id: str
