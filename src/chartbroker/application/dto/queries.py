"""Query DTOs for the broker verbs."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BaseQuery(BaseModel):
    model_config = ConfigDict(frozen=True)


class LastOperationQuery(BaseQuery):
    """Poll the state of an instance's current operation."""

    instance_id: str
    operation: str | None = None


class LastBindingOperationQuery(BaseQuery):
    """Poll the state of a binding operation."""

    instance_id: str
    binding_id: str
    operation: str | None = None


class GetBindingQuery(BaseQuery):
    instance_id: str
    binding_id: str
