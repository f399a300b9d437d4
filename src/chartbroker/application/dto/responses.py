"""Response DTOs returned by the broker facade."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from chartbroker.domain.instance.value_objects import OperationState


class BaseResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    def to_body(self) -> dict[str, Any]:
        """OSB response body, omitting unset fields."""
        return self.model_dump(mode="json", exclude_none=True, exclude={"is_async", "created"})


class OperationResponse(BaseResponse):
    """Result of provision, deprovision or update."""

    operation: str | None = None
    is_async: bool = False
    created: bool = True


class BindResponse(BaseResponse):
    """Result of a bind."""

    credentials: dict[str, Any] | None = None
    parameters: dict[str, Any] | None = None
    operation: str | None = None
    is_async: bool = False
    created: bool = True


class LastOperationResponse(BaseResponse):
    state: OperationState
    description: str | None = None


class BindingResponse(BaseResponse):
    """Stored binding payload."""

    credentials: dict[str, Any] = Field(default_factory=dict)
    parameters: dict[str, Any] = Field(default_factory=dict)
