"""Request bodies of the OSB verbs."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class BaseRequestModel(BaseModel):
    """
    Base class for OSB request bodies.

    OSB uses snake_case on the wire; unknown fields (maintenance_info,
    organization_guid, bind_resource, ...) are accepted and ignored.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ProvisionRequestModel(BaseRequestModel):
    service_id: str = Field(..., min_length=1)
    plan_id: str = Field(..., min_length=1)
    parameters: Optional[dict[str, Any]] = None
    context: Optional[dict[str, Any]] = None


class UpdateRequestModel(BaseRequestModel):
    service_id: str = Field(..., min_length=1)
    plan_id: Optional[str] = None
    parameters: Optional[dict[str, Any]] = None
    context: Optional[dict[str, Any]] = None


class BindRequestModel(BaseRequestModel):
    service_id: str = Field(..., min_length=1)
    plan_id: str = Field(..., min_length=1)
    parameters: Optional[dict[str, Any]] = None
    context: Optional[dict[str, Any]] = None
