"""Catalog value objects."""

import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

_NON_SLUG = re.compile(r"[^a-z0-9]")


def slugify(value: str) -> str:
    """Lowercase and replace every non-alphanumeric character with a hyphen."""
    return _NON_SLUG.sub("-", value.lower())


class ChartVersion(BaseModel):
    """One packaging version of a chart as listed in a repository index."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    app_version: str = ""
    description: str = ""
    keywords: tuple[str, ...] = ()
    urls: tuple[str, ...] = ()
    deprecated: bool = False

    @property
    def reference(self) -> str:
        return f"{self.name}@{self.app_version}"


class ServicePlan(BaseModel):
    """An OSB plan. One per distinct application version of a chart."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    free: bool = True

    chart_name: str = Field(default="", exclude=True)
    app_version: str = Field(default="", exclude=True)
    chart_version: str = Field(default="", exclude=True)

    def matches(self, plan_ref: str) -> bool:
        return plan_ref in (self.id, self.name)


class ServiceOffering(BaseModel):
    """An OSB service. One per chart name."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    bindable: bool = True
    tags: list[str] = Field(default_factory=list)
    plans: list[ServicePlan] = Field(default_factory=list)

    def find_plan(self, plan_ref: str) -> Optional[ServicePlan]:
        for plan in self.plans:
            if plan.matches(plan_ref):
                return plan
        return None


class Catalog(BaseModel):
    """The full set of offerings exposed to the platform."""

    model_config = ConfigDict(frozen=True)

    services: list[ServiceOffering] = Field(default_factory=list)

    def find_service(self, service_id: str) -> Optional[ServiceOffering]:
        for service in self.services:
            if service.id == service_id:
                return service
        return None

    def find_plan(self, service_id: str, plan_ref: str) -> Optional[ServicePlan]:
        service = self.find_service(service_id)
        if service is None:
            return None
        return service.find_plan(plan_ref)

    def to_osb(self) -> dict[str, Any]:
        return {"services": [service.model_dump() for service in self.services]}
