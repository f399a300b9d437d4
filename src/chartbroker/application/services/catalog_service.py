"""Catalog service: builds the catalog on demand and resolves plans."""

from typing import Optional

from chartbroker.domain.base.exceptions import ValidationError
from chartbroker.domain.base.ports.chart_repository_port import ChartRepositoryPort
from chartbroker.domain.base.ports.logging_port import LoggingPort
from chartbroker.domain.catalog.builder import CatalogBuilder
from chartbroker.domain.catalog.models import Catalog, ServicePlan
from chartbroker.providers.registry import ProviderRegistry


class CatalogService:
    """Derives services and plans from the chart repository on each call."""

    def __init__(
        self,
        repository: ChartRepositoryPort,
        registry: Optional[ProviderRegistry] = None,
        enabled_only: bool = False,
        builder: Optional[CatalogBuilder] = None,
        logger: Optional[LoggingPort] = None,
    ) -> None:
        self._repository = repository
        self._registry = registry or ProviderRegistry()
        self._enabled_only = enabled_only
        self._builder = builder or CatalogBuilder(logger)

    def get_catalog(self) -> Catalog:
        charts = self._repository.list_charts()
        allowed = self._registry.names() if self._enabled_only else None
        return self._builder.build(charts, allowed)

    def resolve_plan(self, service_id: str, plan_id: str) -> ServicePlan:
        """Look up a plan by ID or name within a service."""
        catalog = self.get_catalog()
        service = catalog.find_service(service_id)
        if service is None:
            raise ValidationError(f"unknown service {service_id!r}")
        plan = service.find_plan(plan_id)
        if plan is None:
            raise ValidationError(f"unknown plan {plan_id!r} for service {service_id!r}")
        return plan
