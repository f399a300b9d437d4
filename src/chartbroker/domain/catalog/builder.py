"""Derive the OSB catalog from repository chart metadata."""

import logging
from collections.abc import Container, Mapping, Sequence
from typing import Optional

import semver

from chartbroker.domain.base.ports.logging_port import LoggingPort
from chartbroker.domain.catalog.models import (
    Catalog,
    ChartVersion,
    ServiceOffering,
    ServicePlan,
    slugify,
)


def parse_chart_version(version: str) -> semver.Version:
    """Parse a chart packaging version, tolerating a leading ``v`` and missing parts."""
    return semver.Version.parse(version.strip().lstrip("vV"), optional_minor_and_patch=True)


def tag_intersection(versions: Sequence[ChartVersion]) -> list[str]:
    """Keywords present in every version, in the order of the first version."""
    if not versions:
        return []
    tags: list[str] = []
    for keyword in versions[0].keywords:
        if keyword in tags:
            continue
        if all(keyword in version.keywords for version in versions[1:]):
            tags.append(keyword)
    return tags


class CatalogBuilder:
    """Converts chart versions into services and plans.

    Charts are grouped by application version and only the highest packaging
    version per application version becomes a plan. Charts without any plan
    are left out.
    """

    def __init__(self, logger: Optional[LoggingPort] = None) -> None:
        self._logger = logger or logging.getLogger(__name__)

    def build(
        self,
        charts: Mapping[str, Sequence[ChartVersion]],
        allowed_services: Optional[Container[str]] = None,
    ) -> Catalog:
        services = []
        for chart_name in sorted(charts):
            if allowed_services is not None and chart_name not in allowed_services:
                continue
            service = self.build_service(chart_name, charts[chart_name])
            if service is not None:
                services.append(service)
        return Catalog(services=services)

    def build_service(self, chart_name: str, versions: Sequence[ChartVersion]) -> Optional[ServiceOffering]:
        selected: dict[str, tuple[semver.Version, ChartVersion]] = {}
        for chart in versions:
            if not chart.app_version:
                continue
            try:
                parsed = parse_chart_version(chart.version)
            except (ValueError, TypeError) as e:
                self._logger.warning(
                    "Skipping chart %s version %r: not a semantic version (%s)", chart_name, chart.version, e
                )
                continue
            current = selected.get(chart.app_version)
            if current is None or parsed > current[0]:
                selected[chart.app_version] = (parsed, chart)

        if not selected:
            self._logger.debug("Chart %s has no versions with an app version, omitting it", chart_name)
            return None

        ordered = sorted(selected.values(), key=lambda item: item[0], reverse=True)
        plans = [self._plan_for(chart) for _, chart in ordered]

        return ServiceOffering(
            id=chart_name,
            name=chart_name,
            description=f"Helm Chart for {chart_name}",
            bindable=True,
            tags=tag_intersection(versions),
            plans=plans,
        )

    @staticmethod
    def _plan_for(chart: ChartVersion) -> ServicePlan:
        return ServicePlan(
            id=slugify(chart.reference),
            name=slugify(chart.app_version),
            description=chart.description,
            free=True,
            chart_name=chart.name,
            app_version=chart.app_version,
            chart_version=chart.version,
        )
