"""Catalog domain."""

from chartbroker.domain.catalog.builder import CatalogBuilder, tag_intersection
from chartbroker.domain.catalog.models import (
    Catalog,
    ChartVersion,
    ServiceOffering,
    ServicePlan,
    slugify,
)

__all__ = [
    "Catalog",
    "CatalogBuilder",
    "ChartVersion",
    "ServiceOffering",
    "ServicePlan",
    "slugify",
    "tag_intersection",
]
