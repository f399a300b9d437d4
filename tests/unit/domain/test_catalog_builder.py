"""Tests for catalog derivation from chart metadata."""

import pytest

from chartbroker.domain.catalog.builder import CatalogBuilder, parse_chart_version, tag_intersection
from chartbroker.domain.catalog.models import ChartVersion, slugify


def version(name="mysql", pkg="1.0.0", app="1.0", keywords=()):
    return ChartVersion(name=name, version=pkg, app_version=app, description=f"{name} {pkg}", keywords=tuple(keywords))


@pytest.mark.unit
class TestCatalogBuilder:
    """Test services, plans and tags derived from chart versions."""

    def test_highest_packaging_version_wins_per_app_version(self):
        """Test that one plan is emitted per app version, from the newest package."""
        service = CatalogBuilder().build_service("mysql", [version(pkg="1.0.0"), version(pkg="1.1.0")])

        assert len(service.plans) == 1
        plan = service.plans[0]
        assert plan.chart_version == "1.1.0"
        assert plan.description == "mysql 1.1.0"

    def test_plan_identity_is_slugged(self):
        service = CatalogBuilder().build_service("redis", [version("redis", "10.5.7", "5.0.7")])

        plan = service.plans[0]
        assert plan.id == "redis-5-0-7"
        assert plan.name == "5-0-7"
        assert plan.free is True
        assert service.id == service.name == "redis"
        assert service.description == "Helm Chart for redis"
        assert service.bindable is True

    def test_plans_ordered_newest_first(self):
        service = CatalogBuilder().build_service(
            "mysql", [version(pkg="1.0.0", app="5.7.28"), version(pkg="1.6.9", app="5.7.30")]
        )

        assert [p.app_version for p in service.plans] == ["5.7.30", "5.7.28"]

    def test_tags_are_keyword_intersection(self):
        two = [version(keywords=["a", "b"]), version(pkg="1.0.1", keywords=["b", "c"])]
        one = [version(keywords=["a", "b"])]

        assert CatalogBuilder().build_service("mysql", two).tags == ["b"]
        assert CatalogBuilder().build_service("mysql", one).tags == ["a", "b"]

    def test_charts_without_plans_are_omitted(self):
        catalog = CatalogBuilder().build(
            {"nginx": [version("nginx", app="")], "redis": [version("redis", "10.5.7", "5.0.7")]}
        )

        assert [s.id for s in catalog.services] == ["redis"]

    def test_unparsable_versions_are_skipped(self):
        service = CatalogBuilder().build_service(
            "mysql", [version(pkg="not-a-version", app="2.0"), version(pkg="1.0.0", app="1.0")]
        )

        assert [p.app_version for p in service.plans] == ["1.0"]

    def test_allowed_services_filter(self):
        charts = {"mysql": [version()], "redis": [version("redis")]}

        catalog = CatalogBuilder().build(charts, allowed_services={"redis"})

        assert [s.id for s in catalog.services] == ["redis"]

    def test_osb_body_hides_chart_details(self):
        catalog = CatalogBuilder().build({"redis": [version("redis", "10.5.7", "5.0.7")]})

        body = catalog.to_osb()

        plan = body["services"][0]["plans"][0]
        assert set(plan) == {"id", "name", "description", "free"}
        assert catalog.find_plan("redis", "5-0-7").chart_name == "redis"
        assert catalog.find_plan("redis", "redis-5-0-7").app_version == "5.0.7"
        assert catalog.find_plan("mysql", "5-0-7") is None


@pytest.mark.unit
class TestCatalogHelpers:
    def test_slugify(self):
        assert slugify("MySQL@5.7.30") == "mysql-5-7-30"

    def test_parse_chart_version_tolerates_prefix_and_short_forms(self):
        assert str(parse_chart_version("v1.2.3")) == "1.2.3"
        assert str(parse_chart_version("2")) == "2.0.0"
        with pytest.raises(ValueError):
            parse_chart_version("latest")

    def test_tag_intersection_of_nothing(self):
        assert tag_intersection([]) == []
