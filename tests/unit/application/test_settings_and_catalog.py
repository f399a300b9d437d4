"""Tests for provisioning settings and the catalog service."""

import pytest

from chartbroker.application.services.catalog_service import CatalogService
from chartbroker.application.services.provisioning_settings import ProvisioningSettings
from chartbroker.domain.base.exceptions import ConfigurationError, ValidationError
from chartbroker.providers.redis import RedisProvider
from chartbroker.providers.registry import ProviderRegistry

SETTINGS_YAML = """\
mariadb:
  overrideParams:
    db:
      user: admin
redis: {}
"""


@pytest.mark.unit
class TestProvisioningSettings:
    def test_override_params_per_service(self):
        settings = ProvisioningSettings.from_yaml(SETTINGS_YAML)

        assert settings.override_params("mariadb") == {"db": {"user": "admin"}}
        assert settings.override_params("redis") is None
        assert settings.override_params("mysql") is None

    def test_empty_document(self):
        assert ProvisioningSettings.from_yaml("").services == {}

    @pytest.mark.parametrize(
        "text",
        [
            "unknown-chart:\n  overrideParams: {}\n",
            "redis:\n  overrideParameters: {}\n",
            "- not a mapping\n",
            "redis: [unclosed\n",
        ],
    )
    def test_strict_parsing(self, text):
        with pytest.raises(ConfigurationError):
            ProvisioningSettings.from_yaml(text)

    def test_known_services_can_be_extended(self):
        settings = ProvisioningSettings.from_yaml("my-chart:\n  overrideParams: {a: 1}\n", {"my-chart"})

        assert settings.override_params("my-chart") == {"a": 1}

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(SETTINGS_YAML)

        assert ProvisioningSettings.load(path).override_params("mariadb") == {"db": {"user": "admin"}}
        with pytest.raises(ConfigurationError):
            ProvisioningSettings.load(tmp_path / "missing.yaml")


@pytest.mark.unit
class TestCatalogService:
    def test_enabled_only_limits_to_known_providers(self, chart_repository):
        registry = ProviderRegistry({"redis": RedisProvider()})

        catalog = CatalogService(chart_repository, registry=registry, enabled_only=True).get_catalog()

        assert [service.id for service in catalog.services] == ["redis"]

    def test_resolve_plan_by_id_or_name(self, catalog_service):
        assert catalog_service.resolve_plan("redis", "redis-5-0-5").chart_version == "9.0.0"
        assert catalog_service.resolve_plan("redis", "5-0-7").chart_version == "10.5.7"

    def test_resolve_unknown(self, catalog_service):
        with pytest.raises(ValidationError, match="unknown service"):
            catalog_service.resolve_plan("kafka", "x")
        with pytest.raises(ValidationError, match="unknown plan"):
            catalog_service.resolve_plan("redis", "x")
