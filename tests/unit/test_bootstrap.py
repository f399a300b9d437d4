"""Tests for application wiring."""

from unittest.mock import Mock, patch

import pytest

from chartbroker import bootstrap
from chartbroker.config.schemas.app_schema import AppConfig
from chartbroker.domain.base.exceptions import ConfigurationError
from chartbroker.infrastructure.persistence.configmap_record_store import ConfigMapRecordStore
from chartbroker.infrastructure.persistence.json_record_store import JSONRecordStore


@pytest.mark.unit
class TestBootstrap:
    def test_configured_cluster_domain_wins(self):
        config = AppConfig.model_validate({"broker": {"cluster_domain": "corp.internal"}})

        assert bootstrap.resolve_cluster_domain(config) == "corp.internal"

    def test_cluster_domain_falls_back_to_empty(self):
        with patch.object(bootstrap, "detect_cluster_domain", side_effect=ConfigurationError("no resolv.conf")):
            assert bootstrap.resolve_cluster_domain(AppConfig()) == ""

    def test_json_store_under_work_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CHARTBROKER_WORK_DIR", str(tmp_path))
        config = AppConfig.model_validate({"storage": {"type": "json"}})

        store = bootstrap.build_record_store(config, None, None)

        assert isinstance(store, JSONRecordStore)
        assert store.file_path == str(tmp_path / "records.json")

    def test_configmap_store_namespace(self, monkeypatch):
        monkeypatch.setenv("CONFIG_NAMESPACE", "broker-system")

        store = bootstrap.build_record_store(AppConfig(), Mock(), None)

        assert isinstance(store, ConfigMapRecordStore)
        assert store.namespace == "broker-system"

    def test_build_application_wires_broker(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CHARTBROKER_WORK_DIR", str(tmp_path))
        config = AppConfig.model_validate(
            {"broker": {"cluster_domain": "cluster.local", "default_namespace": "ns"}, "storage": {"type": "json"}}
        )

        with patch.object(bootstrap, "load_core_api", return_value=Mock()):
            application = bootstrap.build_application(config)
        try:
            assert application.metrics is not None
            assert application.broker.lifecycle is not None
        finally:
            application.shutdown()
