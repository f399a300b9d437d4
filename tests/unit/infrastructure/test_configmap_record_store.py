"""Tests for the ConfigMap-backed record store."""

from types import SimpleNamespace
from unittest.mock import Mock

import pytest
from kubernetes.client.exceptions import ApiException

from chartbroker.domain.base.exceptions import (
    RecordAlreadyExistsError,
    RecordNotFoundError,
    RecordStoreError,
)
from chartbroker.infrastructure.persistence.configmap_record_store import (
    MANAGED_BY_LABEL,
    MAX_UPDATE_ATTEMPTS,
    ConfigMapRecordStore,
)


def config_map(data):
    return SimpleNamespace(data=dict(data), metadata=SimpleNamespace(name="i1", resource_version="1"))


@pytest.fixture
def core_api():
    return Mock()


@pytest.mark.unit
class TestConfigMapRecordStore:
    """Test mapping of record operations onto CoreV1Api calls."""

    def test_create_labels_config_map(self, core_api):
        store = ConfigMapRecordStore(core_api, "broker")

        store.create("i1", {"serviceId": "redis"}, labels={"service-id": "redis"})

        namespace, body = core_api.create_namespaced_config_map.call_args.args
        assert namespace == "broker"
        assert body.metadata.name == "i1"
        assert body.metadata.labels == {MANAGED_BY_LABEL: "chartbroker", "service-id": "redis"}
        assert body.data == {"serviceId": "redis"}

    def test_create_conflict(self, core_api):
        core_api.create_namespaced_config_map.side_effect = ApiException(status=409, reason="Conflict")

        with pytest.raises(RecordAlreadyExistsError):
            ConfigMapRecordStore(core_api, "broker").create("i1", {})

    def test_get_missing(self, core_api):
        core_api.read_namespaced_config_map.side_effect = ApiException(status=404, reason="Not Found")

        with pytest.raises(RecordNotFoundError):
            ConfigMapRecordStore(core_api, "broker").get("i1")

    def test_get_other_failure(self, core_api):
        core_api.read_namespaced_config_map.side_effect = ApiException(status=500, reason="Boom")

        with pytest.raises(RecordStoreError, match="500 Boom"):
            ConfigMapRecordStore(core_api, "broker").get("i1")

    def test_update_applies_changes(self, core_api):
        core_api.read_namespaced_config_map.return_value = config_map({"a": "1", "b": "2"})

        result = ConfigMapRecordStore(core_api, "broker").update("i1", {"a": "10", "b": None})

        assert result == {"a": "10"}
        name, namespace, body = core_api.replace_namespaced_config_map.call_args.args
        assert (name, namespace, body.data) == ("i1", "broker", {"a": "10"})

    def test_update_retries_on_conflict(self, core_api):
        core_api.read_namespaced_config_map.side_effect = [config_map({"a": "1"}), config_map({"a": "2"})]
        core_api.replace_namespaced_config_map.side_effect = [ApiException(status=409, reason="Conflict"), None]

        result = ConfigMapRecordStore(core_api, "broker").update("i1", {"b": "3"})

        assert result == {"a": "2", "b": "3"}
        assert core_api.replace_namespaced_config_map.call_count == 2

    def test_update_gives_up(self, core_api):
        core_api.read_namespaced_config_map.side_effect = lambda *a: config_map({})
        core_api.replace_namespaced_config_map.side_effect = ApiException(status=409, reason="Conflict")

        with pytest.raises(RecordStoreError):
            ConfigMapRecordStore(core_api, "broker").update("i1", {"b": "3"})
        assert core_api.replace_namespaced_config_map.call_count == MAX_UPDATE_ATTEMPTS

    def test_delete_missing(self, core_api):
        core_api.delete_namespaced_config_map.side_effect = ApiException(status=404, reason="Not Found")

        with pytest.raises(RecordNotFoundError):
            ConfigMapRecordStore(core_api, "broker").delete("i1")
