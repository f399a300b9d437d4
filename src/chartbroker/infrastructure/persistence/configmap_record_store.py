"""Operation record store keeping one ConfigMap per instance."""

from typing import Any, Optional

from kubernetes import client
from kubernetes.client.exceptions import ApiException

from chartbroker.domain.base.exceptions import (
    RecordAlreadyExistsError,
    RecordNotFoundError,
    RecordStoreError,
)
from chartbroker.domain.base.ports.logging_port import LoggingPort
from chartbroker.domain.base.ports.record_store_port import RecordStorePort
from chartbroker.infrastructure.adapters.logging_adapter import LoggingAdapter
from chartbroker.infrastructure.persistence.metrics_decorators import instrument_record_store

MAX_UPDATE_ATTEMPTS = 5
MANAGED_BY_LABEL = "app.kubernetes.io/managed-by"
MANAGED_BY_VALUE = "chartbroker"


class ConfigMapRecordStore(RecordStorePort):
    """Records live as ConfigMaps named after the key in a fixed namespace.

    Updates are read-modify-write guarded by the ConfigMap's resourceVersion,
    retried when another writer got there first.
    """

    metrics_prefix = "storage.configmap"

    def __init__(
        self,
        core_api: Any,
        namespace: str,
        metrics: Optional[object] = None,
        logger: Optional[LoggingPort] = None,
    ) -> None:
        self._core = core_api
        self.namespace = namespace
        self.metrics = metrics
        self._logger = logger or LoggingAdapter(__name__)

    def _error(self, action: str, key: str, e: ApiException) -> RecordStoreError:
        return RecordStoreError(f"could not {action} configmap {self.namespace}/{key}: {e.status} {e.reason}")

    def _read(self, key: str) -> Any:
        try:
            return self._core.read_namespaced_config_map(key, self.namespace)
        except ApiException as e:
            if e.status == 404:
                raise RecordNotFoundError(f"configmap {self.namespace}/{key} not found") from e
            raise self._error("read", key, e) from e

    @instrument_record_store("create")
    def create(self, key: str, fields: dict[str, str], labels: Optional[dict[str, str]] = None) -> None:
        all_labels = {MANAGED_BY_LABEL: MANAGED_BY_VALUE, **(labels or {})}
        body = client.V1ConfigMap(
            metadata=client.V1ObjectMeta(name=key, namespace=self.namespace, labels=all_labels),
            data=dict(fields),
        )
        try:
            self._core.create_namespaced_config_map(self.namespace, body)
        except ApiException as e:
            if e.status == 409:
                raise RecordAlreadyExistsError(f"configmap {self.namespace}/{key} already exists") from e
            raise self._error("create", key, e) from e

    @instrument_record_store("get")
    def get(self, key: str) -> dict[str, str]:
        return dict(self._read(key).data or {})

    @instrument_record_store("update")
    def update(self, key: str, fields: dict[str, Optional[str]]) -> dict[str, str]:
        for attempt in range(1, MAX_UPDATE_ATTEMPTS + 1):
            config_map = self._read(key)
            data = dict(config_map.data or {})
            for field, value in fields.items():
                if value is None:
                    data.pop(field, None)
                else:
                    data[field] = value
            config_map.data = data
            try:
                self._core.replace_namespaced_config_map(key, self.namespace, config_map)
                return data
            except ApiException as e:
                if e.status == 404:
                    raise RecordNotFoundError(f"configmap {self.namespace}/{key} not found") from e
                if e.status == 409 and attempt < MAX_UPDATE_ATTEMPTS:
                    self._logger.debug("Configmap %s changed while updating, retrying (%d)", key, attempt)
                    continue
                raise self._error("update", key, e) from e
        raise RecordStoreError(f"could not update configmap {self.namespace}/{key}")

    @instrument_record_store("delete")
    def delete(self, key: str) -> None:
        try:
            self._core.delete_namespaced_config_map(key, self.namespace)
        except ApiException as e:
            if e.status == 404:
                raise RecordNotFoundError(f"configmap {self.namespace}/{key} not found") from e
            raise self._error("delete", key, e) from e
