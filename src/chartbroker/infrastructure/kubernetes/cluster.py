"""Cluster resource store backed by the Kubernetes API."""

import base64
from typing import Any, Optional

from kubernetes.client.exceptions import ApiException

from chartbroker.domain.base.exceptions import ClusterError
from chartbroker.domain.base.ports.cluster_port import ClusterPort
from chartbroker.domain.base.ports.logging_port import LoggingPort
from chartbroker.domain.cluster.resources import (
    SECRET_KIND,
    SERVICE_KIND,
    ClusterResource,
    ManifestResource,
    ServicePort,
)
from chartbroker.infrastructure.adapters.logging_adapter import LoggingAdapter


def label_selector(labels: dict[str, str]) -> str:
    return ",".join(f"{key}={value}" for key, value in sorted(labels.items()))


def decode_secret_data(data: Optional[dict[str, str]]) -> dict[str, str]:
    """Secret ``data`` values are base64 encoded on the wire."""
    decoded = {}
    for key, value in (data or {}).items():
        decoded[key] = base64.b64decode(value or "").decode("utf-8", errors="replace")
    return decoded


class KubernetesCluster(ClusterPort):
    """Lists and labels Services and Secrets through CoreV1Api."""

    def __init__(self, core_api: Any, logger: Optional[LoggingPort] = None) -> None:
        self._core = core_api
        self._logger = logger or LoggingAdapter(__name__)

    def list_by_label(self, namespace: str, selector: dict[str, str], kind: str) -> list[ClusterResource]:
        selector_str = label_selector(selector)
        try:
            if kind == SERVICE_KIND:
                items = self._core.list_namespaced_service(namespace, label_selector=selector_str).items
                return [self._service(item) for item in items]
            if kind == SECRET_KIND:
                items = self._core.list_namespaced_secret(namespace, label_selector=selector_str).items
                return [self._secret(item) for item in items]
        except ApiException as e:
            raise ClusterError(
                f"listing {kind} in namespace {namespace} with selector {selector_str} failed: {e.reason}"
            ) from e
        raise ValueError(f"unsupported resource kind {kind!r}")

    def patch_label(self, resource: ManifestResource, key: str, value: str) -> None:
        body = {"metadata": {"labels": {key: value}}}
        try:
            if resource.kind == SERVICE_KIND:
                self._core.patch_namespaced_service(resource.name, resource.namespace, body)
            elif resource.kind == SECRET_KIND:
                self._core.patch_namespaced_secret(resource.name, resource.namespace, body)
            else:
                raise ValueError(f"unsupported resource kind {resource.kind!r}")
        except ApiException as e:
            raise ClusterError(
                f"labeling {resource.kind} {resource.namespace}/{resource.name} failed: {e.reason}"
            ) from e
        self._logger.debug("Labeled %s %s/%s with %s=%s", resource.kind, resource.namespace, resource.name, key, value)

    @staticmethod
    def _service(item: Any) -> ClusterResource:
        ports = tuple(
            ServicePort(port=p.port, name=p.name or "", protocol=p.protocol or "TCP") for p in (item.spec.ports or [])
        )
        return ClusterResource(
            kind=SERVICE_KIND,
            name=item.metadata.name,
            namespace=item.metadata.namespace,
            labels=dict(item.metadata.labels or {}),
            selector=dict(item.spec.selector or {}),
            ports=ports,
        )

    @staticmethod
    def _secret(item: Any) -> ClusterResource:
        return ClusterResource(
            kind=SECRET_KIND,
            name=item.metadata.name,
            namespace=item.metadata.namespace,
            labels=dict(item.metadata.labels or {}),
            data=decode_secret_data(item.data),
        )
