"""Cluster resource store port."""

from abc import ABC, abstractmethod

from chartbroker.domain.cluster.resources import ClusterResource, ManifestResource


class ClusterPort(ABC):
    """Generic list/label operations on Services and Secrets."""

    @abstractmethod
    def list_by_label(self, namespace: str, selector: dict[str, str], kind: str) -> list[ClusterResource]:
        """List resources of ``kind`` in ``namespace`` matching every label in ``selector``."""

    @abstractmethod
    def patch_label(self, resource: ManifestResource, key: str, value: str) -> None:
        """Set a single label on a resource."""
