"""Chart deployer port."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from chartbroker.domain.catalog.models import ChartVersion
from chartbroker.domain.cluster.resources import ManifestResource


@dataclass(frozen=True)
class DeployedRelease:
    """Identity of an installed release and the resources its manifest created."""

    release_name: str
    release_namespace: str
    resources: tuple[ManifestResource, ...] = field(default_factory=tuple)


class ChartDeployerPort(ABC):
    """Installs and removes chart releases."""

    @abstractmethod
    def deploy(self, chart: ChartVersion, namespace: str, values: dict[str, Any]) -> DeployedRelease:
        """Install ``chart`` into ``namespace`` with ``values`` as overrides."""

    @abstractmethod
    def undeploy(self, release_name: str, namespace: str) -> None:
        """Uninstall a release. Missing releases count as removed."""
