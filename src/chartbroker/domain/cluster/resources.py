"""Cluster resource value objects."""

from dataclasses import dataclass, field
from typing import Any, Optional

SERVICE_KIND = "Service"
SECRET_KIND = "Secret"

INSTANCE_LABEL = "chartbroker.instance"


@dataclass(frozen=True)
class ServicePort:
    """A port exposed by a Service."""

    port: int
    name: str = ""
    protocol: str = "TCP"


@dataclass(frozen=True)
class ClusterResource:
    """A Service or Secret read from the cluster.

    Secret data is already decoded to text.
    """

    kind: str
    name: str
    namespace: str
    labels: dict[str, str] = field(default_factory=dict)
    selector: dict[str, str] = field(default_factory=dict)
    ports: tuple[ServicePort, ...] = ()
    data: dict[str, Any] = field(default_factory=dict)

    def port_named(self, name: str) -> Optional[ServicePort]:
        for port in self.ports:
            if port.name == name:
                return port
        return None


@dataclass(frozen=True)
class ManifestResource:
    """A resource identifier from a rendered release manifest."""

    kind: str
    name: str
    namespace: str
