"""Redis credential provider."""

from collections.abc import Mapping, Sequence
from typing import Any, Optional

from chartbroker.domain.base.exceptions import NoServicesError, PrimaryServiceNotFoundError
from chartbroker.domain.cluster.resources import ClusterResource
from chartbroker.domain.params import BindParams, ProvisionParams
from chartbroker.providers.base import CredentialProvider, first_port, secret_string

MASTER_SELECTORS = (("role", "master"), ("app.kubernetes.io/component", "master"))


def find_master(services: Sequence[ClusterResource]) -> Optional[ClusterResource]:
    for service in services:
        for key, value in MASTER_SELECTORS:
            if service.selector.get(key) == value:
                return service
    return None


class RedisProvider(CredentialProvider):
    """Credentials for the ``redis`` chart.

    The chart deploys a master and replicas; only the master accepts writes,
    so the master Service is the one handed out. Redis has no user, only a
    password.
    """

    protocol = "redis"

    def bind(
        self,
        services: Sequence[ClusterResource],
        bind_params: BindParams,
        provision_params: ProvisionParams,
        secrets: Mapping[str, Any],
    ) -> dict[str, Any]:
        if not services:
            raise NoServicesError()
        master = find_master(services)
        if master is None:
            raise PrimaryServiceNotFoundError("could not identify the master service")
        port = first_port(master)
        password = secret_string(secrets, "redis-password")

        return self.credentials(master, port, password)
