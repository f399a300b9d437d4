"""MySQL credential provider."""

from collections.abc import Mapping, Sequence
from typing import Any

from chartbroker.domain.cluster.resources import ClusterResource
from chartbroker.domain.params import BindParams, ProvisionParams
from chartbroker.providers.base import ROOT_USER, CredentialProvider, first_port, first_service, secret_string


class MySQLProvider(CredentialProvider):
    """Credentials for the ``mysql`` chart."""

    protocol = "mysql"

    def bind(
        self,
        services: Sequence[ClusterResource],
        bind_params: BindParams,
        provision_params: ProvisionParams,
        secrets: Mapping[str, Any],
    ) -> dict[str, Any]:
        service = first_service(services)
        port = first_port(service)

        database = provision_params.first_string(("mysqlDatabase", "auth.database"))
        user = provision_params.first_string(("mysqlUser", "auth.username"), ROOT_USER)
        if user == ROOT_USER:
            password = secret_string(secrets, "mysql-root-password")
        else:
            password = secret_string(secrets, "mysql-password")

        return self.credentials(service, port, password, username=user, database=database)
