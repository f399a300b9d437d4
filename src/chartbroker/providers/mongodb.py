"""MongoDB credential provider."""

from collections.abc import Mapping, Sequence
from typing import Any

from chartbroker.domain.cluster.resources import ClusterResource
from chartbroker.domain.params import BindParams, ProvisionParams
from chartbroker.providers.base import ROOT_USER, CredentialProvider, first_port, first_service, secret_string


class MongoDBProvider(CredentialProvider):
    protocol = "mongodb"

    def bind(
        self,
        services: Sequence[ClusterResource],
        bind_params: BindParams,
        provision_params: ProvisionParams,
        secrets: Mapping[str, Any],
    ) -> dict[str, Any]:
        service = first_service(services)
        port = first_port(service)

        database = provision_params.first_string(("mongodbDatabase", "auth.database"))
        user = provision_params.first_string(("mongodbUsername", "auth.username"), ROOT_USER)
        password_key = "mongodb-root-password" if user == ROOT_USER else "mongodb-password"
        password = secret_string(secrets, password_key)

        return self.credentials(service, port, password, username=user, database=database)
