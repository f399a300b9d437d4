"""PostgreSQL credential provider."""

from collections.abc import Mapping, Sequence
from typing import Any

from chartbroker.domain.cluster.resources import ClusterResource
from chartbroker.domain.params import BindParams, ProvisionParams
from chartbroker.providers.base import CredentialProvider, first_port, first_service, secret_string

DEFAULT_USER = "postgres"

# Older chart revisions used postgres* instead of postgresql* parameter names.
DATABASE_KEYS = ("postgresqlDatabase", "postgresDatabase", "auth.database")
USERNAME_KEYS = ("postgresqlUsername", "postgresUsername", "auth.username")


class PostgreSQLProvider(CredentialProvider):
    """Credentials for the ``postgresql`` chart."""

    protocol = "postgresql"

    def bind(
        self,
        services: Sequence[ClusterResource],
        bind_params: BindParams,
        provision_params: ProvisionParams,
        secrets: Mapping[str, Any],
    ) -> dict[str, Any]:
        service = first_service(services)
        port = first_port(service)

        database = provision_params.first_string(DATABASE_KEYS)
        user = provision_params.first_string(USERNAME_KEYS, DEFAULT_USER)

        _, has_postgres_password = provision_params.dig("postgresqlPostgresPassword")
        if has_postgres_password and user != DEFAULT_USER:
            password = secret_string(secrets, "postgresql-postgres-password")
        else:
            # charts older than 2.0 store postgres-password
            password = secret_string(secrets, "postgresql-password", "postgres-password")

        return self.credentials(service, port, password, username=user, database=database)
