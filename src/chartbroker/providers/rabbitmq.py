"""RabbitMQ credential provider."""

from collections.abc import Mapping, Sequence
from typing import Any

from chartbroker.domain.base.exceptions import MissingPortsError
from chartbroker.domain.cluster.resources import ClusterResource
from chartbroker.domain.params import BindParams, ProvisionParams
from chartbroker.providers.base import CredentialProvider, first_service, secret_string

AMQP_PORT_NAME = "amqp"
DEFAULT_USER = "user"


class RabbitMQProvider(CredentialProvider):
    protocol = "amqp"

    def bind(
        self,
        services: Sequence[ClusterResource],
        bind_params: BindParams,
        provision_params: ProvisionParams,
        secrets: Mapping[str, Any],
    ) -> dict[str, Any]:
        service = first_service(services)
        port = service.port_named(AMQP_PORT_NAME)
        if port is None:
            raise MissingPortsError(f"no {AMQP_PORT_NAME} port found on service {service.name}")

        user = provision_params.first_string(("rabbitmq.username", "auth.username"), DEFAULT_USER)
        password = secret_string(secrets, "rabbitmq-password")

        return self.credentials(service, port, password, username=user)
