"""Registry of credential providers keyed by service ID."""

from typing import Optional

from chartbroker.providers.base import CredentialProvider, HostBuilder
from chartbroker.providers.mariadb import MariaDBProvider
from chartbroker.providers.mongodb import MongoDBProvider
from chartbroker.providers.mysql import MySQLProvider
from chartbroker.providers.postgresql import PostgreSQLProvider
from chartbroker.providers.rabbitmq import RabbitMQProvider
from chartbroker.providers.redis import RedisProvider

BUILTIN_PROVIDERS: dict[str, type[CredentialProvider]] = {
    "mariadb": MariaDBProvider,
    "mongodb": MongoDBProvider,
    "mysql": MySQLProvider,
    "postgresql": PostgreSQLProvider,
    "rabbitmq": RabbitMQProvider,
    "redis": RedisProvider,
}


class ProviderRegistry:
    """Maps service IDs (chart names) to credential providers."""

    def __init__(self, providers: Optional[dict[str, CredentialProvider]] = None) -> None:
        self._providers: dict[str, CredentialProvider] = dict(providers or {})

    @classmethod
    def default(cls, cluster_domain: str = "") -> "ProviderRegistry":
        host_builder = HostBuilder(cluster_domain)
        return cls({name: provider(host_builder) for name, provider in BUILTIN_PROVIDERS.items()})

    def register(self, service_id: str, provider: CredentialProvider) -> None:
        self._providers[service_id] = provider

    def get(self, service_id: str) -> Optional[CredentialProvider]:
        return self._providers.get(service_id)

    def __contains__(self, service_id: object) -> bool:
        return service_id in self._providers

    def names(self) -> frozenset[str]:
        return frozenset(self._providers)
