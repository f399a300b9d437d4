"""Per-service-type credential providers."""

from chartbroker.providers.base import CredentialProvider, HostBuilder, build_uri
from chartbroker.providers.registry import BUILTIN_PROVIDERS, ProviderRegistry

__all__ = ["BUILTIN_PROVIDERS", "CredentialProvider", "HostBuilder", "ProviderRegistry", "build_uri"]
