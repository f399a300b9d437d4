"""Application configuration schema."""

from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

from chartbroker.config.schemas.metrics_schema import MetricsConfig
from chartbroker.infrastructure.helm.repository import DEFAULT_REPOSITORY_URL


class ServerConfig(BaseModel):
    """HTTP listener configuration."""

    host: str = Field("0.0.0.0", description="Address to bind")
    port: int = Field(8005, ge=1, le=65535, description="Port to listen on")
    tls_cert: Optional[str] = Field(None, description="TLS certificate file")
    tls_key: Optional[str] = Field(None, description="TLS private key file")

    @model_validator(mode="after")
    def check_tls_pair(self) -> "ServerConfig":
        if bool(self.tls_cert) != bool(self.tls_key):
            raise ValueError("tls_cert and tls_key must be set together")
        return self

    @property
    def tls_enabled(self) -> bool:
        return bool(self.tls_cert and self.tls_key)


class BrokerConfig(BaseModel):
    """Broker behaviour."""

    default_namespace: str = Field("", description="Namespace used when a request carries none")
    service_catalog_enabled_only: bool = Field(
        False, description="Only list charts that have a credential provider"
    )
    helm_repo_url: str = Field(DEFAULT_REPOSITORY_URL, description="Chart repository URL")
    index_cache_seconds: float = Field(300.0, ge=0, description="How long a downloaded index is reused")
    cluster_domain: Optional[str] = Field(None, description="Cluster DNS domain, inferred when unset")
    provisioning_settings_path: Optional[str] = Field(None, description="YAML file with per-service overrides")
    helm_binary: str = Field("helm", description="Path to the helm executable")
    helm_timeout: str = Field("10m", description="helm --timeout for install")
    task_workers: int = Field(8, ge=1, description="Background task pool size")


class StorageConfig(BaseModel):
    """Operation record storage."""

    type: Literal["configmap", "json"] = "configmap"
    namespace: Optional[str] = Field(None, description="Namespace for record ConfigMaps")
    json_path: str = Field("records.json", description="File used by the json store")
    kubeconfig: Optional[str] = Field(None, description="kubeconfig used outside a cluster")


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: Literal["text", "json"] = "text"
    file: Optional[str] = None


class AppConfig(BaseModel):
    """Root configuration."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    broker: BrokerConfig = Field(default_factory=BrokerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)
