"""Configuration schemas."""

from chartbroker.config.schemas.app_schema import (
    AppConfig,
    BrokerConfig,
    LoggingConfig,
    ServerConfig,
    StorageConfig,
)
from chartbroker.config.schemas.metrics_schema import MetricsConfig

__all__ = ["AppConfig", "BrokerConfig", "LoggingConfig", "MetricsConfig", "ServerConfig", "StorageConfig"]
