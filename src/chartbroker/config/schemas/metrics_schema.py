"""Metrics configuration schema."""

from pydantic import BaseModel, Field


class MetricsConfig(BaseModel):
    """Metrics configuration."""

    enabled: bool = Field(True, description="Expose Prometheus metrics at /metrics")
    namespace: str = Field("chartbroker", description="Prefix for every metric name")
