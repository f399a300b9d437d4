"""Domain ports."""

from chartbroker.domain.base.ports.chart_deployer_port import ChartDeployerPort, DeployedRelease
from chartbroker.domain.base.ports.chart_repository_port import ChartRepositoryPort
from chartbroker.domain.base.ports.cluster_port import ClusterPort
from chartbroker.domain.base.ports.logging_port import LoggingPort
from chartbroker.domain.base.ports.record_store_port import RecordStorePort
from chartbroker.domain.base.ports.task_runner_port import TaskHandlePort, TaskRunnerPort

__all__ = [
    "ChartDeployerPort",
    "ChartRepositoryPort",
    "ClusterPort",
    "DeployedRelease",
    "LoggingPort",
    "RecordStorePort",
    "TaskHandlePort",
    "TaskRunnerPort",
]
