"""Application wiring."""

import os
from dataclasses import dataclass
from typing import Optional

from chartbroker.application.services.broker_service import ServiceBroker
from chartbroker.application.services.catalog_service import CatalogService
from chartbroker.application.services.lifecycle_manager import InstanceLifecycleManager
from chartbroker.application.services.provisioning_settings import ProvisioningSettings
from chartbroker.config.platform_dirs import get_work_location
from chartbroker.config.schemas.app_schema import AppConfig
from chartbroker.domain.base.exceptions import ConfigurationError
from chartbroker.domain.base.ports.record_store_port import RecordStorePort
from chartbroker.infrastructure.adapters.logging_adapter import LoggingAdapter
from chartbroker.infrastructure.helm.deployer import HelmChartDeployer
from chartbroker.infrastructure.helm.repository import HelmChartRepository
from chartbroker.infrastructure.kubernetes.client import load_core_api
from chartbroker.infrastructure.kubernetes.cluster import KubernetesCluster
from chartbroker.infrastructure.kubernetes.environment import detect_cluster_domain, detect_namespace
from chartbroker.infrastructure.monitoring.metrics import MetricsCollector
from chartbroker.infrastructure.persistence.configmap_record_store import ConfigMapRecordStore
from chartbroker.infrastructure.persistence.json_record_store import JSONRecordStore
from chartbroker.infrastructure.tasks.background_runner import BackgroundTaskRunner
from chartbroker.providers.registry import ProviderRegistry

logger = LoggingAdapter(__name__)


@dataclass
class Application:
    """Everything the HTTP surface and CLI need."""

    config: AppConfig
    broker: ServiceBroker
    catalog: CatalogService
    runner: BackgroundTaskRunner
    metrics: Optional[MetricsCollector] = None

    def shutdown(self, wait: bool = True) -> None:
        self.runner.shutdown(wait=wait)


def resolve_cluster_domain(config: AppConfig) -> str:
    if config.broker.cluster_domain is not None:
        return config.broker.cluster_domain
    try:
        return detect_cluster_domain()
    except ConfigurationError as e:
        logger.warning("Could not infer cluster domain, service hosts will omit it: %s", e)
        return ""


def build_record_store(config: AppConfig, core_api: object, metrics: Optional[MetricsCollector]) -> RecordStorePort:
    if config.storage.type == "json":
        path = config.storage.json_path
        if not os.path.isabs(path):
            path = str(get_work_location() / path)
        logger.info("Using JSON record store at %s", path)
        return JSONRecordStore(path, metrics=metrics)
    namespace = config.storage.namespace or detect_namespace()
    logger.info("Using ConfigMap record store in namespace %s", namespace)
    return ConfigMapRecordStore(core_api, namespace, metrics=metrics)


def build_catalog_service(config: AppConfig, registry: Optional[ProviderRegistry] = None) -> CatalogService:
    repository = HelmChartRepository(config.broker.helm_repo_url, cache_ttl=config.broker.index_cache_seconds)
    return CatalogService(
        repository,
        registry=registry or ProviderRegistry.default(),
        enabled_only=config.broker.service_catalog_enabled_only,
    )


def build_application(config: AppConfig) -> Application:
    metrics = MetricsCollector(namespace=config.metrics.namespace) if config.metrics.enabled else None
    registry = ProviderRegistry.default(resolve_cluster_domain(config))

    settings = ProvisioningSettings()
    if config.broker.provisioning_settings_path:
        settings = ProvisioningSettings.load(config.broker.provisioning_settings_path, set(registry.names()))

    core_api = load_core_api(config.storage.kubeconfig)
    store = build_record_store(config, core_api, metrics)
    repository = HelmChartRepository(config.broker.helm_repo_url, cache_ttl=config.broker.index_cache_seconds)
    catalog = CatalogService(repository, registry=registry, enabled_only=config.broker.service_catalog_enabled_only)
    runner = BackgroundTaskRunner(max_workers=config.broker.task_workers)

    lifecycle = InstanceLifecycleManager(
        store=store,
        catalog=catalog,
        charts=repository,
        deployer=HelmChartDeployer(config.broker.helm_binary, wait_timeout=config.broker.helm_timeout),
        cluster=KubernetesCluster(core_api),
        runner=runner,
        providers=registry,
    )
    broker = ServiceBroker(
        lifecycle,
        catalog,
        default_namespace=config.broker.default_namespace,
        provisioning_settings=settings,
    )
    return Application(config=config, broker=broker, catalog=catalog, runner=runner, metrics=metrics)
