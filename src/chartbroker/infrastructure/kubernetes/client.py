"""Kubernetes API client construction."""

from typing import Optional

from kubernetes import client, config
from kubernetes.config.config_exception import ConfigException

from chartbroker.domain.base.exceptions import ConfigurationError
from chartbroker.infrastructure.logging.logger import get_logger

logger = get_logger(__name__)


def load_core_api(kubeconfig: Optional[str] = None, context: Optional[str] = None) -> client.CoreV1Api:
    """Return a CoreV1Api using in-cluster credentials, falling back to a kubeconfig."""
    if kubeconfig is None:
        try:
            config.load_incluster_config()
            logger.debug("Loaded in-cluster Kubernetes configuration")
            return client.CoreV1Api()
        except ConfigException:
            logger.debug("Not running in a cluster, trying kubeconfig")
    try:
        config.load_kube_config(config_file=kubeconfig, context=context)
    except (ConfigException, FileNotFoundError) as e:
        raise ConfigurationError(f"could not load Kubernetes configuration: {e}") from e
    return client.CoreV1Api()
