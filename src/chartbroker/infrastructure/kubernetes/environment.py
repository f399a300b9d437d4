"""Discovery of cluster settings from the pod environment."""

import os
from typing import Optional

from chartbroker.domain.base.exceptions import ConfigurationError

RESOLV_CONF_PATH = "/etc/resolv.conf"
NAMESPACE_FILE = "/var/run/secrets/kubernetes.io/serviceaccount/namespace"
CONFIG_NAMESPACE_ENV = "CONFIG_NAMESPACE"


def cluster_domain_from_resolv_conf(text: str) -> str:
    """Return the cluster domain from a resolv.conf ``search`` line.

    Pods get search domains like ``<ns>.svc.cluster.local svc.cluster.local
    cluster.local``; the entry starting with ``svc.`` carries the domain.
    """
    for line in text.splitlines():
        fields = line.split()
        if not fields or fields[0] != "search":
            continue
        for domain in fields[1:]:
            if domain.startswith("svc."):
                return domain[len("svc."):]
    raise ConfigurationError("could not find a search domain starting with 'svc.' in resolv.conf")


def detect_cluster_domain(path: str = RESOLV_CONF_PATH) -> str:
    try:
        with open(path) as f:
            return cluster_domain_from_resolv_conf(f.read())
    except OSError as e:
        raise ConfigurationError(f"could not read {path}: {e}") from e


def detect_namespace(path: str = NAMESPACE_FILE, env: Optional[dict[str, str]] = None) -> str:
    """Namespace holding the operation records.

    ``CONFIG_NAMESPACE`` wins, then the pod's service-account namespace.
    """
    env = os.environ if env is None else env
    if value := env.get(CONFIG_NAMESPACE_ENV):
        return value
    try:
        with open(path) as f:
            namespace = f.read().strip()
    except OSError as e:
        raise ConfigurationError(
            f"{CONFIG_NAMESPACE_ENV} is not set and {path} could not be read: {e}"
        ) from e
    if not namespace:
        raise ConfigurationError(f"{path} is empty")
    return namespace
