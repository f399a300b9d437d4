"""Chart deployer driving the helm binary."""

import json
import os
import subprocess
import tempfile
from typing import Any, Callable, Optional

import yaml

from chartbroker.domain.base.exceptions import DeployError
from chartbroker.domain.base.ports.chart_deployer_port import ChartDeployerPort, DeployedRelease
from chartbroker.domain.base.ports.logging_port import LoggingPort
from chartbroker.domain.catalog.models import ChartVersion
from chartbroker.domain.cluster.resources import ManifestResource
from chartbroker.infrastructure.adapters.logging_adapter import LoggingAdapter
from chartbroker.infrastructure.utils.name_generator import NameGenerator

HELM_MAX_NAME_LENGTH = 53

CommandRunner = Callable[[list[str]], subprocess.CompletedProcess]


def run_command(args: list[str], timeout: Optional[float] = None) -> subprocess.CompletedProcess:
    return subprocess.run(args, capture_output=True, text=True, check=False, timeout=timeout)


def parse_manifest(manifest: str, default_namespace: str) -> tuple[ManifestResource, ...]:
    """Extract kind, name and namespace of every document in a rendered manifest."""
    resources = []
    for document in yaml.safe_load_all(manifest or ""):
        if not isinstance(document, dict) or "kind" not in document:
            continue
        items = document.get("items") if document["kind"].endswith("List") else [document]
        for item in items or []:
            metadata = item.get("metadata") or {}
            if not metadata.get("name"):
                continue
            resources.append(
                ManifestResource(
                    kind=item["kind"],
                    name=metadata["name"],
                    namespace=metadata.get("namespace") or default_namespace,
                )
            )
    return tuple(resources)


class HelmChartDeployer(ChartDeployerPort):
    """Installs releases with ``helm install`` and removes them with ``helm uninstall``."""

    def __init__(
        self,
        helm_binary: str = "helm",
        name_generator: Optional[NameGenerator] = None,
        runner: Optional[CommandRunner] = None,
        wait_timeout: str = "10m",
        command_timeout: Optional[float] = None,
        logger: Optional[LoggingPort] = None,
    ) -> None:
        self.helm_binary = helm_binary
        self._names = name_generator or NameGenerator()
        self._runner = runner or (lambda args: run_command(args, timeout=command_timeout))
        self._wait_timeout = wait_timeout
        self._logger = logger or LoggingAdapter(__name__)

    def _run(self, args: list[str]) -> subprocess.CompletedProcess:
        command = [self.helm_binary, *args]
        self._logger.debug("Running %s", " ".join(command))
        try:
            return self._runner(command)
        except FileNotFoundError as e:
            raise DeployError(f"helm binary {self.helm_binary!r} not found") from e
        except subprocess.TimeoutExpired as e:
            raise DeployError(f"helm {args[0]} timed out after {e.timeout}s") from e

    def release_name_for(self, chart: ChartVersion) -> str:
        name = self._names.generate(f"{chart.name}-")
        if len(name) > HELM_MAX_NAME_LENGTH:
            raise DeployError(
                f"invalid release name {name!r}: names cannot exceed {HELM_MAX_NAME_LENGTH} characters",
                chart=chart.name,
            )
        return name

    def deploy(self, chart: ChartVersion, namespace: str, values: dict[str, Any]) -> DeployedRelease:
        if not chart.urls:
            raise DeployError(f"missing chart URL for {chart.name!r}", chart=chart.name)
        if chart.deprecated:
            self._logger.warning("Chart %s:%s is deprecated", chart.name, chart.version)

        release_name = self.release_name_for(chart)
        with tempfile.NamedTemporaryFile("w", suffix=".yaml", prefix="values-", delete=False) as f:
            yaml.safe_dump(values or {}, f, default_flow_style=False)
            values_path = f.name
        try:
            result = self._run(
                [
                    "install",
                    release_name,
                    chart.urls[0],
                    "--namespace",
                    namespace,
                    "--values",
                    values_path,
                    "--wait",
                    "--timeout",
                    self._wait_timeout,
                    "--output",
                    "json",
                ]
            )
        finally:
            os.unlink(values_path)

        if result.returncode != 0:
            raise DeployError(
                f"failed to install chart {chart.name}:{chart.version}: {result.stderr.strip()}",
                chart=chart.name,
            )
        try:
            release = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as e:
            raise DeployError(f"unreadable helm install output for {release_name}: {e}", chart=chart.name) from e

        release_namespace = release.get("namespace") or namespace
        resources = parse_manifest(release.get("manifest", ""), release_namespace)
        self._logger.info(
            "Installed release %s (%s:%s) in namespace %s with %d resources",
            release_name,
            chart.name,
            chart.version,
            release_namespace,
            len(resources),
        )
        return DeployedRelease(
            release_name=release.get("name") or release_name,
            release_namespace=release_namespace,
            resources=resources,
        )

    def undeploy(self, release_name: str, namespace: str) -> None:
        result = self._run(["uninstall", release_name, "--namespace", namespace, "--wait"])
        if result.returncode == 0:
            self._logger.info("Release %s deleted from namespace %s", release_name, namespace)
            return
        if "not found" in (result.stderr or "").lower():
            self._logger.warning("Release %s not found in namespace %s, treating as removed", release_name, namespace)
            return
        raise DeployError(f"could not delete release {release_name}: {result.stderr.strip()}")
