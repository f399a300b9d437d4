"""Tests for the helm CLI deployer."""

import json
import subprocess

import pytest
import yaml

from chartbroker.domain.base.exceptions import DeployError
from chartbroker.domain.catalog.models import ChartVersion
from chartbroker.domain.cluster.resources import ManifestResource
from chartbroker.infrastructure.helm.deployer import HELM_MAX_NAME_LENGTH, HelmChartDeployer, parse_manifest
from chartbroker.infrastructure.utils.name_generator import NameGenerator

MANIFEST = """\
---
apiVersion: v1
kind: Secret
metadata:
  name: redis-abc
---
apiVersion: v1
kind: Service
metadata:
  name: redis-abc-master
  namespace: other
---
apiVersion: v1
kind: List
items:
- apiVersion: v1
  kind: ConfigMap
  metadata:
    name: redis-abc-config
"""

REDIS = ChartVersion(
    name="redis", version="10.5.7", app_version="5.0.7", urls=("https://charts.example.com/redis-10.5.7.tgz",)
)


class RecordingRunner:
    """Stands in for subprocess.run and remembers argv and values files."""

    def __init__(self, returncode=0, stdout="", stderr=""):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.calls = []
        self.values = None

    def __call__(self, args):
        self.calls.append(args)
        if "--values" in args:
            with open(args[args.index("--values") + 1]) as f:
                self.values = yaml.safe_load(f)
        return subprocess.CompletedProcess(args, self.returncode, self.stdout, self.stderr)


def fixed_names():
    return NameGenerator(time_ns=lambda: 1, random_bytes=lambda n: b"\x00" * n)


@pytest.mark.unit
class TestParseManifest:
    def test_documents_and_lists(self):
        resources = parse_manifest(MANIFEST, "ns")

        assert resources == (
            ManifestResource("Secret", "redis-abc", "ns"),
            ManifestResource("Service", "redis-abc-master", "other"),
            ManifestResource("ConfigMap", "redis-abc-config", "ns"),
        )

    def test_empty_manifest(self):
        assert parse_manifest("", "ns") == ()


@pytest.mark.unit
class TestHelmChartDeployer:
    """Test helm invocations and output handling."""

    def test_deploy_installs_with_values(self):
        output = json.dumps({"name": "redis-0100000000000000" + "0000", "namespace": "ns", "manifest": MANIFEST})
        runner = RecordingRunner(stdout=output)
        deployer = HelmChartDeployer("helm", name_generator=fixed_names(), runner=runner, wait_timeout="5m")

        release = deployer.deploy(REDIS, "ns", {"cluster": {"enabled": False}})

        argv = runner.calls[0]
        assert argv[:4] == ["helm", "install", "redis-01000000000000000000", REDIS.urls[0]]
        assert argv[argv.index("--namespace") + 1] == "ns"
        assert argv[argv.index("--timeout") + 1] == "5m"
        assert "--wait" in argv
        assert runner.values == {"cluster": {"enabled": False}}
        assert release.release_namespace == "ns"
        assert len(release.resources) == 3

    def test_deploy_failure(self):
        runner = RecordingRunner(returncode=1, stderr="Error: cannot re-use a name\n")
        deployer = HelmChartDeployer(runner=runner)

        with pytest.raises(DeployError, match="cannot re-use a name"):
            deployer.deploy(REDIS, "ns", {})

    def test_deploy_needs_chart_url(self):
        with pytest.raises(DeployError, match="missing chart URL"):
            HelmChartDeployer(runner=RecordingRunner()).deploy(REDIS.model_copy(update={"urls": ()}), "ns", {})

    def test_release_name_length_is_bounded(self):
        long_chart = REDIS.model_copy(update={"name": "x" * 40})

        with pytest.raises(DeployError, match=str(HELM_MAX_NAME_LENGTH)):
            HelmChartDeployer(runner=RecordingRunner()).release_name_for(long_chart)

    def test_undeploy(self):
        runner = RecordingRunner()

        HelmChartDeployer(runner=runner).undeploy("redis-abc", "ns")

        assert runner.calls == [["helm", "uninstall", "redis-abc", "--namespace", "ns", "--wait"]]

    def test_undeploy_of_missing_release_is_not_an_error(self):
        HelmChartDeployer(runner=RecordingRunner(returncode=1, stderr="Error: release: not found")).undeploy("r", "ns")

    def test_undeploy_failure(self):
        with pytest.raises(DeployError):
            HelmChartDeployer(runner=RecordingRunner(returncode=1, stderr="cluster unreachable")).undeploy("r", "ns")

    def test_missing_binary(self):
        def runner(args):
            raise FileNotFoundError(args[0])

        with pytest.raises(DeployError, match="not found"):
            HelmChartDeployer("/nope/helm", runner=runner).undeploy("r", "ns")
