"""Global test configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from chartbroker.application.services.catalog_service import CatalogService  # noqa: E402
from chartbroker.application.services.lifecycle_manager import InstanceLifecycleManager  # noqa: E402
from chartbroker.infrastructure.persistence.json_record_store import JSONRecordStore  # noqa: E402
from chartbroker.infrastructure.tasks.background_runner import BackgroundTaskRunner  # noqa: E402
from chartbroker.providers.registry import ProviderRegistry  # noqa: E402
from tests.fixtures.chart_index import sample_charts  # noqa: E402
from tests.fixtures.fake_collaborators import (  # noqa: E402
    FakeChartRepository,
    FakeCluster,
    FakeDeployer,
    ManualRunner,
)

CLUSTER_DOMAIN = "cluster.local"


@pytest.fixture(autouse=True)
def quiet_console(monkeypatch):
    """Keep rich output out of test logs."""
    monkeypatch.setenv("LOG_CONSOLE_ENABLED", "false")


@pytest.fixture
def chart_repository() -> FakeChartRepository:
    return FakeChartRepository(sample_charts())


@pytest.fixture
def provider_registry() -> ProviderRegistry:
    return ProviderRegistry.default(CLUSTER_DOMAIN)


@pytest.fixture
def catalog_service(chart_repository, provider_registry) -> CatalogService:
    return CatalogService(chart_repository, registry=provider_registry)


@pytest.fixture
def record_store(tmp_path) -> JSONRecordStore:
    return JSONRecordStore(str(tmp_path / "records.json"))


@pytest.fixture
def cluster() -> FakeCluster:
    return FakeCluster()


@pytest.fixture
def deployer(cluster) -> FakeDeployer:
    return FakeDeployer(cluster)


@pytest.fixture
def background_runner():
    runner = BackgroundTaskRunner(max_workers=4)
    yield runner
    runner.shutdown(wait=True)


@pytest.fixture
def manual_runner() -> ManualRunner:
    return ManualRunner()


def make_lifecycle(store, catalog, charts, deployer, cluster, runner, registry) -> InstanceLifecycleManager:
    return InstanceLifecycleManager(
        store=store,
        catalog=catalog,
        charts=charts,
        deployer=deployer,
        cluster=cluster,
        runner=runner,
        providers=registry,
    )


@pytest.fixture
def lifecycle(record_store, catalog_service, chart_repository, deployer, cluster, background_runner, provider_registry):
    """Lifecycle manager over a JSON store, fake helm and fake cluster."""
    return make_lifecycle(
        record_store, catalog_service, chart_repository, deployer, cluster, background_runner, provider_registry
    )


@pytest.fixture
def manual_lifecycle(record_store, catalog_service, chart_repository, deployer, cluster, manual_runner, provider_registry):
    """Lifecycle manager whose background work runs only when the test says so."""
    return make_lifecycle(
        record_store, catalog_service, chart_repository, deployer, cluster, manual_runner, provider_registry
    )
