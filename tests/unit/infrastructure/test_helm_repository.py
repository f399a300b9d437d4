"""Tests for the chart repository index client."""

from unittest.mock import Mock

import pytest
import requests

from chartbroker.domain.base.exceptions import ChartNotFoundError, UpstreamError
from chartbroker.infrastructure.helm.repository import HelmChartRepository, parse_index
from tests.fixtures.chart_index import INDEX_YAML, REPO_URL


def session_returning(text):
    response = Mock()
    response.text = text
    response.raise_for_status.return_value = None
    session = Mock()
    session.get.return_value = response
    return session


@pytest.mark.unit
class TestParseIndex:
    def test_entries_become_chart_versions(self):
        charts = parse_index(INDEX_YAML, REPO_URL)

        assert sorted(charts) == ["nginx-ingress", "redis"]
        latest = charts["redis"][0]
        assert latest.version == "10.5.7"
        assert latest.app_version == "5.0.7"
        assert latest.keywords == ("redis", "keyvalue", "database")
        assert charts["nginx-ingress"][0].app_version == ""

    def test_relative_urls_resolve_against_repository(self):
        charts = parse_index(INDEX_YAML, REPO_URL)

        assert charts["redis"][0].urls == (f"{REPO_URL}/redis-10.5.7.tgz",)
        assert charts["redis"][1].urls == ("https://mirror.example.com/redis-10.5.6.tgz",)


@pytest.mark.unit
class TestHelmChartRepository:
    """Test index download, caching and chart resolution."""

    def test_downloads_index_once_within_ttl(self):
        session = session_returning(INDEX_YAML)
        repository = HelmChartRepository(REPO_URL, session=session, cache_ttl=300)

        repository.list_charts()
        repository.list_charts()

        session.get.assert_called_once_with(f"{REPO_URL}/index.yaml", timeout=30.0)

    def test_zero_ttl_always_refreshes(self):
        session = session_returning(INDEX_YAML)
        repository = HelmChartRepository(REPO_URL, session=session, cache_ttl=0)

        repository.list_charts()
        repository.list_charts()

        assert session.get.call_count == 2

    def test_resolve_chart_picks_highest_packaging_version(self):
        repository = HelmChartRepository(REPO_URL, session=session_returning(INDEX_YAML))

        assert repository.resolve_chart("redis", "5.0.7").version == "10.5.7"

    def test_resolve_unknown_chart_or_version(self):
        repository = HelmChartRepository(REPO_URL, session=session_returning(INDEX_YAML))

        with pytest.raises(ChartNotFoundError, match="chart not found"):
            repository.resolve_chart("mysql", "5.7.30")
        with pytest.raises(ChartNotFoundError, match="version not found"):
            repository.resolve_chart("redis", "6.0.0")

    def test_download_failure_is_upstream_error(self):
        session = Mock()
        session.get.side_effect = requests.ConnectionError("unreachable")

        with pytest.raises(UpstreamError, match="could not download"):
            HelmChartRepository(REPO_URL, session=session).list_charts()

    def test_bad_yaml_is_upstream_error(self):
        repository = HelmChartRepository(REPO_URL, session=session_returning("- just\n- a list\n"))

        with pytest.raises(UpstreamError, match="could not parse"):
            repository.list_charts()
