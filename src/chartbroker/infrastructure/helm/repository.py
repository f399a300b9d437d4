"""Helm chart repository read through its index.yaml."""

import threading
import time
from typing import Any, Optional
from urllib.parse import urljoin

import requests
import yaml

from chartbroker.domain.base.exceptions import ChartNotFoundError, UpstreamError
from chartbroker.domain.base.ports.chart_repository_port import ChartRepositoryPort
from chartbroker.domain.base.ports.logging_port import LoggingPort
from chartbroker.domain.catalog.builder import parse_chart_version
from chartbroker.domain.catalog.models import ChartVersion
from chartbroker.infrastructure.adapters.logging_adapter import LoggingAdapter

DEFAULT_REPOSITORY_URL = "https://charts.helm.sh/stable"


def chart_version_from_entry(name: str, entry: dict[str, Any], base_url: str) -> ChartVersion:
    """Build a ChartVersion from one index.yaml entry; relative URLs resolve against the repository."""
    urls = tuple(urljoin(base_url, str(url)) for url in entry.get("urls") or [])
    return ChartVersion(
        name=entry.get("name") or name,
        version=str(entry.get("version", "")),
        app_version=str(entry.get("appVersion") or ""),
        description=entry.get("description") or "",
        keywords=tuple(str(k) for k in entry.get("keywords") or []),
        urls=urls,
        deprecated=bool(entry.get("deprecated", False)),
    )


def parse_index(text: str, repository_url: str) -> dict[str, list[ChartVersion]]:
    index = yaml.safe_load(text) or {}
    if not isinstance(index, dict):
        raise ValueError("index.yaml is not a mapping")
    base_url = repository_url.rstrip("/") + "/"
    charts: dict[str, list[ChartVersion]] = {}
    for name, entries in (index.get("entries") or {}).items():
        charts[name] = [chart_version_from_entry(name, entry, base_url) for entry in entries or []]
    return charts


class HelmChartRepository(ChartRepositoryPort):
    """Downloads and caches a chart repository index."""

    def __init__(
        self,
        url: str = DEFAULT_REPOSITORY_URL,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        cache_ttl: float = 300.0,
        logger: Optional[LoggingPort] = None,
    ) -> None:
        self.url = url or DEFAULT_REPOSITORY_URL
        self._session = session or requests.Session()
        self._timeout = timeout
        self._cache_ttl = cache_ttl
        self._logger = logger or LoggingAdapter(__name__)
        self._lock = threading.Lock()
        self._charts: Optional[dict[str, list[ChartVersion]]] = None
        self._loaded_at = 0.0

    @property
    def index_url(self) -> str:
        return self.url.rstrip("/") + "/index.yaml"

    def refresh(self) -> dict[str, list[ChartVersion]]:
        self._logger.info("Downloading chart repository index from %s", self.index_url)
        try:
            response = self._session.get(self.index_url, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise UpstreamError(f"could not download chart index {self.index_url}: {e}") from e
        try:
            charts = parse_index(response.text, self.url)
        except (yaml.YAMLError, ValueError) as e:
            raise UpstreamError(f"could not parse chart index {self.index_url}: {e}") from e
        with self._lock:
            self._charts = charts
            self._loaded_at = time.monotonic()
        self._logger.debug("Loaded %d charts from %s", len(charts), self.index_url)
        return charts

    def list_charts(self) -> dict[str, list[ChartVersion]]:
        with self._lock:
            fresh = self._charts is not None and time.monotonic() - self._loaded_at < self._cache_ttl
            if fresh:
                return dict(self._charts)
        return dict(self.refresh())

    def resolve_chart(self, name: str, app_version: str) -> ChartVersion:
        versions = self.list_charts().get(name)
        if not versions:
            raise ChartNotFoundError(f"chart not found: {name}", chart=name)
        candidates = [v for v in versions if v.app_version == app_version]
        if not candidates:
            raise ChartNotFoundError(f"version not found: {name} @ {app_version}", chart=name)

        def sort_key(chart: ChartVersion) -> Any:
            try:
                return (1, parse_chart_version(chart.version))
            except ValueError:
                return (0, chart.version)

        return max(candidates, key=sort_key)
