"""Chart repository port."""

from abc import ABC, abstractmethod

from chartbroker.domain.catalog.models import ChartVersion


class ChartRepositoryPort(ABC):
    """Source of chart version metadata."""

    @abstractmethod
    def list_charts(self) -> dict[str, list[ChartVersion]]:
        """Return every chart name mapped to its versions."""

    @abstractmethod
    def resolve_chart(self, name: str, app_version: str) -> ChartVersion:
        """Return the newest packaging version of ``name`` for ``app_version``.

        Raises ChartNotFoundError when nothing matches.
        """
