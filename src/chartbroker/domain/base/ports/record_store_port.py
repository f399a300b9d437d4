"""Operation record store port."""

from abc import ABC, abstractmethod
from typing import Optional

from chartbroker.domain.base.exceptions import RecordNotFoundError


class RecordStorePort(ABC):
    """Durable, namespaced flat string map per instance.

    Implementations raise RecordAlreadyExistsError on duplicate create,
    RecordNotFoundError when a key is absent and RecordStoreError otherwise.
    """

    @abstractmethod
    def create(self, key: str, fields: dict[str, str], labels: Optional[dict[str, str]] = None) -> None:
        """Create a record; the key must not already exist."""

    @abstractmethod
    def get(self, key: str) -> dict[str, str]:
        """Return a copy of the record's fields."""

    @abstractmethod
    def update(self, key: str, fields: dict[str, Optional[str]]) -> dict[str, str]:
        """Apply a partial update; a None value deletes that field. Returns the new fields."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete the record and everything in it."""

    def exists(self, key: str) -> bool:
        try:
            self.get(key)
        except RecordNotFoundError:
            return False
        return True
