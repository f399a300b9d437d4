"""File-backed operation record store for local development and tests."""

import json
import os
import shutil
import threading
from datetime import datetime
from typing import Any, Optional

from chartbroker.domain.base.exceptions import (
    RecordAlreadyExistsError,
    RecordNotFoundError,
    RecordStoreError,
)
from chartbroker.domain.base.ports.logging_port import LoggingPort
from chartbroker.domain.base.ports.record_store_port import RecordStorePort
from chartbroker.infrastructure.adapters.logging_adapter import LoggingAdapter
from chartbroker.infrastructure.persistence.metrics_decorators import instrument_record_store


class JSONRecordStore(RecordStorePort):
    """
    Keeps every record in a single JSON document.

    The file layout is ``{key: {"labels": {...}, "data": {...}}}``. A file
    that cannot be parsed is copied aside and the store starts empty.
    """

    metrics_prefix = "storage.json"

    def __init__(
        self,
        file_path: str,
        metrics: Optional[object] = None,
        logger: Optional[LoggingPort] = None,
    ) -> None:
        self.file_path = file_path
        self.metrics = metrics
        self._logger = logger or LoggingAdapter(__name__)
        self._lock = threading.RLock()
        directory = os.path.dirname(os.path.abspath(file_path))
        os.makedirs(directory, exist_ok=True)
        self._data: dict[str, dict[str, Any]] = self._load_data()

    def _load_data(self) -> dict[str, dict[str, Any]]:
        if not os.path.exists(self.file_path):
            return {}
        try:
            with open(self.file_path) as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object at the top level")
            return data
        except (json.JSONDecodeError, ValueError) as e:
            self._logger.error("Invalid record file %s, starting empty: %s", self.file_path, e)
            timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
            backup_path = f"{self.file_path}.backup.{timestamp}"
            shutil.copy(self.file_path, backup_path)
            self._logger.warning("Backup of corrupted record file created at %s", backup_path)
            return {}

    def _save_data(self) -> None:
        tmp_path = f"{self.file_path}.tmp"
        try:
            with open(tmp_path, "w") as f:
                json.dump(self._data, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.file_path)
        except OSError as e:
            raise RecordStoreError(f"failed to write record file {self.file_path}: {e}") from e

    @instrument_record_store("create")
    def create(self, key: str, fields: dict[str, str], labels: Optional[dict[str, str]] = None) -> None:
        with self._lock:
            if key in self._data:
                raise RecordAlreadyExistsError(f"record {key} already exists")
            self._data[key] = {"labels": dict(labels or {}), "data": dict(fields)}
            self._save_data()

    @instrument_record_store("get")
    def get(self, key: str) -> dict[str, str]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                raise RecordNotFoundError(f"record {key} not found")
            return dict(entry["data"])

    @instrument_record_store("update")
    def update(self, key: str, fields: dict[str, Optional[str]]) -> dict[str, str]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                raise RecordNotFoundError(f"record {key} not found")
            data = entry["data"]
            for field, value in fields.items():
                if value is None:
                    data.pop(field, None)
                else:
                    data[field] = value
            self._save_data()
            return dict(data)

    @instrument_record_store("delete")
    def delete(self, key: str) -> None:
        with self._lock:
            if key not in self._data:
                raise RecordNotFoundError(f"record {key} not found")
            del self._data[key]
            self._save_data()

    def labels(self, key: str) -> dict[str, str]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                raise RecordNotFoundError(f"record {key} not found")
            return dict(entry.get("labels", {}))

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data)
