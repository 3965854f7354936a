"""JSON file storage adapter: durable storage that survives restarts.

All keys live in a single JSON object on disk. Every write goes to a
temporary file in the same directory and is moved into place with
``os.replace``, so a crash mid-write leaves the previous file intact.
"""

import json
import os
import tempfile
import threading
from pathlib import Path

from storefront.storage.port import StoragePort
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class JsonFileStorage(StoragePort):
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.RLock()

    def _read(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            logger.error("storage.read_failed", path=str(self.path), error=str(exc))
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("storage.corrupt_file", path=str(self.path), error=str(exc))
            return {}

        if not isinstance(data, dict):
            logger.warning("storage.corrupt_file", path=str(self.path), error="top-level value is not an object")
            return {}

        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> str | None:
        with self._lock:
            return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def remove_item(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._read())
