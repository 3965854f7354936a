"""In-memory storage adapter for tests and development.

Several stores (or simulated browser tabs) can share one instance to model
a single durable storage area.
"""

from storefront.storage.port import StoragePort


class MemoryStorage(StoragePort):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self.writes: int = 0

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value
        self.writes += 1

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)
