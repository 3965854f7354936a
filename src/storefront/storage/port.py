"""Storage port: abstract interface for durable key/value storage.

Adapters hold raw strings per key, like browser localStorage. Stores
program against the port; adapters are swapped via configuration.
"""

from abc import ABC, abstractmethod


class StoragePort(ABC):
    """Abstract interface for storage adapters."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the raw value stored under ``key``, or None when absent."""
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete ``key``. Removing an absent key is not an error."""
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        """Return every key currently held."""
        ...
