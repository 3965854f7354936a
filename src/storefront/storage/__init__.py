"""Storage adapter abstraction: pluggable durable storage."""

from storefront.config import StorefrontConfig
from storefront.storage.port import StoragePort


def build_storage(config: StorefrontConfig) -> StoragePort:
    """Return a new storage adapter for the configured backend.

    ``memory`` keeps data for the life of the process; ``file`` persists it
    to ``config.storage_path``.
    """
    adapter = config.storage_adapter
    if adapter == "memory":
        from storefront.storage.memory_adapter import MemoryStorage

        return MemoryStorage()
    if adapter == "file":
        from storefront.storage.file_adapter import JsonFileStorage

        return JsonFileStorage(config.storage_path)
    raise ValueError(f"Unknown storage adapter: {adapter}")
