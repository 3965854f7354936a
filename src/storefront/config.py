"""Runtime configuration for the storefront engine.

Values come from ``STOREFRONT_*`` environment variables with defaults that
match the Kalakari storefront.
"""

import os
from dataclasses import dataclass

DEFAULT_NAMESPACE = "kalakari"
FREE_SHIPPING_THRESHOLD = 1000
FLAT_SHIPPING_FEE = 50
TAX_RATE = 0.18
DEBOUNCE_DELAY = 0.3


@dataclass(frozen=True)
class StorefrontConfig:
    namespace: str = DEFAULT_NAMESPACE
    storage_adapter: str = "memory"
    storage_path: str = ".storefront/storage.json"
    free_shipping_threshold: int = FREE_SHIPPING_THRESHOLD
    flat_shipping_fee: int = FLAT_SHIPPING_FEE
    tax_rate: float = TAX_RATE
    debounce_delay: float = DEBOUNCE_DELAY

    @classmethod
    def from_env(cls) -> "StorefrontConfig":
        """Build a configuration from ``STOREFRONT_*`` environment variables."""
        return cls(
            namespace=os.environ.get("STOREFRONT_NAMESPACE", DEFAULT_NAMESPACE),
            storage_adapter=os.environ.get("STOREFRONT_STORAGE", "memory"),
            storage_path=os.environ.get("STOREFRONT_STORAGE_PATH", ".storefront/storage.json"),
            free_shipping_threshold=int(
                os.environ.get("STOREFRONT_FREE_SHIPPING_THRESHOLD", FREE_SHIPPING_THRESHOLD)
            ),
            flat_shipping_fee=int(os.environ.get("STOREFRONT_FLAT_SHIPPING_FEE", FLAT_SHIPPING_FEE)),
            tax_rate=float(os.environ.get("STOREFRONT_TAX_RATE", TAX_RATE)),
            debounce_delay=float(os.environ.get("STOREFRONT_DEBOUNCE_DELAY", DEBOUNCE_DELAY)),
        )

    def key(self, name: str) -> str:
        """Return the namespaced storage key for a logical store."""
        return f"{self.namespace}_{name}"
