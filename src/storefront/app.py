"""Storefront composition root.

Builds every store and model over one storage adapter and hands them out
as attributes. Nothing is created at import time; each ``Storefront`` owns
its own state, so tests and tabs can run isolated instances side by side.

Usage:
    with Storefront(api=api) as shop:
        shop.cart.add_item(line)
        shop.checkout.place_order("cod")
"""

from collections.abc import Callable

from storefront.addresses.management import AddressBookService, address_store
from storefront.api.port import CommerceApi
from storefront.cart.model import CartModel, cart_store
from storefront.catalogue.service import CatalogueService
from storefront.checkout.service import CheckoutService
from storefront.config import StorefrontConfig
from storefront.domain import init_domain, storefront
from storefront.pricing.engine import PricingRules
from storefront.session.session import SessionModel, session_store
from storefront.shared.result import Err, Result
from storefront.storage import build_storage
from storefront.storage.port import StoragePort
from storefront.store.debounce import DebouncedWriter
from storefront.store.migrations import initialize_migrations
from storefront.utils.logging import add_context, clear_context, get_logger
from storefront.wishlist.wishlist import WishlistModel, wishlist_store

logger = get_logger(__name__)


class Storefront:
    def __init__(
        self,
        config: StorefrontConfig | None = None,
        storage: StoragePort | None = None,
        api: CommerceApi | None = None,
        owner_id: str = "guest",
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        self.config = config or StorefrontConfig.from_env()
        self.storage = storage or build_storage(self.config)
        self.api = api
        self.owner_id = owner_id
        self.rules = PricingRules.from_config(self.config)

        key = self.config.key
        cart_records = cart_store(self.storage, key("cart"), on_error=on_error)
        self.cart_writer = DebouncedWriter(cart_records, delay=self.config.debounce_delay)
        self.cart = CartModel(cart_records, writer=self.cart_writer, api=api)
        self.session = SessionModel(session_store(self.storage, key("auth"), on_error=on_error))
        self.wishlist = WishlistModel(wishlist_store(self.storage, key("wishlist"), on_error=on_error), self.session, api)
        self.addresses = AddressBookService(
            address_store(self.storage, key("addresses"), on_error=on_error), owner_id=owner_id, api=api
        )
        self.checkout = CheckoutService(self.cart, self.addresses, api, self.rules) if api is not None else None
        self.catalogue = CatalogueService(api) if api is not None else None

        self._context = None

    @property
    def initialized(self) -> bool:
        return self._context is not None

    def initialize(self) -> "Storefront":
        """Prepare the domain and migrate legacy storage. Safe to call repeatedly."""
        if self._context is not None:
            return self

        add_context(namespace=self.config.namespace, owner_id=self.owner_id)
        init_domain()
        self._context = storefront.domain_context()
        self._context.push()

        migrated = initialize_migrations(self.storage, self.config.namespace)
        logger.info("storefront.initialized", namespace=self.config.namespace, migrated=migrated)
        return self

    def refresh_cart(self) -> Result:
        """Load the server cart for a signed-in shopper; guests keep the local one."""
        if not self.session.is_authenticated:
            return Err("Sign in to sync your cart")
        return self.cart.load_remote()

    def shutdown(self) -> None:
        """Write any pending debounced cart change and release the domain context."""
        if self._context is None:
            return
        self.cart.flush()
        self._context.pop()
        self._context = None
        clear_context()

    def __enter__(self) -> "Storefront":
        return self.initialize()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
