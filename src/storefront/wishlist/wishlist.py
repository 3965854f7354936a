"""Wishlist model: saved product ids for a signed-in customer."""

from collections.abc import Callable

from storefront.api.port import CommerceApi, remote_call
from storefront.session.session import SessionModel, UserRole
from storefront.shared.result import Err, Ok, Result
from storefront.storage.port import StoragePort
from storefront.store.persistent import PersistentStore
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def is_valid_wishlist(data) -> bool:
    return isinstance(data, list) and all(isinstance(item, str) for item in data) and len(set(data)) == len(data)


def wishlist_store(storage: StoragePort, key: str, on_error=None) -> PersistentStore:
    """Build the PersistentStore that backs the wishlist."""
    return PersistentStore(storage, key, default=[], validate=is_valid_wishlist, on_error=on_error)


class WishlistModel:
    """Persisted wishlist.

    Mutations need a signed-in customer. When an API is wired the backend
    is updated first and the local list only changes after it accepts.
    """

    def __init__(self, store: PersistentStore, session: SessionModel, api: CommerceApi | None = None) -> None:
        self.store = store
        self.session = session
        self.api = api

    @property
    def items(self) -> list[str]:
        return self.store.get()

    @property
    def count(self) -> int:
        return len(self.items)

    def contains(self, product_id: str) -> bool:
        return product_id in self.items

    def subscribe(self, listener: Callable[[list[str]], None]) -> Callable[[], None]:
        return self.store.subscribe(listener)

    def _guard(self) -> Err | None:
        if not self.session.has_role(UserRole.CUSTOMER):
            return Err("Please login to manage wishlist")
        return None

    def _remote(self, method: str, *args, failure_message: str) -> Result:
        if self.api is None:
            return Ok()
        return remote_call(getattr(self.api, method), *args, failure_message=failure_message)

    def add(self, product_id: str) -> Result:
        denied = self._guard()
        if denied is not None:
            return denied
        if self.contains(product_id):
            return Ok(self.items)

        outcome = self._remote("add_to_wishlist", product_id, failure_message="Failed to add to wishlist")
        if not outcome:
            return outcome

        if not self.store.update(lambda items: items + [product_id]):
            return Err("Failed to add to wishlist")
        logger.info("wishlist.added", product_id=product_id)
        return Ok(self.items)

    def remove(self, product_id: str) -> Result:
        denied = self._guard()
        if denied is not None:
            return denied
        if not self.contains(product_id):
            return Err("Item not in wishlist")

        outcome = self._remote("remove_from_wishlist", product_id, failure_message="Failed to remove from wishlist")
        if not outcome:
            return outcome

        if not self.store.update(lambda items: [item for item in items if item != product_id]):
            return Err("Failed to remove from wishlist")
        logger.info("wishlist.removed", product_id=product_id)
        return Ok(self.items)

    def toggle(self, product_id: str) -> Result:
        return self.remove(product_id) if self.contains(product_id) else self.add(product_id)

    def clear(self) -> Result:
        denied = self._guard()
        if denied is not None:
            return denied

        outcome = self._remote("clear_wishlist", failure_message="Failed to clear wishlist")
        if not outcome:
            return outcome

        self.store.clear()
        logger.info("wishlist.cleared")
        return Ok([])
