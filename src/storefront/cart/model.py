"""Cart model: composite-keyed line collection persisted in a PersistentStore.

Every mutation goes through ``PersistentStore.update`` so the durable write
and the subscriber fan-out happen in one step. Lines are identified by
``(product_id, variant)``; adding a line that is already present merges
quantities instead of appending.

Quantity steppers may hand their writes to a ``DebouncedWriter`` instead;
reads always see the pending value.
"""

from collections.abc import Callable, Iterable, Mapping
from numbers import Real

from protean.exceptions import ValidationError

from storefront.api.port import CommerceApi, remote_call
from storefront.cart.line import CartLine, line_key
from storefront.shared.result import Err, Ok, Result
from storefront.storage.port import StoragePort
from storefront.store.debounce import DebouncedWriter
from storefront.store.persistent import PersistentStore
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _is_quantity(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def is_valid_cart(data) -> bool:
    """Validator for the durable cart record.

    A sequence of line records, each with a text ``productId`` and a positive
    integer ``quantity``, no two sharing a composite key.
    """
    if not isinstance(data, list):
        return False

    seen = set()
    for record in data:
        if not isinstance(record, dict):
            return False
        if not isinstance(record.get("productId"), str) or not _is_quantity(record.get("quantity")):
            return False

        price = record.get("unitPrice", 0)
        if isinstance(price, bool) or not isinstance(price, Real) or price < 0:
            return False

        variant = record.get("variant")
        if variant is not None and not (
            isinstance(variant, dict) and all(isinstance(k, str) and isinstance(v, str) for k, v in variant.items())
        ):
            return False

        key = line_key(record["productId"], variant)
        if key in seen:
            return False
        seen.add(key)
    return True


def cart_store(storage: StoragePort, key: str, on_error=None) -> PersistentStore:
    """Build the PersistentStore that backs a cart."""
    return PersistentStore(storage, key, default=[], validate=is_valid_cart, on_error=on_error)


def total_items(lines: Iterable[CartLine]) -> int:
    return sum(line.quantity for line in lines)


def total_price(lines: Iterable[CartLine]) -> float:
    return sum(line.unit_price * line.quantity for line in lines)


class CartModel:
    def __init__(
        self,
        store: PersistentStore,
        writer: DebouncedWriter | None = None,
        api: CommerceApi | None = None,
    ) -> None:
        self.store = store
        self.writer = writer
        self.api = api
        self.is_synced = False
        self.sync_error: str | None = None
        store.subscribe(self._mark_unsynced)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    @staticmethod
    def _lines(records) -> list[CartLine]:
        return [CartLine.from_record(record) for record in records]

    def _records(self) -> list[dict]:
        if self.writer is not None:
            return self.writer.peek()
        return self.store.get()

    @property
    def items(self) -> list[CartLine]:
        return self._lines(self._records())

    def get_item(self, product_id: str, variant: Mapping | None = None) -> CartLine | None:
        """Return the line for this composite key.

        Without ``variant`` only the line that has no variant matches.
        """
        key = line_key(product_id, variant)
        return next((line for line in self.items if line.composite_key == key), None)

    def get_total_items(self) -> int:
        return total_items(self.items)

    def get_total_price(self) -> float:
        return total_price(self.items)

    def subscribe(self, listener: Callable[[list[CartLine]], None]) -> Callable[[], None]:
        """Notify ``listener`` with the full list of lines after every change."""
        return self.store.subscribe(lambda records: listener(self._lines(records)))

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add_item(self, line: CartLine) -> Result:
        """Add ``line``, merging with an existing line of the same identity.

        On merge the quantities are summed and every other field, including
        ``unit_price``, comes from the incoming line.
        """
        if not isinstance(line, CartLine):
            return Err("Invalid item data")

        merged: list[CartLine] = []

        def apply(records):
            lines = self._lines(records)
            for index, existing in enumerate(lines):
                if existing.composite_key == line.composite_key:
                    lines[index] = line.with_quantity(existing.quantity + line.quantity)
                    merged.append(lines[index])
                    break
            else:
                lines.append(line)
                merged.append(line)
            return [item.to_record() for item in lines]

        self.flush()
        if not self.store.update(apply):
            return Err("Failed to add item to cart")

        logger.info(
            "cart.item_added",
            product_id=line.product_id,
            variant=line.variant,
            quantity=merged[0].quantity,
        )
        return Ok(merged[0])

    def add(self, product_id, quantity, unit_price=0.0, variant=None) -> Result:
        """Build a line from raw input and add it; malformed input is rejected."""
        try:
            line = CartLine.build(product_id=product_id, quantity=quantity, unit_price=unit_price, variant=variant)
        except ValidationError as exc:
            logger.warning("cart.invalid_item", product_id=product_id, errors=exc.messages)
            return Err("Invalid item data")
        return self.add_item(line)

    def remove_item(self, product_id: str, variant: Mapping | None = None) -> Result:
        """Remove the line with this exact composite key.

        Omitting ``variant`` targets the line without a variant, never every
        line of the product.
        """
        key = line_key(product_id, variant)
        removed: list[CartLine] = []

        def apply(records):
            lines = self._lines(records)
            kept = [line for line in lines if line.composite_key != key]
            removed.extend(line for line in lines if line.composite_key == key)
            return [line.to_record() for line in kept]

        if self.get_item(product_id, variant) is None:
            return Err("Item not found in cart")

        self.flush()
        if not self.store.update(apply):
            return Err("Failed to remove item from cart")

        logger.info("cart.item_removed", product_id=product_id, variant=variant)
        return Ok(removed[0] if removed else None)

    def update_quantity(
        self,
        product_id: str,
        quantity: int,
        variant: Mapping | None = None,
        debounced: bool = False,
    ) -> Result:
        """Set the quantity of one line; zero or less removes the line.

        With ``debounced`` the new cart is handed to the writer and persisted
        once the stepper goes quiet. Removal is never debounced.
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            return Err("Quantity must be a whole number")

        if quantity <= 0:
            return self.remove_item(product_id, variant)

        key = line_key(product_id, variant)
        updated: list[CartLine] = []

        def apply(records):
            lines = self._lines(records)
            for index, line in enumerate(lines):
                if line.composite_key == key:
                    lines[index] = line.with_quantity(quantity)
                    updated.append(lines[index])
            return [line.to_record() for line in lines]

        if self.get_item(product_id, variant) is None:
            return Err("Item not found in cart")

        if debounced and self.writer is not None:
            self.writer.schedule(apply(self.writer.peek()))
            logger.debug("cart.quantity_scheduled", product_id=product_id, variant=variant, quantity=quantity)
            return Ok(updated[0] if updated else None)

        self.flush()
        if not self.store.update(apply):
            return Err("Failed to update item quantity")

        logger.info("cart.quantity_updated", product_id=product_id, variant=variant, quantity=quantity)
        return Ok(updated[0] if updated else None)

    def clear_cart(self) -> Result:
        """Empty the cart and drop its durable entry."""
        if self.writer is not None:
            self.writer.cancel()
        self.store.clear()
        logger.info("cart.cleared", key=self.store.key)
        return Ok()

    def flush(self) -> bool:
        """Persist any debounced change now."""
        if self.writer is None:
            return True
        return self.writer.flush()

    # -------------------------------------------------------------------
    # Server sync
    # -------------------------------------------------------------------
    def load_remote(self) -> Result:
        """Replace the local cart with the server's copy.

        When the server cannot be reached, refuses, or answers with an
        unusable cart, the local cart is kept untouched and the reason is
        returned and remembered in ``sync_error``.
        """
        if self.api is None:
            return Err("Cart sync is not configured")

        result = remote_call(self.api.get_cart, failure_message="Using local cart - server sync unavailable")
        if not result:
            return self._sync_failed(result)

        items = result.value.get("items") if isinstance(result.value, dict) else None
        if not is_valid_cart(items):
            logger.warning("cart.remote_cart_invalid")
            return self._sync_failed(Err("Using local cart - server sync unavailable"))

        if self.writer is not None:
            self.writer.cancel()
        if not self.store.set(items):
            return self._sync_failed(Err("Failed to save server cart"))

        self._synced()
        logger.info("cart.loaded_remote", lines=len(items))
        return Ok(self._lines(items))

    def sync_remote(self) -> Result:
        """Push the local cart, pending changes included, to the server."""
        if self.api is None:
            return Err("Cart sync is not configured")

        self.flush()
        records = self.store.get()
        result = remote_call(self.api.save_cart, records, failure_message="Failed to sync cart with server")
        if not result:
            return self._sync_failed(result)

        self._synced()
        logger.info("cart.synced_remote", lines=len(records))
        return Ok(self._lines(records))

    def _mark_unsynced(self, _records) -> None:
        self.is_synced = False

    def _synced(self) -> None:
        self.is_synced = True
        self.sync_error = None

    def _sync_failed(self, failure: Err) -> Err:
        self.sync_error = failure.reason
        logger.warning("cart.sync_failed", reason=failure.reason)
        return failure
