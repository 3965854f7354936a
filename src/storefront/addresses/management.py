"""Address book service: the persisted AddressBook.

Each operation loads the book from its store, applies the change to the
aggregate, optionally confirms it with the backend, and only then writes
the new records. A rejected change leaves the stored book untouched.
"""

from collections.abc import Callable, Mapping

from protean.exceptions import ValidationError

from storefront.addresses.address_book import RECORD_KEYS, Address, AddressBook
from storefront.api.port import CommerceApi, remote_call
from storefront.shared.result import Err, Ok, Result
from storefront.storage.port import StoragePort
from storefront.store.persistent import PersistentStore
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# Accept both snake_case form fields and the camelCase record keys
_FIELD_ALIASES = {record_key: field for field, record_key in RECORD_KEYS.items()} | {"isDefault": "is_default"}


def _error_reason(exc: ValidationError) -> str:
    messages = exc.messages if isinstance(exc.messages, dict) else {"address": [str(exc.messages)]}
    return "; ".join(str(message) for errors in messages.values() for message in errors)


def is_valid_address_book(data) -> bool:
    """Validator for the durable address records.

    Records must rebuild into an AddressBook, which enforces the single
    default rule.
    """
    if not isinstance(data, list) or not all(isinstance(record, dict) for record in data):
        return False
    try:
        AddressBook.from_records("validation", data)
    except (ValidationError, TypeError):
        return False
    return True


def address_store(storage: StoragePort, key: str, on_error=None) -> PersistentStore:
    """Build the PersistentStore that backs an address book."""
    return PersistentStore(storage, key, default=[], validate=is_valid_address_book, on_error=on_error)


class AddressBookService:
    def __init__(self, store: PersistentStore, owner_id: str = "guest", api: CommerceApi | None = None) -> None:
        self.store = store
        self.owner_id = owner_id
        self.api = api

    def _load(self) -> AddressBook:
        return AddressBook.from_records(self.owner_id, self.store.get())

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    @property
    def addresses(self) -> list[Address]:
        return list(self._load().addresses)

    def get(self, address_id: str) -> Address | None:
        return self._load().find(address_id)

    def get_default(self) -> Address | None:
        return self._load().default_address

    def subscribe(self, listener: Callable[[list[dict]], None]) -> Callable[[], None]:
        """Notify ``listener`` with the address records after every change."""
        return self.store.subscribe(listener)

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def _commit(self, book: AddressBook, remote: Callable[[], Result] | None, event: str, **log) -> Result:
        if self.api is not None and remote is not None:
            outcome = remote()
            if not outcome:
                return outcome

        if not self.store.set(book.to_records()):
            return Err("Failed to save addresses")

        logger.info(event, owner_id=self.owner_id, **log)
        return Ok()

    def add(self, address: Mapping) -> Result:
        """Add an address. The first address, or one flagged default, becomes the default."""
        fields = {_FIELD_ALIASES.get(key, key): value for key, value in address.items() if key != "id"}
        book = self._load()
        try:
            created = book.add_address(**fields)
        except (ValidationError, TypeError) as exc:
            reason = _error_reason(exc) if isinstance(exc, ValidationError) else "Invalid address data"
            logger.warning("addresses.invalid_address", owner_id=self.owner_id, reason=reason)
            return Err(reason)

        outcome = self._commit(
            book,
            lambda: remote_call(self.api.add_address, created.to_record(), failure_message="Failed to add address"),
            "addresses.added",
            address_id=created.id,
        )
        return Ok(created) if outcome else outcome

    def update(self, address_id: str, **changes) -> Result:
        fields = {_FIELD_ALIASES.get(key, key): value for key, value in changes.items()}
        book = self._load()
        try:
            updated = book.update_address(address_id, **fields)
        except ValidationError as exc:
            return Err(_error_reason(exc))

        outcome = self._commit(
            book,
            lambda: remote_call(
                self.api.update_address, address_id, updated.to_record(), failure_message="Failed to update address"
            ),
            "addresses.updated",
            address_id=address_id,
        )
        return Ok(updated) if outcome else outcome

    def set_default(self, address_id: str) -> Result:
        """Make ``address_id`` the only default address."""
        book = self._load()
        try:
            address = book.set_default_address(address_id)
        except ValidationError as exc:
            return Err(_error_reason(exc))

        outcome = self._commit(
            book,
            lambda: remote_call(
                self.api.set_default_address, address_id, failure_message="Failed to update default address"
            ),
            "addresses.default_changed",
            address_id=address_id,
        )
        return Ok(address) if outcome else outcome

    def delete(self, address_id: str) -> Result:
        """Remove an address, promoting the most recently added one if it was the default."""
        book = self._load()
        try:
            removed = book.remove_address(address_id)
        except ValidationError as exc:
            return Err(_error_reason(exc))

        outcome = self._commit(
            book,
            lambda: remote_call(self.api.delete_address, address_id, failure_message="Failed to delete address"),
            "addresses.removed",
            address_id=address_id,
        )
        return Ok(removed) if outcome else outcome
