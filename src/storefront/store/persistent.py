"""Persisted, validated, observable key/value store.

A ``PersistentStore`` owns one namespaced key in durable storage. Reads are
parsed and validated before they are handed out; anything missing, corrupt
or failing validation is replaced by the configured default. Writes are
validated first, persisted, then fanned out to subscribers in order.

None of the public operations raise. Failures are logged and reported to
the optional ``on_error`` hook so the UI can show a non-blocking notice.
"""

import copy
import json
import threading
from collections.abc import Callable
from typing import Any

from storefront.storage.port import StoragePort
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_UNSEEN = object()


class StoreError(Exception):
    """A payload was rejected by the store's validator."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"{message} for {key}")
        self.key = key


class PersistentStore:
    def __init__(
        self,
        storage: StoragePort,
        key: str,
        default: Any,
        validate: Callable[[Any], bool] | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        self.storage = storage
        self.key = key
        self._default = default
        self._validate = validate
        self._on_error = on_error
        self._listeners: list[Callable[[Any], None]] = []
        self._lock = threading.RLock()
        self._last_seen: Any = _UNSEEN

    @property
    def default(self) -> Any:
        """A fresh copy of the default value; callers may mutate it freely."""
        return copy.deepcopy(self._default)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get(self) -> Any:
        """Return the validated stored value, or the default."""
        try:
            raw = self.storage.get_item(self.key)
        except Exception as exc:
            logger.exception("store.read_failed", key=self.key)
            self._report(exc)
            return self.default

        if raw is None:
            return self.default

        try:
            parsed = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as exc:
            logger.error("store.unparseable_payload", key=self.key, error=str(exc))
            self._report(exc)
            return self.default

        if not self._is_valid(parsed):
            logger.warning("store.invalid_payload", key=self.key)
            self._report(StoreError(self.key, "Stored data failed validation"))
            return self.default

        return parsed

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------
    def set(self, value: Any) -> bool:
        """Validate, persist and broadcast ``value``.

        Returns False, leaving durable state untouched, when validation or
        serialization fails.
        """
        with self._lock:
            if not self._is_valid(value):
                logger.warning("store.rejected_write", key=self.key)
                self._report(StoreError(self.key, "Invalid data"))
                return False

            try:
                payload = json.dumps(value)
            except (TypeError, ValueError) as exc:
                logger.error("store.unserializable_value", key=self.key, error=str(exc))
                self._report(exc)
                return False

            try:
                self.storage.set_item(self.key, payload)
            except Exception as exc:
                logger.exception("store.write_failed", key=self.key)
                self._report(exc)
                return False

            snapshot = json.loads(payload)
            self._last_seen = snapshot
            self._notify(snapshot)
            return True

    def update(self, updater: Callable[[Any], Any]) -> bool:
        """Read the current value, apply ``updater`` and write the result."""
        with self._lock:
            current = self.get()
            try:
                updated = updater(current)
            except Exception as exc:
                logger.exception("store.updater_failed", key=self.key)
                self._report(exc)
                return False
            return self.set(updated)

    def clear(self) -> None:
        """Remove the durable entry and broadcast the default."""
        with self._lock:
            try:
                self.storage.remove_item(self.key)
            except Exception as exc:
                logger.exception("store.clear_failed", key=self.key)
                self._report(exc)
                return

            self._last_seen = self.default
            self._notify(self.default)

    def sync(self) -> Any:
        """Re-read durable storage and broadcast if another writer changed it.

        Used when another tab or process may have written the same key.
        Last write wins; nothing is merged.
        """
        with self._lock:
            current = self.get()
            if self._last_seen is _UNSEEN or current != self._last_seen:
                self._last_seen = current
                self._notify(current)
            return current

    # -------------------------------------------------------------------
    # Subscribers
    # -------------------------------------------------------------------
    def subscribe(self, listener: Callable[[Any], None]) -> Callable[[], None]:
        """Register ``listener`` and return a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, value: Any) -> None:
        # Each listener gets its own copy; mutating it affects no one else
        for listener in list(self._listeners):
            try:
                listener(copy.deepcopy(value))
            except Exception:
                logger.exception("store.listener_failed", key=self.key)

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _is_valid(self, value: Any) -> bool:
        if self._validate is None:
            return True
        try:
            return bool(self._validate(value))
        except Exception:
            logger.exception("store.validator_failed", key=self.key)
            return False

    def _report(self, exc: Exception) -> None:
        if self._on_error is None:
            return
        try:
            self._on_error(exc)
        except Exception:
            logger.exception("store.error_hook_failed", key=self.key)
