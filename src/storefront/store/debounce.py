"""Debounced writes and batched store operations."""

import copy
import threading
from collections.abc import Callable, Iterable
from typing import Any

from storefront.store.persistent import PersistentStore
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_NOTHING = object()


class DebouncedWriter:
    """Collapse bursts of writes to a store into one write of the latest value.

    Each ``schedule`` call restarts the delay and replaces the pending value,
    so the value written is always the most recent one. ``timer_factory``
    must build an object with ``start()`` and ``cancel()`` from
    ``(delay, callback)``; it defaults to ``threading.Timer``.
    """

    def __init__(
        self,
        store: PersistentStore,
        delay: float = 0.3,
        timer_factory: Callable[[float, Callable[[], None]], Any] | None = None,
    ) -> None:
        self.store = store
        self.delay = delay
        self._timer_factory = timer_factory or threading.Timer
        self._timer = None
        self._pending: Any = _NOTHING
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._pending is not _NOTHING

    def peek(self) -> Any:
        """The value the store will hold once the pending write lands."""
        with self._lock:
            if self._pending is not _NOTHING:
                return copy.deepcopy(self._pending)
        return self.store.get()

    def schedule(self, value: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = value
            self._timer = self._timer_factory(self.delay, self.flush)
            self._timer.start()

    def flush(self) -> bool:
        """Write the pending value now. Returns True when nothing was pending."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            value, self._pending = self._pending, _NOTHING

        if value is _NOTHING:
            return True
        return self.store.set(value)

    def cancel(self) -> None:
        """Drop the pending value without writing it."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending = _NOTHING


def batch(operations: Iterable[Callable[[], bool]]) -> bool:
    """Run operations in order, stopping at the first one that fails.

    An operation that raises counts as a failure.
    """
    try:
        return all(op() for op in operations)
    except Exception:
        logger.exception("store.batch_failed")
        return False
