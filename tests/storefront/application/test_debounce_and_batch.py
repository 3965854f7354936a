"""Tests for debounced writes and batched store operations."""

import pytest
from storefront.store.debounce import DebouncedWriter, batch
from storefront.store.persistent import PersistentStore


class FakeTimer:
    """Stands in for threading.Timer; fires only when told to."""

    created = []

    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.started = False
        self.cancelled = False
        FakeTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.callback()


@pytest.fixture(autouse=True)
def _reset_timers():
    FakeTimer.created.clear()


@pytest.fixture()
def store(storage):
    return PersistentStore(storage, "k", default=[], validate=lambda value: isinstance(value, list))


@pytest.fixture()
def writer(store):
    return DebouncedWriter(store, delay=0.3, timer_factory=FakeTimer)


class TestDebouncedWriter:
    def test_nothing_written_until_timer_fires(self, writer, store, storage):
        writer.schedule([1])
        assert writer.pending is True
        assert storage.get_item("k") is None

        FakeTimer.created[-1].fire()
        assert store.get() == [1]
        assert writer.pending is False

    def test_burst_collapses_to_latest_value(self, writer, store, storage):
        writer.schedule([1])
        writer.schedule([1, 2])
        writer.schedule([1, 2, 3])

        assert [timer.cancelled for timer in FakeTimer.created] == [True, True, False]
        FakeTimer.created[-1].fire()
        assert store.get() == [1, 2, 3]
        assert storage.writes == 1

    def test_stale_timer_does_not_write_older_value(self, writer, store):
        writer.schedule([1])
        writer.schedule([2])
        FakeTimer.created[0].fire()
        FakeTimer.created[1].fire()
        assert store.get() == [2]

    def test_flush_writes_immediately(self, writer, store):
        writer.schedule([5])
        assert writer.flush() is True
        assert store.get() == [5]
        assert FakeTimer.created[-1].cancelled is True

    def test_flush_with_nothing_pending(self, writer, storage):
        assert writer.flush() is True
        assert storage.writes == 0

    def test_flush_reports_rejected_value(self, writer):
        writer.schedule("not a list")
        assert writer.flush() is False

    def test_cancel_drops_pending_value(self, writer, storage):
        writer.schedule([1])
        writer.cancel()
        assert writer.pending is False
        assert writer.flush() is True
        assert storage.get_item("k") is None

    def test_timer_gets_configured_delay(self, writer):
        writer.schedule([1])
        assert FakeTimer.created[0].delay == 0.3
        assert FakeTimer.created[0].started is True

    def test_peek_prefers_pending_value(self, writer, store):
        store.set([1])
        assert writer.peek() == [1]

        writer.schedule([1, 2])
        peeked = writer.peek()
        peeked.append(3)
        assert writer.peek() == [1, 2]
        assert store.get() == [1]


class TestBatch:
    def test_all_operations_succeed(self, store):
        assert batch([lambda: store.set([1]), lambda: store.update(lambda v: v + [2])]) is True
        assert store.get() == [1, 2]

    def test_stops_at_first_failure(self, store):
        ran = []
        result = batch([lambda: store.set("bad"), lambda: ran.append("second") or True])
        assert result is False
        assert ran == []

    def test_raising_operation_counts_as_failure(self):
        def explode():
            raise RuntimeError("boom")

        assert batch([explode]) is False

    def test_empty_batch(self):
        assert batch([]) is True
