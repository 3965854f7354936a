"""Tests for PersistentStore: validation fallback, write rejection and subscribers."""

import json

import pytest
from storefront.storage.memory_adapter import MemoryStorage
from storefront.store.persistent import PersistentStore, StoreError


def _is_list(value):
    return isinstance(value, list)


@pytest.fixture()
def store(storage, errors):
    return PersistentStore(storage, "kalakari_items", default=[], validate=_is_list, on_error=errors.append)


class TestGet:
    def test_missing_key_returns_default(self, store):
        assert store.get() == []

    def test_returns_stored_value(self, store, storage):
        storage.set_item("kalakari_items", json.dumps([1, 2]))
        assert store.get() == [1, 2]

    def test_unparseable_payload_falls_back(self, store, storage, errors):
        storage.set_item("kalakari_items", "{not json")
        assert store.get() == []
        assert len(errors) == 1

    def test_invalid_payload_falls_back(self, store, storage, errors):
        storage.set_item("kalakari_items", json.dumps({"oops": True}))
        assert store.get() == []
        assert isinstance(errors[0], StoreError)

    def test_default_is_a_fresh_copy(self, store):
        store.get().append("mutated")
        assert store.get() == []

    def test_storage_failure_falls_back(self, errors):
        class BrokenStorage(MemoryStorage):
            def get_item(self, key):
                raise OSError("disk gone")

        store = PersistentStore(BrokenStorage(), "k", default=[], on_error=errors.append)
        assert store.get() == []
        assert isinstance(errors[0], OSError)


class TestSet:
    def test_set_persists_json(self, store, storage):
        assert store.set([1, 2, 3]) is True
        assert json.loads(storage.get_item("kalakari_items")) == [1, 2, 3]

    def test_invalid_value_is_rejected(self, store, storage, errors):
        store.set(["kept"])
        assert store.set("not a list") is False
        assert store.get() == ["kept"]
        assert isinstance(errors[0], StoreError)

    def test_unserializable_value_is_rejected(self, store):
        assert store.set([object()]) is False
        assert store.get() == []

    def test_validator_that_raises_rejects(self, storage):
        def explode(value):
            raise RuntimeError("bad validator")

        store = PersistentStore(storage, "k", default=[], validate=explode)
        assert store.set([1]) is False
        assert storage.get_item("k") is None

    def test_write_failure_reports_and_returns_false(self, errors):
        class ReadOnlyStorage(MemoryStorage):
            def set_item(self, key, value):
                raise PermissionError("quota exceeded")

        store = PersistentStore(ReadOnlyStorage(), "k", default=[], on_error=errors.append)
        assert store.set([1]) is False
        assert isinstance(errors[0], PermissionError)


class TestUpdate:
    def test_update_applies_function(self, store):
        store.set([1])
        assert store.update(lambda items: items + [2]) is True
        assert store.get() == [1, 2]

    def test_updater_error_leaves_state(self, store, errors):
        store.set([1])
        assert store.update(lambda items: items[5]) is False
        assert store.get() == [1]
        assert isinstance(errors[0], IndexError)


class TestClear:
    def test_clear_removes_key_and_notifies_default(self, store, storage):
        seen = []
        store.set([1])
        store.subscribe(seen.append)
        store.clear()
        assert storage.get_item("kalakari_items") is None
        assert seen == [[]]


class TestSubscribers:
    def test_listeners_receive_new_value_in_order(self, store):
        calls = []
        store.subscribe(lambda value: calls.append(("first", value)))
        store.subscribe(lambda value: calls.append(("second", value)))
        store.set([7])
        assert calls == [("first", [7]), ("second", [7])]

    def test_failing_listener_does_not_block_others(self, store):
        received = []

        def broken(value):
            raise RuntimeError("listener bug")

        store.subscribe(broken)
        store.subscribe(received.append)
        assert store.set([1]) is True
        assert received == [[1]]

    def test_unsubscribe(self, store):
        received = []
        unsubscribe = store.subscribe(received.append)
        unsubscribe()
        unsubscribe()
        store.set([1])
        assert received == []

    def test_rejected_write_does_not_notify(self, store):
        received = []
        store.subscribe(received.append)
        store.set("nope")
        assert received == []

    def test_listener_gets_a_snapshot(self, store):
        received = []
        store.subscribe(received.append)
        value = [1]
        store.set(value)
        value.append(2)
        assert received == [[1]]

    def test_mutating_listener_does_not_affect_later_listeners(self, store):
        received = []
        store.subscribe(lambda value: value.clear())
        store.subscribe(received.append)
        store.set([1, 2])
        assert received == [[1, 2]]
        assert store.get() == [1, 2]

    def test_mutating_listener_on_clear_does_not_affect_default(self, store):
        store.subscribe(lambda value: value.append("leak"))
        store.clear()
        assert store.get() == []

    def test_failing_error_hook_is_contained(self, storage):
        def hook(exc):
            raise RuntimeError("hook bug")

        store = PersistentStore(storage, "k", default=[], validate=_is_list, on_error=hook)
        assert store.set("nope") is False


class TestSync:
    def test_sync_broadcasts_writes_from_another_store(self, storage):
        tab_a = PersistentStore(storage, "k", default=[], validate=_is_list)
        tab_b = PersistentStore(storage, "k", default=[], validate=_is_list)
        received = []
        tab_b.subscribe(received.append)
        tab_b.sync()

        tab_a.set(["from a"])
        assert tab_b.sync() == ["from a"]
        assert received == [[], ["from a"]]

    def test_sync_without_changes_is_quiet(self, store):
        received = []
        store.set([1])
        store.subscribe(received.append)
        store.sync()
        assert received == []

    def test_last_write_wins(self, storage):
        tab_a = PersistentStore(storage, "k", default=[])
        tab_b = PersistentStore(storage, "k", default=[])
        tab_a.set(["a"])
        tab_b.set(["b"])
        assert tab_a.get() == ["b"]
