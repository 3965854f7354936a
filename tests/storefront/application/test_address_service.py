"""Tests for the persisted address book service."""

import json

import pytest
from storefront.addresses.management import AddressBookService, address_store, is_valid_address_book
from storefront.api.schemas import AddressForm
from storefront.shared.result import Err, Ok

FORM = {
    "type": "home",
    "name": "Asha Verma",
    "street": "12 Lake View Road",
    "city": "Jaipur",
    "state": "Rajasthan",
    "pincode": "302001",
    "phone": "9876543210",
}


@pytest.fixture()
def addresses(storage, api):
    return AddressBookService(address_store(storage, "kalakari_addresses"), owner_id="u1", api=api)


def _stored(storage):
    return json.loads(storage.get_item("kalakari_addresses"))


class TestAddAddress:
    def test_first_address_is_default(self, addresses, storage):
        result = addresses.add(FORM)
        assert isinstance(result, Ok)
        assert result.value.is_default is True
        assert _stored(storage)[0]["isDefault"] is True

    def test_records_use_camel_case_keys(self, addresses, storage):
        addresses.add(FORM)
        record = _stored(storage)[0]
        assert record["type"] == "home"
        assert set(record) == {"id", "type", "name", "street", "city", "state", "pincode", "phone", "isDefault"}

    def test_add_with_default_flag_moves_default(self, addresses):
        first = addresses.add(FORM).value
        second = addresses.add(dict(FORM, name="Ravi Kumar", isDefault=True)).value
        assert addresses.get_default().id == second.id
        assert addresses.get(first.id).is_default is False

    def test_add_from_form(self, addresses):
        form = AddressForm(**FORM)
        assert addresses.add(form.to_address_fields())

    def test_missing_field_is_rejected(self, addresses, storage):
        incomplete = {key: value for key, value in FORM.items() if key != "city"}
        assert isinstance(addresses.add(incomplete), Err)
        assert storage.get_item("kalakari_addresses") is None

    def test_backend_is_told_first(self, addresses, api):
        created = addresses.add(FORM).value
        assert api.calls[-1]["method"] == "add_address"
        assert api.calls[-1]["address"]["id"] == created.id


class TestUpdateAndDefault:
    def test_update(self, addresses):
        address = addresses.add(FORM).value
        assert addresses.update(address.id, city="Udaipur")
        assert addresses.get(address.id).city == "Udaipur"

    def test_update_accepts_record_keys(self, addresses):
        address = addresses.add(FORM).value
        addresses.update(address.id, type="work")
        assert addresses.get(address.id).address_type == "work"

    def test_update_unknown_address(self, addresses):
        assert isinstance(addresses.update("missing", city="Udaipur"), Err)

    def test_set_default(self, addresses):
        addresses.add(FORM)
        second = addresses.add(dict(FORM, name="Ravi Kumar")).value
        assert addresses.set_default(second.id)
        assert [a.name for a in addresses.addresses if a.is_default] == ["Ravi Kumar"]


class TestDelete:
    def test_delete_default_promotes_most_recent(self, addresses):
        first = addresses.add(FORM).value
        addresses.add(dict(FORM, name="Ravi Kumar"))
        addresses.add(dict(FORM, name="Meera Shah"))
        assert addresses.delete(first.id)
        assert addresses.get_default().name == "Meera Shah"

    def test_delete_last_address(self, addresses, storage):
        only = addresses.add(FORM).value
        addresses.delete(only.id)
        assert addresses.addresses == []
        assert addresses.get_default() is None
        assert _stored(storage) == []


class TestBackendFailures:
    def test_rejected_add_leaves_book_unchanged(self, addresses, api, storage):
        api.configure(should_succeed=False, failure_reason="Address limit reached")
        assert addresses.add(FORM) == Err("Address limit reached")
        assert storage.get_item("kalakari_addresses") is None

    def test_unreachable_backend_on_delete(self, addresses, api):
        address = addresses.add(FORM).value
        api.configure(unreachable=True)
        assert addresses.delete(address.id) == Err("Failed to delete address")
        assert addresses.get(address.id) is not None

    def test_rejected_default_change(self, addresses, api):
        first = addresses.add(FORM).value
        second = addresses.add(dict(FORM, name="Ravi Kumar")).value
        api.configure(should_succeed=False)
        assert not addresses.set_default(second.id)
        assert addresses.get_default().id == first.id

    def test_works_without_api(self, storage):
        offline = AddressBookService(address_store(storage, "kalakari_addresses"))
        assert offline.add(FORM)


class TestPersistence:
    def test_subscribers_get_records(self, addresses):
        received = []
        addresses.subscribe(received.append)
        addresses.add(FORM)
        assert received[0][0]["name"] == "Asha Verma"

    def test_corrupt_book_falls_back_to_empty(self, addresses, storage):
        record = dict(FORM, id="a1", isDefault=True)
        storage.set_item("kalakari_addresses", json.dumps([record, dict(record, id="a2")]))
        assert addresses.addresses == []

    def test_validator(self):
        assert is_valid_address_book([])
        assert not is_valid_address_book({"id": "a1"})
        assert not is_valid_address_book([{"id": "a1", "name": "Missing the rest"}])
