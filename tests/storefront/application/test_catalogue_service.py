"""Tests for CatalogueService: product lookup, resolution and cart lines from the API."""

import pytest
from storefront.catalogue.service import CatalogueService
from storefront.shared.result import Err, Ok


@pytest.fixture()
def catalogue(api):
    return CatalogueService(api)


class TestGetProduct:
    def test_known_product(self, catalogue, api):
        result = catalogue.get_product("prod-001")
        assert isinstance(result, Ok)
        assert result.value["name"] == "Block-printed Saree"
        assert api.calls[-1] == {"method": "get_product", "product_id": "prod-001"}

    def test_unknown_product(self, catalogue):
        assert catalogue.get_product("prod-404") == Err("Product not found")

    def test_unreachable_backend(self, catalogue, api):
        api.configure(unreachable=True)
        assert catalogue.get_product("prod-001") == Err("Failed to load product")


class TestResolve:
    def test_resolves_selected_variant(self, catalogue):
        resolved = catalogue.resolve("prod-001", {"Size": "Large"}).value
        assert resolved.price == 1500
        assert resolved.available == 2
        assert resolved.matched_variant == "Size"

    def test_without_selection_uses_product_price(self, catalogue):
        assert catalogue.resolve("prod-001").value.price == 1200


class TestLineFor:
    def test_line_carries_variant_price(self, catalogue, cart):
        line = catalogue.line_for("prod-001", {"Color": "Blue"}, 2).value
        assert line.unit_price == 1300
        assert line.variant == {"Color": "Blue"}

        cart.add_item(line)
        assert cart.get_total_price() == 2600

    def test_quantity_is_bounded_by_variant_stock(self, catalogue):
        assert catalogue.line_for("prod-001", {"Size": "Large"}, 5).value.quantity == 2

    def test_line_without_selection(self, catalogue):
        line = catalogue.line_for("prod-001", None, 1).value
        assert line.unit_price == 1200
        assert not line.variant

    def test_out_of_stock(self, catalogue, api):
        api.products["prod-002"] = {"_id": "prod-002", "price": 400, "inventory": {"available": 0}}
        assert catalogue.line_for("prod-002", None, 1) == Err("Out of stock")

    def test_unknown_product(self, catalogue):
        assert catalogue.line_for("prod-404", None, 1) == Err("Product not found")
