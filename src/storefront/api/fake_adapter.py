"""Configurable fake commerce API for development and testing.

Records every call and answers deterministically. It can be switched to
reject requests (``success=False``) or to fail in transport (``ApiError``)
to exercise the error paths of the models that call it.
"""

import copy
from uuid import uuid4

from storefront.api.port import ApiError, CommerceApi
from storefront.api.schemas import ApiResponse


class FakeCommerceApi(CommerceApi):
    def __init__(self, products: dict | None = None, cart: list | None = None) -> None:
        self.products: dict = dict(products or {})
        self.cart: list = copy.deepcopy(cart or [])
        self.should_succeed: bool = True
        self.failure_reason: str = "Server error"
        self.unreachable: bool = False
        self.calls: list[dict] = []

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Server error",
        unreachable: bool = False,
    ) -> None:
        """Configure API behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.unreachable = unreachable

    def _respond(self, method: str, data=None, **params) -> ApiResponse:
        self.calls.append({"method": method, **params})
        if self.unreachable:
            raise ApiError("Network unreachable")
        if not self.should_succeed:
            return ApiResponse(success=False, message=self.failure_reason)
        return ApiResponse(success=True, data=data)

    def get_product(self, product_id: str) -> ApiResponse:
        if product_id not in self.products:
            self.calls.append({"method": "get_product", "product_id": product_id})
            return ApiResponse(success=False, message="Product not found")
        return self._respond("get_product", data={"product": self.products[product_id]}, product_id=product_id)

    def create_order(self, order: dict) -> ApiResponse:
        created = {"_id": f"ord-{uuid4().hex[:8]}", "status": "pending", **order}
        return self._respond("create_order", data={"order": created}, order=order)

    def get_cart(self) -> ApiResponse:
        return self._respond("get_cart", data={"items": copy.deepcopy(self.cart)})

    def save_cart(self, items: list) -> ApiResponse:
        response = self._respond("save_cart", data={"items": items}, items=items)
        if response.success:
            self.cart = copy.deepcopy(items)
        return response

    def add_address(self, address: dict) -> ApiResponse:
        return self._respond("add_address", data={"address": address}, address=address)

    def update_address(self, address_id: str, address: dict) -> ApiResponse:
        return self._respond("update_address", data={"address": address}, address_id=address_id, address=address)

    def delete_address(self, address_id: str) -> ApiResponse:
        return self._respond("delete_address", address_id=address_id)

    def set_default_address(self, address_id: str) -> ApiResponse:
        return self._respond("set_default_address", address_id=address_id)

    def add_to_wishlist(self, product_id: str) -> ApiResponse:
        return self._respond("add_to_wishlist", product_id=product_id)

    def remove_from_wishlist(self, product_id: str) -> ApiResponse:
        return self._respond("remove_from_wishlist", product_id=product_id)

    def clear_wishlist(self) -> ApiResponse:
        return self._respond("clear_wishlist")
