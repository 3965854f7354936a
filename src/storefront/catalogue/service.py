"""Catalogue lookups through the commerce API.

Fetches a product by id and turns the shopper's selection into something
the product page can show or put in the cart.
"""

from collections.abc import Mapping

from protean.exceptions import ValidationError

from storefront.api.port import CommerceApi, remote_call
from storefront.catalogue.variants import ResolvedVariant, build_cart_line, clamp_quantity, resolve_variant
from storefront.shared.result import Err, Ok, Result
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CatalogueService:
    def __init__(self, api: CommerceApi) -> None:
        self.api = api

    def get_product(self, product_id: str) -> Result:
        result = remote_call(self.api.get_product, product_id, failure_message="Failed to load product")
        if not result:
            return result

        product = result.value.get("product") if isinstance(result.value, dict) else None
        if not isinstance(product, dict):
            logger.warning("catalogue.malformed_product", product_id=product_id)
            return Err("Failed to load product")
        return Ok(product)

    def resolve(self, product_id: str, selection: Mapping | None = None) -> Result:
        """Price and stock for ``selection`` of the product, as ``ResolvedVariant``."""
        found = self.get_product(product_id)
        if not found:
            return found
        return Ok(resolve_variant(found.value, selection))

    def line_for(self, product_id: str, selection: Mapping | None, quantity: int) -> Result:
        """Build the cart line for adding ``quantity`` of a selection.

        The quantity is bounded by the stock available for the selection.
        """
        found = self.get_product(product_id)
        if not found:
            return found

        resolved: ResolvedVariant = resolve_variant(found.value, selection)
        bounded = clamp_quantity(quantity, resolved.available)
        if bounded == 0:
            return Err("Out of stock")

        try:
            line = build_cart_line(found.value, selection, bounded, product_id=product_id)
        except ValidationError as exc:
            logger.warning("catalogue.invalid_line", product_id=product_id, errors=exc.messages)
            return Err("Invalid item data")
        return Ok(line)
