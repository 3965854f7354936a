"""Variant resolution: price and stock for the shopper's current selection.

Products arrive from the catalogue API in their wire shape::

    {
        "price": 1200,
        "inventory": {"available": 8, "total": 10},
        "variants": [
            {"name": "Size", "options": ["Large"], "price": 1500, "inventory": {"available": 2}},
        ],
    }

Resolution is pure: it reads the product and the selection and never
touches the cart. It runs again every time one axis of the selection
changes.
"""

from collections.abc import Mapping

from protean.fields import Float, Integer, String

from storefront.cart.line import CartLine
from storefront.domain import storefront


@storefront.value_object
class ResolvedVariant:
    """Price and available stock for one product selection."""

    price: Float(required=True, min_value=0.0)
    available: Integer(required=True, min_value=0)
    matched_variant: String()


def _root_price(product: Mapping) -> float:
    return product.get("price", product.get("basePrice", 0)) or 0


def _root_available(product: Mapping) -> int:
    return (product.get("inventory") or {}).get("available", 0) or 0


def _resolved(price, available, matched_variant=None) -> ResolvedVariant:
    # Oversold stock shows as nothing available
    fields = {"price": max(0, price), "available": max(0, available)}
    if matched_variant is not None:
        fields["matched_variant"] = str(matched_variant)
    return ResolvedVariant(**fields)


def find_matching_variant(product: Mapping, selection: Mapping | None) -> Mapping | None:
    """Return the first declared variant whose options are all selected.

    A variant matches when every one of its options appears among the
    values of ``selection``, on any axis. Declaration order breaks ties.
    """
    # Membership over all chosen values, not equality on the axis named
    # after the variant; changing this changes which price is shown.
    chosen = set((selection or {}).values())
    for variant in product.get("variants") or []:
        if all(option in chosen for option in variant.get("options") or []):
            return variant
    return None


def resolve_variant(product: Mapping, selection: Mapping | None = None) -> ResolvedVariant:
    """Resolve the displayed price and stock for ``selection``.

    Products without variants, and selections that match no declared
    variant, fall back to the product's own price and stock.
    """
    price = _root_price(product)
    available = _root_available(product)

    variant = find_matching_variant(product, selection) if product.get("variants") else None
    if variant is None:
        return _resolved(price, available)

    variant_price = variant.get("price")
    variant_available = (variant.get("inventory") or {}).get("available")
    return _resolved(
        variant_price if variant_price is not None else price,
        variant_available if variant_available is not None else available,
        variant.get("name"),
    )


def price_delta(product: Mapping, resolved: ResolvedVariant) -> float:
    """Signed difference between the resolved price and the base price."""
    return resolved.price - _root_price(product)


def clamp_quantity(requested: int, available: int) -> int:
    """Bound a quantity stepper to ``[1, available]``; 0 when out of stock."""
    if available <= 0:
        return 0
    return max(1, min(requested, available))


def build_cart_line(product: Mapping, selection: Mapping | None, quantity: int, product_id: str | None = None):
    """Build the cart line for adding ``selection`` of ``product`` to the cart.

    The line captures the resolved variant price, not the base price.
    """
    resolved = resolve_variant(product, selection)
    return CartLine.build(
        product_id=product_id or product.get("_id") or product.get("id"),
        quantity=quantity,
        unit_price=resolved.price,
        variant=selection,
    )
