"""CartLine value object and the composite line key."""

from collections.abc import Mapping

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Dict, Float, Integer, String

from storefront.domain import storefront


def normalize_variant(variant: Mapping | None) -> dict | None:
    """Return a plain dict for a variant selection, or None when it has no axes."""
    if not variant:
        return None
    return dict(variant)


def line_key(product_id: str, variant: Mapping | None = None) -> tuple:
    """Composite identity of a cart line: product id plus sorted axis choices."""
    return (str(product_id), tuple(sorted((variant or {}).items())))


@storefront.value_object
class CartLine:
    """A product (in one variant configuration) placed in the cart.

    ``unit_price`` is the price resolved for the selected variant when the
    line was added, not the product's base price.
    """

    product_id: String(required=True, max_length=255)
    variant: Dict()
    quantity: Integer(required=True, min_value=1)
    unit_price: Float(min_value=0.0, default=0.0)

    @invariant.post
    def variant_options_must_be_strings(self):
        if not self.variant:
            return
        for axis, option in self.variant.items():
            if not isinstance(axis, str) or not isinstance(option, str):
                raise ValidationError({"variant": [f"Variant choice {axis!r}={option!r} must be text"]})

    @classmethod
    def build(cls, product_id, quantity, unit_price=0.0, variant=None):
        fields = {"product_id": product_id, "quantity": quantity, "unit_price": unit_price}
        # A line without axes leaves the field at its empty default
        variant = normalize_variant(variant)
        if variant is not None:
            fields["variant"] = variant
        return cls(**fields)

    @classmethod
    def from_record(cls, record):
        """Rebuild a line from its durable camelCase record."""
        return cls.build(
            product_id=record["productId"],
            quantity=record["quantity"],
            unit_price=record.get("unitPrice", 0.0),
            variant=record.get("variant"),
        )

    @property
    def composite_key(self) -> tuple:
        return line_key(self.product_id, self.variant)

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity

    def with_quantity(self, quantity):
        return CartLine.build(
            product_id=self.product_id,
            quantity=quantity,
            unit_price=self.unit_price,
            variant=self.variant,
        )

    def to_record(self) -> dict:
        price = self.unit_price
        record = {
            "productId": self.product_id,
            "quantity": self.quantity,
            "unitPrice": int(price) if float(price).is_integer() else price,
        }
        if self.variant:
            record["variant"] = dict(self.variant)
        return record
