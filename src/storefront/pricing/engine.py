"""Order pricing: subtotal, shipping, tax and total for a cart.

Amounts are whole rupees. Pricing is always derived from the cart lines'
captured ``unit_price`` and never stored on its own.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from protean.fields import Integer

from storefront.cart.line import CartLine
from storefront.config import FLAT_SHIPPING_FEE, FREE_SHIPPING_THRESHOLD, TAX_RATE, StorefrontConfig
from storefront.domain import storefront


def round_half_up(value) -> int:
    """Round to the nearest whole unit, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class PricingRules:
    free_shipping_threshold: int = FREE_SHIPPING_THRESHOLD
    flat_shipping_fee: int = FLAT_SHIPPING_FEE
    tax_rate: float = TAX_RATE

    @classmethod
    def from_config(cls, config: StorefrontConfig) -> "PricingRules":
        return cls(
            free_shipping_threshold=config.free_shipping_threshold,
            flat_shipping_fee=config.flat_shipping_fee,
            tax_rate=config.tax_rate,
        )


@storefront.value_object
class OrderPricing:
    """Derived totals for one cart."""

    subtotal: Integer(required=True, min_value=0)
    shipping: Integer(required=True, min_value=0)
    tax: Integer(required=True, min_value=0)
    discount: Integer(default=0, min_value=0)
    total: Integer(required=True, min_value=0)

    def to_record(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "shipping": self.shipping,
            "tax": self.tax,
            "discount": self.discount,
            "total": self.total,
        }


def calculate_subtotal(lines: Iterable[CartLine]) -> int:
    return round_half_up(sum(Decimal(str(line.unit_price)) * line.quantity for line in lines))


def calculate_shipping(subtotal: int, rules: PricingRules | None = None) -> int:
    """Free at or above the threshold, flat fee below it."""
    rules = rules or PricingRules()
    return 0 if subtotal >= rules.free_shipping_threshold else rules.flat_shipping_fee


def calculate_tax(subtotal: int, rules: PricingRules | None = None) -> int:
    rules = rules or PricingRules()
    return round_half_up(Decimal(str(subtotal)) * Decimal(str(rules.tax_rate)))


def calculate_discount(subtotal: int, discount_percent: float) -> int:
    return round_half_up(Decimal(str(subtotal)) * Decimal(str(discount_percent)) / 100)


def free_shipping_remaining(subtotal: int, rules: PricingRules | None = None) -> int:
    """How much more must be spent to unlock free shipping."""
    rules = rules or PricingRules()
    return max(0, rules.free_shipping_threshold - subtotal)


def calculate_pricing(
    lines: Iterable[CartLine],
    rules: PricingRules | None = None,
    discount_percent: float = 0,
) -> OrderPricing:
    """Compute the pricing snapshot for ``lines``.

    Free shipping is judged on the subtotal before any discount.
    """
    rules = rules or PricingRules()
    subtotal = calculate_subtotal(lines)
    shipping = calculate_shipping(subtotal, rules)
    tax = calculate_tax(subtotal, rules)
    discount = min(calculate_discount(subtotal, discount_percent), subtotal) if discount_percent else 0

    return OrderPricing(
        subtotal=subtotal,
        shipping=shipping,
        tax=tax,
        discount=discount,
        total=subtotal + shipping + tax - discount,
    )
