"""Checkout: turns the live cart into an order through the API.

Totals are recomputed from the cart at the moment of checkout. The cart is
cleared only after the backend accepts the order; any failure leaves the
cart and the address book exactly as they were.
"""

from storefront.addresses.management import AddressBookService
from storefront.api.port import CommerceApi, remote_call
from storefront.cart.model import CartModel
from storefront.pricing.engine import OrderPricing, PricingRules, calculate_pricing
from storefront.shared.result import Err, Ok, Result
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CheckoutService:
    def __init__(
        self,
        cart: CartModel,
        addresses: AddressBookService,
        api: CommerceApi,
        rules: PricingRules | None = None,
    ) -> None:
        self.cart = cart
        self.addresses = addresses
        self.api = api
        self.rules = rules or PricingRules()

    def summary(self, discount_percent: float = 0) -> OrderPricing:
        """Pricing for the cart as it is right now."""
        return calculate_pricing(self.cart.items, self.rules, discount_percent)

    def place_order(self, payment_method: str, address_id: str | None = None, discount_percent: float = 0) -> Result:
        """Submit the cart as an order, shipping to ``address_id`` or the default address."""
        lines = self.cart.items
        if not lines:
            return Err("Your cart is empty")

        address = self.addresses.get(address_id) if address_id else self.addresses.get_default()
        if address is None:
            return Err("Please select a delivery address")

        if not payment_method:
            return Err("Please select a payment method")

        pricing = calculate_pricing(lines, self.rules, discount_percent)
        order = {
            "items": [line.to_record() for line in lines],
            "shippingAddress": address.to_record(),
            "paymentMethod": payment_method,
            "pricing": pricing.to_record(),
        }

        outcome = remote_call(self.api.create_order, order, failure_message="Failed to place order")
        if not outcome:
            logger.warning("checkout.order_rejected", reason=outcome.reason, total=pricing.total)
            return outcome

        self.cart.clear_cart()
        created = (outcome.value or {}).get("order") or {}
        logger.info("checkout.order_placed", order_id=created.get("_id"), total=pricing.total)
        return Ok(created)
