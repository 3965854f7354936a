"""Commerce API port: abstract interface for the storefront backend.

Models and services program against this port. Adapters answer every call
with an ``ApiResponse`` and raise ``ApiError`` only when the request could
not be completed at all.
"""

from abc import ABC, abstractmethod

from storefront.api.schemas import ApiResponse
from storefront.shared.result import Err, Ok, Result
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ApiError(Exception):
    """The backend could not be reached or answered with garbage."""


class CommerceApi(ABC):
    """Abstract interface for API adapters."""

    @abstractmethod
    def get_product(self, product_id: str) -> ApiResponse:
        """Fetch one product in its catalogue wire shape."""
        ...

    @abstractmethod
    def create_order(self, order: dict) -> ApiResponse:
        """Submit an order. ``data`` carries ``{"order": {...}}`` on success."""
        ...

    @abstractmethod
    def get_cart(self) -> ApiResponse:
        """Fetch the signed-in shopper's cart. ``data`` carries ``{"items": [...]}``."""
        ...

    @abstractmethod
    def save_cart(self, items: list) -> ApiResponse: ...

    @abstractmethod
    def add_address(self, address: dict) -> ApiResponse: ...

    @abstractmethod
    def update_address(self, address_id: str, address: dict) -> ApiResponse: ...

    @abstractmethod
    def delete_address(self, address_id: str) -> ApiResponse: ...

    @abstractmethod
    def set_default_address(self, address_id: str) -> ApiResponse: ...

    @abstractmethod
    def add_to_wishlist(self, product_id: str) -> ApiResponse: ...

    @abstractmethod
    def remove_from_wishlist(self, product_id: str) -> ApiResponse: ...

    @abstractmethod
    def clear_wishlist(self) -> ApiResponse: ...


def remote_call(operation, *args, failure_message: str = "Request failed") -> Result:
    """Run one API call and translate its outcome into a Result.

    A rejected response or a transport failure becomes ``Err``; callers
    must not touch local state unless they get ``Ok``.
    """
    try:
        response = operation(*args)
    except ApiError as exc:
        logger.warning("api.unreachable", operation=getattr(operation, "__name__", repr(operation)), error=str(exc))
        return Err(failure_message)

    if not response.success:
        logger.warning("api.rejected", operation=getattr(operation, "__name__", repr(operation)), message=response.message)
        return Err(response.message or failure_message)
    return Ok(response.data)
