"""Storefront bounded context: client-side commerce state.

Holds the cart, wishlist, session and address book across reloads,
resolves variant pricing and computes order totals.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

# Get logger for this module
logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")

_initialized = False


def init_domain():
    """Initialize the storefront domain once; later calls are no-ops."""
    global _initialized
    if not _initialized:
        storefront.init()
        _initialized = True
        logger.debug("domain.initialized", domain=storefront.name)
    return storefront
