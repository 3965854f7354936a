import pytest
from storefront.api.fake_adapter import FakeCommerceApi
from storefront.cart.model import CartModel, cart_store
from storefront.storage.memory_adapter import MemoryStorage


@pytest.fixture(scope="session")
def _storefront_domain():
    """Initialize the storefront domain once per session."""
    from storefront.domain import init_domain

    return init_domain()


@pytest.fixture(autouse=True)
def run_around_tests(_storefront_domain):
    """Push domain context before each test, pop it after."""
    ctx = _storefront_domain.domain_context()
    ctx.push()

    yield

    ctx.pop()


@pytest.fixture()
def storage():
    return MemoryStorage()


@pytest.fixture()
def errors():
    """Collects everything reported through a store's error hook."""
    return []


@pytest.fixture()
def cart(storage, errors):
    return CartModel(cart_store(storage, "kalakari_cart", on_error=errors.append))


@pytest.fixture()
def api():
    return FakeCommerceApi(
        products={
            "prod-001": {
                "_id": "prod-001",
                "name": "Block-printed Saree",
                "price": 1200,
                "inventory": {"available": 8, "total": 10},
                "variants": [
                    {"name": "Size", "options": ["Large"], "price": 1500, "inventory": {"available": 2}},
                    {"name": "Color", "options": ["Blue"], "price": 1300},
                ],
            }
        }
    )
