import pytest
from storefront.catalogue.product.product import Product
from storefront.ordering.cart.cart import Cart


def _product(name, price, quantity=50, max_order_quantity=10):
    product = Product.create(
        name=name,
        description=f"{name} description",
        category_id="cat-001",
        brand="Acme",
        price=price,
        sku=name.upper().replace(" ", "-"),
        inventory={"quantity": quantity, "max_order_quantity": max_order_quantity},
    )
    product.activate()
    return product


@pytest.fixture()
def sneaker():
    return _product("Sneaker", 40.0)


@pytest.fixture()
def sock():
    return _product("Sock", 5.0)


@pytest.fixture()
def user_cart():
    return Cart.create(user_id="user-001")


@pytest.fixture()
def guest_cart():
    return Cart.create(session_id="sess-001")


class InMemoryCatalog:
    """Stand-in for the product repository's ``find``."""

    def __init__(self, *products):
        self._products = {str(p.id): p for p in products}

    def find(self, product_id):
        return self._products.get(str(product_id))


@pytest.fixture()
def catalog_of():
    return InMemoryCatalog
