"""Shared BDD fixtures and step definitions for the Ordering context."""

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then
from storefront.catalogue.product.product import Product
from storefront.ordering.cart.cart import Cart
from storefront.ordering.order.order import Order


@pytest.fixture()
def products():
    """Products by name, created as scenarios mention them."""
    return {}


@pytest.fixture()
def product_named(products):
    """Look up a scenario product by name, creating it at ``price`` on first mention."""

    def _named(name, price=None):
        if name in products:
            return products[name]

        product = Product.create(
            name=name,
            description=f"{name} description",
            category_id="cat-001",
            brand="Acme",
            price=price,
            inventory={"quantity": 100, "max_order_quantity": 10},
        )
        product.activate()
        products[name] = product
        return product

    return _named


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a signed-in shopper's cart", target_fixture="cart")
def user_cart():
    cart = Cart.create(user_id="user-001")
    cart._events.clear()
    return cart


@given("a guest cart", target_fixture="guest")
def guest_cart():
    cart = Cart.create(session_id="sess-001")
    cart._events.clear()
    return cart


@given(parsers.cfparse('the cart holds {qty:d} x "{name}" at {price:f}'), target_fixture="cart")
def cart_holds(cart, product_named, qty, name, price):
    cart.add_item(product_named(name, price), quantity=qty)
    return cart


@given(parsers.cfparse('the guest cart holds {qty:d} x "{name}" at {price:f}'), target_fixture="guest")
def guest_cart_holds(guest, product_named, qty, name, price):
    guest.add_item(product_named(name, price), quantity=qty)
    return guest


@given("the cart was checked out", target_fixture="order")
def checked_out(cart):
    order = Order.place_from_cart(
        cart,
        order_number="ORD2403050001",
        payment_method="credit_card",
        shipping_address={
            "name": "Jane Doe",
            "email": "jane@example.com",
            "street": "123 Main St",
            "city": "Springfield",
            "state": "IL",
            "zip_code": "62701",
            "country": "US",
        },
    )
    order._events.clear()
    current_domain.repository_for(Order).add(order)
    return order


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart has {count:d} line"))
def cart_has_n_line(cart, count):
    assert cart.unique_items == count


@then(parsers.cfparse("the cart has {count:d} lines"))
def cart_has_n_lines(cart, count):
    assert cart.unique_items == count


@then(parsers.cfparse('the line for "{name}" has quantity {qty:d}'))
def line_quantity(cart, products, name, qty):
    product = products[name]
    line = next(i for i in cart.items if str(i.product_id) == str(product.id))
    assert line.quantity == qty


@then(parsers.cfparse("the cart total is {total:f}"))
def cart_total(cart, total):
    assert cart.total == pytest.approx(total)


@then(parsers.cfparse('the order status is "{status}"'))
def order_status(order, status):
    assert order.status == status


@then(parsers.cfparse('the payment status is "{status}"'))
def payment_status(order, status):
    assert order.payment_status == status


@then("the action is rejected")
def action_rejected(error):
    assert error["exc"] is not None
