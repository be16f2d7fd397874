"""Tests for cart ownership, merging, availability and deactivation."""

from datetime import UTC, datetime, timedelta

import pytest
from protean.exceptions import ValidationError
from storefront.ordering.cart.cart import Cart
from storefront.ordering.cart.events import CartCreated, CartDeactivated, CartReassigned, CartsMerged


class TestCreate:
    def test_user_cart(self):
        cart = Cart.create(user_id="user-001")

        assert cart.is_active is True
        assert cart.currency == "USD"
        assert cart.subtotal == 0.0
        assert cart.total == 0.0
        assert isinstance(cart._events[0], CartCreated)

    def test_cart_expires_after_thirty_days(self):
        cart = Cart.create(session_id="sess-001")
        lifetime = cart.expires_at - cart.created_at
        assert lifetime == timedelta(days=30)
        assert cart.is_expired is False

    def test_cart_needs_an_owner(self):
        with pytest.raises(ValidationError) as exc:
            Cart.create()
        assert "cart" in exc.value.messages


class TestAbsorb:
    def test_equal_lines_are_summed(self, user_cart, guest_cart, sneaker):
        user_cart.add_item(sneaker, quantity=1)
        guest_cart.add_item(sneaker, quantity=2)

        user_cart.absorb(guest_cart)

        assert user_cart.unique_items == 1
        assert user_cart.items[0].quantity == 3
        assert user_cart.subtotal == 120.0

    def test_other_lines_are_copied_with_their_price(self, user_cart, guest_cart, sneaker, sock):
        user_cart.add_item(sneaker)
        guest_cart.add_item(sock, quantity=2)
        sock.change_price(9.0)

        user_cart.absorb(guest_cart)

        copied = next(i for i in user_cart.items if str(i.product_id) == str(sock.id))
        assert copied.quantity == 2
        assert copied.price == 5.0
        assert user_cart.subtotal == 50.0

    def test_merge_event_counts_lines(self, user_cart, guest_cart, sneaker, sock):
        user_cart.add_item(sneaker)
        guest_cart.add_item(sneaker)
        guest_cart.add_item(sock)

        user_cart.absorb(guest_cart)

        merged = [e for e in user_cart._events if isinstance(e, CartsMerged)][0]
        assert merged.lines_merged == 1
        assert merged.lines_appended == 1


class TestAssignToUser:
    def test_session_link_is_dropped(self, guest_cart):
        guest_cart.assign_to_user("user-009")

        assert guest_cart.user_id == "user-009"
        assert guest_cart.session_id is None
        event = [e for e in guest_cart._events if isinstance(e, CartReassigned)][0]
        assert event.previous_session_id == "sess-001"


class TestValidateItems:
    def test_available_lines(self, user_cart, sneaker, catalog_of):
        user_cart.add_item(sneaker, quantity=2)
        assert user_cart.validate_items(catalog_of(sneaker)) == []
        assert user_cart.items[0].available is True

    def test_missing_product(self, user_cart, sneaker, catalog_of):
        user_cart.add_item(sneaker)
        unavailable = user_cart.validate_items(catalog_of())
        assert [i.id for i in unavailable] == [user_cart.items[0].id]

    def test_inactive_product(self, user_cart, sneaker, catalog_of):
        user_cart.add_item(sneaker)
        sneaker.deactivate()
        assert len(user_cart.validate_items(catalog_of(sneaker))) == 1

    def test_insufficient_stock_keeps_quantity(self, user_cart, sneaker, catalog_of):
        user_cart.add_item(sneaker, quantity=5)
        sneaker.adjust_stock(-48)

        unavailable = user_cart.validate_items(catalog_of(sneaker))

        assert len(unavailable) == 1
        assert user_cart.items[0].quantity == 5


class TestDeactivate:
    def test_deactivate(self, user_cart):
        user_cart.deactivate(reason="expired")

        assert user_cart.is_active is False
        event = [e for e in user_cart._events if isinstance(e, CartDeactivated)][0]
        assert event.reason == "expired"

    def test_cannot_deactivate_twice(self, user_cart):
        user_cart.deactivate()
        with pytest.raises(ValidationError):
            user_cart.deactivate()

    def test_expired_cart(self, user_cart):
        user_cart.expires_at = datetime.now(UTC) - timedelta(minutes=1)
        assert user_cart.is_expired is True
