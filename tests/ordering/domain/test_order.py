"""Tests for order placement, status, payment and refunds."""

import pytest
from protean.exceptions import ValidationError
from storefront.ordering.order.events import OrderPlaced, OrderRefunded, OrderStatusChanged
from storefront.ordering.order.order import Order, OrderStatus, PaymentStatus


@pytest.fixture()
def filled_cart(user_cart, sneaker, sock):
    user_cart.add_item(sneaker, quantity=2, variant={"name": "Size", "option": "42"})
    user_cart.add_item(sock, quantity=4)
    user_cart.set_tax(9.0)
    user_cart.set_shipping(6.0, "express")
    user_cart.apply_discount("SAVE5", 5.0)
    return user_cart


@pytest.fixture()
def order(filled_cart, shipping_address):
    return Order.place_from_cart(
        filled_cart,
        order_number="ORD2403050001",
        payment_method="credit_card",
        shipping_address=shipping_address,
    )


class TestPlaceFromCart:
    def test_snapshot_of_cart(self, order, filled_cart):
        assert order.user_id == filled_cart.user_id
        assert order.cart_id == filled_cart.id
        assert len(order.items) == 2
        assert order.subtotal == 100.0
        assert order.tax == 9.0
        assert order.shipping.cost == 6.0
        assert order.shipping.method == "express"
        assert order.discount.code == "SAVE5"
        assert order.total == filled_cart.total == 110.0

    def test_variant_is_copied(self, order):
        sized = next(i for i in order.items if i.variant)
        assert sized.variant.name == "Size"
        assert sized.variant.option == "42"

    def test_starts_pending_with_history(self, order):
        assert order.status == OrderStatus.PENDING.value
        assert order.payment_status == PaymentStatus.PENDING.value
        assert len(order.status_history) == 1
        assert order.status_history[0].status == OrderStatus.PENDING.value

    def test_billing_defaults_to_shipping(self, order):
        assert order.billing_address == order.shipping_address
        assert order.shipping_address.city == "Springfield"

    def test_raises_order_placed(self, order):
        placed = [e for e in order._events if isinstance(e, OrderPlaced)]
        assert len(placed) == 1
        assert placed[0].order_number == "ORD2403050001"
        assert placed[0].item_count == 6

    def test_invalid_discount_is_not_copied(self, user_cart, sneaker, shipping_address):
        user_cart.add_item(sneaker)
        user_cart.apply_discount("X", 5.0)
        user_cart.remove_discount()

        order = Order.place_from_cart(user_cart, "ORD2403050002", "paypal", shipping_address)

        assert order.discount.code is None
        assert order.total == 40.0

    def test_empty_cart_is_rejected(self, user_cart, shipping_address):
        with pytest.raises(ValidationError) as exc:
            Order.place_from_cart(user_cart, "ORD2403050003", "paypal", shipping_address)
        assert "cart" in exc.value.messages

    def test_guest_cart_is_rejected(self, guest_cart, sneaker, shipping_address):
        guest_cart.add_item(sneaker)
        with pytest.raises(ValidationError):
            Order.place_from_cart(guest_cart, "ORD2403050004", "paypal", shipping_address)


class TestStatus:
    def test_update_status_appends_history(self, order):
        order.update_status(OrderStatus.CONFIRMED.value, note="Payment verified", updated_by="admin-1")
        order.update_status(OrderStatus.SHIPPED.value)

        assert order.status == OrderStatus.SHIPPED.value
        assert [h.status for h in order.status_history] == ["pending", "confirmed", "shipped"]
        assert order.status_history[1].note == "Payment verified"

    def test_transitions_are_not_policed(self, order):
        order.update_status(OrderStatus.DELIVERED.value)
        order.update_status(OrderStatus.PENDING.value)
        assert order.status == OrderStatus.PENDING.value

    def test_status_changed_event(self, order):
        order._events.clear()
        order.update_status(OrderStatus.PROCESSING.value)

        event = order._events[0]
        assert isinstance(event, OrderStatusChanged)
        assert event.previous_status == "pending"
        assert event.status == "processing"

    @pytest.mark.parametrize("status", ["pending", "confirmed", "processing"])
    def test_cancellable_states(self, order, status):
        order.update_status(status)
        assert order.can_be_cancelled is True

    @pytest.mark.parametrize("status", ["shipped", "delivered", "cancelled", "refunded"])
    def test_non_cancellable_states(self, order, status):
        order.update_status(status)
        assert order.can_be_cancelled is False


class TestPayment:
    def test_record_payment(self, order):
        order.record_payment("txn_123", gateway="stripe")

        assert order.is_paid is True
        assert order.payment_details.transaction_id == "txn_123"
        assert order.payment_details.payment_date is not None

    def test_cannot_pay_twice(self, order):
        order.record_payment("txn_123")
        with pytest.raises(ValidationError):
            order.record_payment("txn_456")

    def test_payment_failure(self, order):
        order.record_payment_failure("Card declined")
        assert order.payment_status == PaymentStatus.FAILED.value

    def test_refundable_only_when_paid_and_delivered(self, order):
        assert order.can_be_refunded is False
        order.record_payment("txn_123")
        assert order.can_be_refunded is False
        order.update_status(OrderStatus.DELIVERED.value)
        assert order.can_be_refunded is True

    def test_add_tracking_keeps_shipping_cost(self, order):
        order.add_tracking("UPS", "1Z999")

        assert order.shipping.carrier == "UPS"
        assert order.shipping.tracking_number == "1Z999"
        assert order.shipping.cost == 6.0


class TestRefund:
    def test_full_refund(self, order):
        order.process_refund(order.total, "Damaged", "admin-1")

        assert order.payment_status == PaymentStatus.REFUNDED.value
        assert order.status == OrderStatus.REFUNDED.value
        assert order.refund.amount == order.total

    def test_partial_refund_still_marks_order_refunded(self, order):
        order.process_refund(order.total / 2, "Missing part", "admin-1")

        assert order.payment_status == PaymentStatus.PARTIALLY_REFUNDED.value
        assert order.status == OrderStatus.REFUNDED.value

    def test_refund_appends_history(self, order):
        order.update_status("delivered", updated_by="admin-1")
        order.record_payment(transaction_id="txn-1")

        order.process_refund(order.total, "Damaged", "admin-1")

        assert [entry.status for entry in order.status_history] == ["pending", "delivered", "refunded"]
        entry = order.status_history[-1]
        assert entry.note == "Damaged"
        assert entry.updated_by == "admin-1"

    def test_refund_event(self, order):
        order.process_refund(10.0, "Goodwill", "admin-1")
        event = [e for e in order._events if isinstance(e, OrderRefunded)][0]
        assert event.payment_status == "partially_refunded"
        assert event.amount == 10.0


class TestAddItem:
    def test_add_item_recalculates(self, order, sock):
        order.add_item(sock, quantity=2, price=4.0)

        assert len(order.items) == 3
        assert order.subtotal == 108.0
        assert order.total == 108.0 + 9.0 + 6.0 - 5.0
