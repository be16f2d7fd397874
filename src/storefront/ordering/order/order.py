"""Order aggregate — a priced snapshot of a cart plus payment and shipping state.

Status flow:
    pending → confirmed → processing → shipped → delivered
    pending/confirmed/processing → cancelled
    delivered (paid) → refunded

``update_status`` and ``process_refund`` do not police the flow themselves.
``can_be_cancelled`` and ``can_be_refunded`` are the guards; the cancel and
refund command handlers check them before mutating.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from storefront.domain import storefront
from storefront.ordering.order.events import (
    OrderItemAdded,
    OrderPlaced,
    OrderRefunded,
    OrderStatusChanged,
    PaymentFailed,
    PaymentRecorded,
    TrackingAdded,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


class PaymentMethod(Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    PAYPAL = "paypal"
    STRIPE = "stripe"
    BANK_TRANSFER = "bank_transfer"
    CASH_ON_DELIVERY = "cash_on_delivery"


class OrderSource(Enum):
    WEB = "web"
    MOBILE = "mobile"
    ADMIN = "admin"


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


_CANCELLABLE_STATES = {
    OrderStatus.PENDING.value,
    OrderStatus.CONFIRMED.value,
    OrderStatus.PROCESSING.value,
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class OrderAddress:
    """Billing or delivery address captured at checkout.

    Later edits to the user's address book do not reach placed orders.
    """

    name = String(required=True, max_length=100)
    email = String(required=True, max_length=254)
    phone = String(max_length=30)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


@storefront.value_object(part_of="Order")
class OrderVariant:
    name = String(max_length=50)
    option = String(max_length=50)


@storefront.value_object(part_of="Order")
class PaymentDetails:
    transaction_id = String(max_length=255)
    payment_intent_id = String(max_length=255)
    payment_date = DateTime()
    gateway = String(max_length=50)
    currency = String(max_length=3, default="USD")


@storefront.value_object(part_of="Order")
class OrderShipping:
    cost = Float(default=0.0, min_value=0.0)
    method = String(required=True, max_length=50)
    tracking_number = String(max_length=255)
    carrier = String(max_length=100)
    estimated_delivery = DateTime()


@storefront.value_object(part_of="Order")
class OrderDiscount:
    code = String(max_length=50)
    amount = Float(default=0.0, min_value=0.0)
    type = String(choices=DiscountType, default=DiscountType.FIXED.value)


@storefront.value_object(part_of="Order")
class OrderNotes:
    customer = String(max_length=1000)
    internal = String(max_length=1000)


@storefront.value_object(part_of="Order")
class Refund:
    amount = Float(min_value=0.0)
    reason = String(max_length=500)
    processed_at = DateTime()
    processed_by = Identifier()


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    sku = String(max_length=64)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)
    total = Float(required=True, min_value=0.0)
    variant = ValueObject(OrderVariant)
    image = String(max_length=500)


@storefront.entity(part_of="Order")
class StatusChange:
    """One entry of the append-only status log."""

    status = String(required=True, choices=OrderStatus)
    timestamp = DateTime(required=True)
    note = String(max_length=500)
    updated_by = Identifier()


def _address(value):
    if value is None or isinstance(value, OrderAddress):
        return value
    return OrderAddress(**value)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=20)
    user_id = Identifier(required=True)
    cart_id = Identifier()
    items = HasMany(OrderItem)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_method = String(required=True, choices=PaymentMethod)
    payment_details = ValueObject(PaymentDetails)
    subtotal = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    shipping = ValueObject(OrderShipping)
    discount = ValueObject(OrderDiscount)
    total = Float(default=0.0, min_value=0.0)
    billing_address = ValueObject(OrderAddress)
    shipping_address = ValueObject(OrderAddress)
    notes = ValueObject(OrderNotes)
    status_history = HasMany(StatusChange)
    refund = ValueObject(Refund)
    source = String(choices=OrderSource, default=OrderSource.WEB.value)
    ip_address = String(max_length=45)
    user_agent = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def order_must_have_items(self):
        if not self.items:
            raise ValidationError({"items": ["An order must contain at least one item"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place_from_cart(
        cls,
        cart,
        order_number,
        payment_method,
        shipping_address,
        billing_address=None,
        shipping_method=None,
        customer_note=None,
        source=None,
        ip_address=None,
        user_agent=None,
    ):
        """Snapshot ``cart`` into a new pending order.

        Lines, tax, shipping cost and a valid discount are copied as they are;
        nothing is re-priced against the catalogue.
        """
        if not cart.user_id:
            raise ValidationError({"cart": ["Only a signed-in user's cart can be checked out"]})
        if not cart.has_items:
            raise ValidationError({"cart": ["Cannot place an order from an empty cart"]})

        now = datetime.now(UTC)
        shipping_address = _address(shipping_address)
        discount = cart.discount if cart.discount and cart.discount.valid else None

        order = cls(
            order_number=order_number,
            user_id=cart.user_id,
            cart_id=cart.id,
            items=[
                OrderItem(
                    product_id=line.product_id,
                    name=line.name,
                    sku=line.sku,
                    quantity=line.quantity,
                    price=line.price,
                    total=line.total,
                    variant=OrderVariant(name=line.variant.name, option=line.variant.option) if line.variant else None,
                    image=line.image,
                )
                for line in cart.items
            ],
            payment_method=payment_method,
            payment_details=PaymentDetails(currency=cart.currency),
            tax=cart.tax or 0.0,
            shipping=OrderShipping(
                cost=cart.shipping.cost if cart.shipping else 0.0,
                method=shipping_method or (cart.shipping.method if cart.shipping else None) or "standard",
            ),
            discount=OrderDiscount(code=discount.code, amount=discount.amount, type=discount.type)
            if discount
            else OrderDiscount(),
            billing_address=_address(billing_address) or shipping_address,
            shipping_address=shipping_address,
            notes=OrderNotes(customer=customer_note) if customer_note else None,
            source=source or OrderSource.WEB.value,
            ip_address=ip_address,
            user_agent=user_agent,
            created_at=now,
            updated_at=now,
        )
        order.calculate_totals()
        order.add_status_history(
            StatusChange(
                status=OrderStatus.PENDING.value,
                timestamp=now,
                note="Order placed",
                updated_by=cart.user_id,
            )
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                user_id=str(order.user_id),
                cart_id=str(cart.id),
                item_count=order.total_items,
                total=order.total,
                payment_method=payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------
    @property
    def total_items(self):
        return sum(item.quantity for item in self.items)

    @property
    def is_paid(self):
        return self.payment_status == PaymentStatus.PAID.value

    @property
    def can_be_cancelled(self):
        return self.status in _CANCELLABLE_STATES

    @property
    def can_be_refunded(self):
        return self.payment_status == PaymentStatus.PAID.value and self.status == OrderStatus.DELIVERED.value

    # -------------------------------------------------------------------
    # Items & totals
    # -------------------------------------------------------------------
    def calculate_totals(self):
        shipping_cost = self.shipping.cost if self.shipping else 0.0
        discount_amount = self.discount.amount if self.discount else 0.0

        with atomic_change(self):
            self.subtotal = sum(item.total for item in self.items)
            self.total = self.subtotal + (self.tax or 0.0) + shipping_cost - discount_amount

    def add_item(self, product, quantity, price, variant=None):
        if isinstance(variant, dict):
            variant = OrderVariant(**variant)

        item = OrderItem(
            product_id=product.id,
            name=product.name,
            sku=product.sku,
            quantity=quantity,
            price=price,
            total=quantity * price,
            variant=variant,
            image=product.primary_image,
        )
        self.add_items(item)
        self.calculate_totals()
        self.updated_at = datetime.now(UTC)

        self.raise_(
            OrderItemAdded(
                order_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product.id),
                quantity=quantity,
                price=price,
            )
        )
        return item

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    def update_status(self, new_status, note="", updated_by=None):
        """Overwrite the status and append a history entry. Transitions are not checked."""
        previous_status = self.status
        now = datetime.now(UTC)

        self.status = new_status
        self.add_status_history(StatusChange(status=new_status, timestamp=now, note=note, updated_by=updated_by))
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous_status,
                status=new_status,
                note=note,
                updated_by=updated_by,
                changed_at=now,
            )
        )

    def process_refund(self, amount, reason, processed_by):
        """Record a refund and force the order into ``refunded``.

        A refund of at least the order total marks the payment ``refunded``;
        anything less is ``partially_refunded``.
        """
        now = datetime.now(UTC)
        payment_status = (
            PaymentStatus.REFUNDED.value if amount >= self.total else PaymentStatus.PARTIALLY_REFUNDED.value
        )

        with atomic_change(self):
            self.refund = Refund(amount=amount, reason=reason, processed_at=now, processed_by=processed_by)
            self.payment_status = payment_status
            self.status = OrderStatus.REFUNDED.value
            self.add_status_history(
                StatusChange(status=OrderStatus.REFUNDED.value, timestamp=now, note=reason, updated_by=processed_by)
            )
            self.updated_at = now

        self.raise_(
            OrderRefunded(
                order_id=str(self.id),
                amount=amount,
                reason=reason,
                payment_status=payment_status,
                processed_by=processed_by,
                processed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Payment & shipping
    # -------------------------------------------------------------------
    def record_payment(self, transaction_id, gateway=None, payment_intent_id=None):
        if self.is_paid:
            raise ValidationError({"payment_status": ["Order is already paid"]})

        now = datetime.now(UTC)
        currency = self.payment_details.currency if self.payment_details else "USD"
        self.payment_details = PaymentDetails(
            transaction_id=transaction_id,
            payment_intent_id=payment_intent_id,
            payment_date=now,
            gateway=gateway,
            currency=currency,
        )
        self.payment_status = PaymentStatus.PAID.value
        self.updated_at = now

        self.raise_(
            PaymentRecorded(
                order_id=str(self.id),
                transaction_id=transaction_id,
                gateway=gateway,
                amount=self.total,
                paid_at=now,
            )
        )

    def record_payment_failure(self, reason=None):
        if self.is_paid:
            raise ValidationError({"payment_status": ["Order is already paid"]})

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.FAILED.value
        self.updated_at = now

        self.raise_(PaymentFailed(order_id=str(self.id), reason=reason, failed_at=now))

    def add_tracking(self, carrier, tracking_number, estimated_delivery=None):
        self.shipping = OrderShipping(
            cost=self.shipping.cost,
            method=self.shipping.method,
            tracking_number=tracking_number,
            carrier=carrier,
            estimated_delivery=estimated_delivery,
        )
        self.updated_at = datetime.now(UTC)

        self.raise_(
            TrackingAdded(
                order_id=str(self.id),
                carrier=carrier,
                tracking_number=tracking_number,
                estimated_delivery=estimated_delivery,
            )
        )
