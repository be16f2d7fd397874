"""Cart aggregate — one mutable basket per user or anonymous session.

Lines snapshot the product's name, price and sku when they are added; later
price changes in the catalogue do not reach existing lines. Every mutation
ends by recomputing the cart totals:

    subtotal = sum(line.total)
    total    = subtotal + tax + shipping.cost - discount.amount

The total is deliberately not floored at zero.
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from storefront.domain import storefront
from storefront.ordering.cart.events import (
    CartCleared,
    CartCreated,
    CartDeactivated,
    CartDiscountApplied,
    CartDiscountRemoved,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
    CartReassigned,
    CartsMerged,
)
from storefront.settings import get_settings


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@storefront.value_object(part_of="Cart")
class ItemVariant:
    """Chosen variant of a product, e.g. ``Size: M``. Compared by value."""

    name = String(max_length=50)
    option = String(max_length=50)


@storefront.value_object(part_of="Cart")
class Discount:
    code = String(max_length=50)
    amount = Float(default=0.0, min_value=0.0)
    type = String(choices=DiscountType, default=DiscountType.FIXED.value)
    valid = Boolean(default=False)


@storefront.value_object(part_of="Cart")
class CartShipping:
    cost = Float(default=0.0, min_value=0.0)
    method = String(max_length=50)


@storefront.value_object(part_of="Cart")
class ShippingAddress:
    name = String(max_length=100)
    email = String(max_length=254)
    phone = String(max_length=30)
    street = String(max_length=255)
    city = String(max_length=100)
    state = String(max_length=100)
    zip_code = String(max_length=20)
    country = String(max_length=100)


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    sku = String(max_length=64)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)
    total = Float(required=True, min_value=0.0)
    variant = ValueObject(ItemVariant)
    image = String(max_length=500)
    available = Boolean(default=True)
    max_quantity = Integer(default=100, min_value=1)
    added_at = DateTime()

    def matches(self, product_id, variant):
        return str(self.product_id) == str(product_id) and self.variant == variant

    def set_quantity(self, quantity):
        self.quantity = quantity
        self.total = quantity * self.price


def _variant(variant):
    """Normalize a variant given as a dict, value object or nothing."""
    if variant is None or isinstance(variant, ItemVariant):
        return variant
    if not any(variant.values()):
        return None
    return ItemVariant(name=variant.get("name"), option=variant.get("option"))


@storefront.aggregate
class Cart:
    user_id = Identifier()
    session_id = String(max_length=255)
    items = HasMany(CartItem)
    subtotal = Float(default=0.0)
    tax = Float(default=0.0, min_value=0.0)
    shipping = ValueObject(CartShipping)
    shipping_address = ValueObject(ShippingAddress)
    discount = ValueObject(Discount)
    total = Float(default=0.0)  # May go negative when the discount exceeds the rest
    currency = String(max_length=3, default="USD")
    expires_at = DateTime()
    is_active = Boolean(default=True)
    last_activity = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def cart_must_have_an_owner(self):
        if not self.user_id and not self.session_id:
            raise ValidationError({"cart": ["A cart must belong to a user or a session"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id=None, session_id=None, currency="USD"):
        now = datetime.now(UTC)
        cart = cls(
            user_id=user_id,
            session_id=session_id,
            shipping=CartShipping(),
            discount=Discount(),
            currency=currency,
            expires_at=now + timedelta(days=get_settings().cart_ttl_days),
            is_active=True,
            last_activity=now,
            created_at=now,
            updated_at=now,
        )
        cart.raise_(
            CartCreated(
                cart_id=str(cart.id),
                user_id=user_id,
                session_id=session_id,
                expires_at=cart.expires_at,
            )
        )
        return cart

    # -------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------
    @property
    def total_items(self):
        return sum(item.quantity for item in self.items)

    @property
    def unique_items(self):
        return len(self.items)

    @property
    def has_items(self):
        return len(self.items) > 0

    @property
    def is_expired(self):
        return self.expires_at is not None and datetime.now(UTC) > self.expires_at

    def find_item(self, item_id):
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    # -------------------------------------------------------------------
    # Totals
    # -------------------------------------------------------------------
    def calculate_totals(self):
        shipping_cost = self.shipping.cost if self.shipping else 0.0
        discount_amount = self.discount.amount if self.discount else 0.0

        with atomic_change(self):
            self.subtotal = sum(item.total for item in self.items)
            self.total = self.subtotal + (self.tax or 0.0) + shipping_cost - discount_amount

    def touch(self):
        now = datetime.now(UTC)
        self.last_activity = now
        self.updated_at = now

    def _changed(self):
        self.calculate_totals()
        self.touch()

    def _ensure_active(self):
        if not self.is_active:
            raise ValidationError({"cart": ["Cart is no longer active"]})

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product, quantity=1, variant=None):
        """Add ``quantity`` of ``product`` to the cart.

        A line with the same product and variant is topped up; otherwise a
        new line snapshots the product's current name, price and sku.
        """
        self._ensure_active()
        variant = _variant(variant)

        existing = next((i for i in self.items if i.matches(product.id, variant)), None)
        if existing:
            existing.set_quantity(existing.quantity + quantity)
            item = existing
        else:
            max_quantity = product.inventory.max_order_quantity if product.inventory else None
            item = CartItem(
                product_id=product.id,
                name=product.name,
                sku=product.sku,
                quantity=quantity,
                price=product.price,
                total=quantity * product.price,
                variant=variant,
                image=product.primary_image,
                max_quantity=max_quantity or get_settings().default_max_order_quantity,
                added_at=datetime.now(UTC),
            )
            self.add_items(item)

        self._changed()

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product.id),
                quantity=quantity,
                price=item.price,
            )
        )
        return item

    def update_item_quantity(self, item_id, quantity):
        """Set a line's quantity, clamped to its ceiling. Zero or less removes it."""
        self._ensure_active()

        item = self.find_item(item_id)
        if item is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})

        if quantity <= 0:
            self.remove_item(item_id)
            return

        previous_quantity = item.quantity
        item.set_quantity(min(quantity, item.max_quantity))
        self._changed()

        self.raise_(
            CartItemQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item_id),
                previous_quantity=previous_quantity,
                new_quantity=item.quantity,
            )
        )

    def remove_item(self, item_id):
        self._ensure_active()

        item = self.find_item(item_id)
        if item is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})

        self.remove_items(item)
        self._changed()

        self.raise_(CartItemRemoved(cart_id=str(self.id), item_id=str(item_id)))

    def clear(self):
        self._ensure_active()

        for item in list(self.items):
            self.remove_items(item)
        self._changed()

        self.raise_(CartCleared(cart_id=str(self.id)))

    # -------------------------------------------------------------------
    # Discount, shipping & tax
    # -------------------------------------------------------------------
    def apply_discount(self, code, amount, type=DiscountType.FIXED.value):
        """Attach a discount. ``amount`` is subtracted from the total as given."""
        self._ensure_active()

        self.discount = Discount(code=code, amount=amount, type=type, valid=True)
        self._changed()

        self.raise_(
            CartDiscountApplied(
                cart_id=str(self.id),
                code=code,
                amount=amount,
                discount_type=type,
            )
        )

    def remove_discount(self):
        self._ensure_active()

        self.discount = Discount(code=None, amount=0.0, type=DiscountType.FIXED.value, valid=False)
        self._changed()

        self.raise_(CartDiscountRemoved(cart_id=str(self.id)))

    def set_shipping(self, cost, method=None):
        self._ensure_active()
        self.shipping = CartShipping(cost=cost, method=method)
        self._changed()

    def set_shipping_address(self, address):
        self._ensure_active()
        self.shipping_address = ShippingAddress(**address) if isinstance(address, dict) else address
        self.touch()

    def set_tax(self, amount):
        self._ensure_active()
        self.tax = amount
        self._changed()

    # -------------------------------------------------------------------
    # Availability
    # -------------------------------------------------------------------
    def validate_items(self, catalog):
        """Refresh each line's availability against ``catalog``.

        ``catalog`` is anything with ``find(product_id)`` returning a product
        or None. Quantities are never adjusted, only the ``available`` flag
        and the quantity ceiling.
        """
        for item in self.items:
            product = catalog.find(item.product_id)
            if product is None or not product.is_active:
                item.available = False
            elif product.inventory.track_quantity and item.quantity > product.inventory.quantity:
                item.available = False
            else:
                item.available = True
                item.max_quantity = product.inventory.max_order_quantity or get_settings().default_max_order_quantity

        return [item for item in self.items if not item.available]

    # -------------------------------------------------------------------
    # Ownership
    # -------------------------------------------------------------------
    def absorb(self, other):
        """Fold ``other``'s lines into this cart.

        Equal product and variant lines have their quantities summed; the
        rest are copied over with their original price.
        """
        self._ensure_active()

        merged = appended = 0
        for line in other.items:
            existing = next((i for i in self.items if i.matches(line.product_id, line.variant)), None)
            if existing:
                existing.set_quantity(existing.quantity + line.quantity)
                merged += 1
            else:
                self.add_items(
                    CartItem(
                        product_id=line.product_id,
                        name=line.name,
                        sku=line.sku,
                        quantity=line.quantity,
                        price=line.price,
                        total=line.total,
                        variant=line.variant,
                        image=line.image,
                        available=line.available,
                        max_quantity=line.max_quantity,
                        added_at=line.added_at,
                    )
                )
                appended += 1

        self._changed()

        self.raise_(
            CartsMerged(
                cart_id=str(self.id),
                source_cart_id=str(other.id),
                lines_merged=merged,
                lines_appended=appended,
            )
        )

    def assign_to_user(self, user_id):
        """Hand an anonymous cart over to ``user_id``; the session link is dropped."""
        self._ensure_active()

        previous_session_id = self.session_id
        with atomic_change(self):
            self.user_id = user_id
            self.session_id = None
        self.touch()

        self.raise_(
            CartReassigned(
                cart_id=str(self.id),
                user_id=str(user_id),
                previous_session_id=previous_session_id,
            )
        )

    def deactivate(self, reason=None):
        if not self.is_active:
            raise ValidationError({"cart": ["Cart is already inactive"]})

        now = datetime.now(UTC)
        self.is_active = False
        self.updated_at = now

        self.raise_(CartDeactivated(cart_id=str(self.id), reason=reason, deactivated_at=now))
