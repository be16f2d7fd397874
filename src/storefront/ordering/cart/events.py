"""Domain events for the Cart aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Cart")
class CartCreated:
    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier()
    session_id = String()
    expires_at = DateTime(required=True)


@storefront.event(part_of="Cart")
class CartItemAdded:
    """A product was added to the cart, or an existing line was topped up."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    price = Float(required=True)


@storefront.event(part_of="Cart")
class CartItemQuantityUpdated:
    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="Cart")
class CartItemRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)


@storefront.event(part_of="Cart")
class CartCleared:
    __version__ = 1

    cart_id = Identifier(required=True)


@storefront.event(part_of="Cart")
class CartDiscountApplied:
    __version__ = 1

    cart_id = Identifier(required=True)
    code = String(required=True)
    amount = Float(required=True)
    discount_type = String(required=True)


@storefront.event(part_of="Cart")
class CartDiscountRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)


@storefront.event(part_of="Cart")
class CartsMerged:
    """A session cart's lines were folded into a user's cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    source_cart_id = Identifier(required=True)
    lines_merged = Integer(required=True)
    lines_appended = Integer(required=True)


@storefront.event(part_of="Cart")
class CartReassigned:
    """An anonymous cart was handed over to a signed-in user."""

    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    previous_session_id = String()


@storefront.event(part_of="Cart")
class CartDeactivated:
    __version__ = 1

    cart_id = Identifier(required=True)
    reason = String()
    deactivated_at = DateTime(required=True)
