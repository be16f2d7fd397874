"""Cart management — commands and handler.

Handles cart creation, merging a session cart into a user's cart, checkout
details (shipping, tax) and availability checks.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product.product import Product
from storefront.domain import storefront
from storefront.ordering.cart.cart import Cart

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class CreateCart:
    """Create a cart for a signed-in user or an anonymous session."""

    user_id = Identifier()
    session_id = String(max_length=255)
    currency = String(max_length=3, default="USD")


@storefront.command(part_of="Cart")
class MergeCarts:
    """Fold the session's cart into the user's cart after sign-in."""

    session_id = String(required=True, max_length=255)
    user_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class SetShipping:
    cart_id = Identifier(required=True)
    cost = Float(required=True, min_value=0.0)
    method = String(max_length=50)


@storefront.command(part_of="Cart")
class SetShippingAddress:
    cart_id = Identifier(required=True)
    address = Text(required=True)  # JSON: address dict


@storefront.command(part_of="Cart")
class SetTax:
    cart_id = Identifier(required=True)
    amount = Float(required=True, min_value=0.0)


@storefront.command(part_of="Cart")
class ValidateCart:
    cart_id = Identifier(required=True)


@storefront.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        repo = current_domain.repository_for(Cart)

        existing = None
        if command.user_id:
            existing = repo.active_for_user(command.user_id)
        elif command.session_id:
            existing = repo.active_for_session(command.session_id)
        if existing:
            raise ValidationError({"cart": ["An active cart already exists for this owner"]})

        cart = Cart.create(
            user_id=command.user_id,
            session_id=command.session_id,
            currency=command.currency or "USD",
        )
        repo.add(cart)
        return str(cart.id)

    @handle(MergeCarts)
    def merge_carts(self, command):
        """Returns the id of the cart the user ends up with, if any."""
        repo = current_domain.repository_for(Cart)
        session_cart = repo.active_for_session(command.session_id)
        user_cart = repo.active_for_user(command.user_id)

        if session_cart is None:
            return str(user_cart.id) if user_cart else None

        if user_cart is None:
            session_cart.assign_to_user(command.user_id)
            repo.add(session_cart)
            logger.info("Session cart reassigned", cart_id=str(session_cart.id), user_id=str(command.user_id))
            return str(session_cart.id)

        user_cart.absorb(session_cart)
        session_cart.deactivate(reason="merged")
        repo.add(user_cart)
        repo.add(session_cart)

        logger.info(
            "Carts merged",
            cart_id=str(user_cart.id),
            source_cart_id=str(session_cart.id),
            unique_items=user_cart.unique_items,
        )
        return str(user_cart.id)

    @handle(SetShipping)
    def set_shipping(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.set_shipping(command.cost, command.method)
        repo.add(cart)

    @handle(SetShippingAddress)
    def set_shipping_address(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.set_shipping_address(json.loads(command.address))
        repo.add(cart)

    @handle(SetTax)
    def set_tax(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.set_tax(command.amount)
        repo.add(cart)

    @handle(ValidateCart)
    def validate_cart(self, command):
        """Returns the ids of lines that are currently unavailable."""
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        unavailable = cart.validate_items(current_domain.repository_for(Product))
        repo.add(cart)
        return [str(item.id) for item in unavailable]
