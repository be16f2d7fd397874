"""Cart discounts — commands and handler.

Discount codes are not looked up anywhere; the caller supplies the amount.
"""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.ordering.cart.cart import Cart, DiscountType


@storefront.command(part_of="Cart")
class ApplyDiscount:
    cart_id = Identifier(required=True)
    code = String(required=True, max_length=50)
    amount = Float(required=True, min_value=0.0)
    type = String(max_length=20, default=DiscountType.FIXED.value)


@storefront.command(part_of="Cart")
class RemoveDiscount:
    cart_id = Identifier(required=True)


@storefront.command_handler(part_of=Cart)
class CartDiscountHandler:
    @handle(ApplyDiscount)
    def apply_discount(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.apply_discount(command.code, command.amount, command.type or DiscountType.FIXED.value)
        repo.add(cart)

    @handle(RemoveDiscount)
    def remove_discount(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.remove_discount()
        repo.add(cart)
