"""Order placement — checking a cart out into an order."""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product.product import Product
from storefront.domain import storefront
from storefront.ordering.cart.cart import Cart
from storefront.ordering.order.numbering import DailyOrderSequence, next_order_number
from storefront.ordering.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    cart_id = Identifier(required=True)
    payment_method = String(required=True, max_length=30)
    shipping_address = Text(required=True)  # JSON: address dict
    billing_address = Text()  # JSON: address dict, defaults to shipping
    shipping_method = String(max_length=50)
    customer_note = String(max_length=1000)
    source = String(max_length=10)
    ip_address = String(max_length=45)
    user_agent = String(max_length=500)


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart_repo = current_domain.repository_for(Cart)
        product_repo = current_domain.repository_for(Product)

        cart = cart_repo.get(command.cart_id)
        if not cart.is_active:
            raise ValidationError({"cart": ["Cart is no longer active"]})

        unavailable = cart.validate_items(product_repo)
        if unavailable:
            names = ", ".join(item.name for item in unavailable)
            raise ValidationError({"items": [f"Some items are no longer available: {names}"]})

        order = Order.place_from_cart(
            cart,
            order_number=next_order_number(current_domain.repository_for(DailyOrderSequence)),
            payment_method=command.payment_method,
            shipping_address=json.loads(command.shipping_address),
            billing_address=json.loads(command.billing_address) if command.billing_address else None,
            shipping_method=command.shipping_method,
            customer_note=command.customer_note,
            source=command.source,
            ip_address=command.ip_address,
            user_agent=command.user_agent,
        )
        current_domain.repository_for(Order).add(order)

        sold = {}
        for item in order.items:
            quantity, amount = sold.get(str(item.product_id), (0, 0.0))
            sold[str(item.product_id)] = (quantity + item.quantity, amount + item.total)
        for product_id, (quantity, amount) in sold.items():
            product = product_repo.get(product_id)
            product.record_sale(quantity, amount)
            product_repo.add(product)

        cart.deactivate(reason="checked_out")
        cart_repo.add(cart)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            user_id=str(order.user_id),
            total=order.total,
        )
        return str(order.id)
