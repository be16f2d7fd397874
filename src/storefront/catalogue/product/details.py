"""Product details, pricing and stock — commands and handler."""

import json

import structlog
from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product.product import Product
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Product")
class UpdateProductDetails:
    product_id: Identifier(required=True)
    details: Text(required=True)  # JSON object of the fields to change


@storefront.command(part_of="Product")
class ChangeProductPrice:
    product_id: Identifier(required=True)
    price: Float(required=True, min_value=0.0)
    compare_at_price: Float(min_value=0.0)
    cost_price: Float(min_value=0.0)


@storefront.command(part_of="Product")
class AdjustStock:
    product_id: Identifier(required=True)
    delta: Integer(required=True)
    reason: String(max_length=100)


@storefront.command(part_of="Product")
class RecordProductView:
    product_id: Identifier(required=True)


@storefront.command_handler(part_of=Product)
class ManageProductDetailsHandler:
    @handle(UpdateProductDetails)
    def update_details(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.update_details(**json.loads(command.details))
        repo.add(product)

    @handle(ChangeProductPrice)
    def change_price(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)

        kwargs = {}
        if command.compare_at_price is not None:
            kwargs["compare_at_price"] = command.compare_at_price
        if command.cost_price is not None:
            kwargs["cost_price"] = command.cost_price
        product.change_price(command.price, **kwargs)
        repo.add(product)

    @handle(AdjustStock)
    def adjust_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.adjust_stock(command.delta, reason=command.reason)
        repo.add(product)

        logger.info(
            "Stock adjusted",
            product_id=str(product.id),
            delta=command.delta,
            quantity=product.inventory.quantity,
        )
        return product.inventory.quantity

    @handle(RecordProductView)
    def record_view(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.increment_view_count()
        repo.add(product)
        return product.view_count
