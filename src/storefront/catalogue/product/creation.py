"""Product creation — command and handler."""

import json

import structlog
from protean import handle
from protean.fields import Boolean, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.category.category import Category
from storefront.catalogue.product.product import Product
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Product")
class CreateProduct:
    name: String(required=True, max_length=100)
    description: String(required=True, max_length=2000)
    short_description: String(max_length=200)
    category_id: Identifier(required=True)
    subcategory_id: Identifier()
    brand: String(required=True, max_length=100)
    vendor_id: Identifier()
    price: Float(required=True, min_value=0.0)
    compare_at_price: Float(min_value=0.0)
    cost_price: Float(min_value=0.0)
    currency: String(max_length=3)
    sku: String(max_length=64)
    barcode: String(max_length=64)
    inventory: Text()  # JSON object matching the Inventory value object
    tags: Text()  # JSON array of strings
    featured: Boolean(default=False)


@storefront.command_handler(part_of=Product)
class CreateProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        # Raises ObjectNotFoundError for an unknown category
        current_domain.repository_for(Category).get(command.category_id)

        product = Product.create(
            name=command.name,
            description=command.description,
            short_description=command.short_description,
            category_id=command.category_id,
            subcategory_id=command.subcategory_id,
            brand=command.brand,
            vendor_id=command.vendor_id,
            price=command.price,
            compare_at_price=command.compare_at_price,
            cost_price=command.cost_price,
            currency=command.currency,
            sku=command.sku,
            barcode=command.barcode,
            inventory=json.loads(command.inventory) if command.inventory else None,
            tags=json.loads(command.tags) if command.tags else None,
            featured=bool(command.featured),
        )
        current_domain.repository_for(Product).add(product)

        logger.info("Product created", product_id=str(product.id), category_id=str(command.category_id))
        return str(product.id)
