"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductCreated:
    """A new product was added to the catalogue as a draft."""

    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True)
    slug: String(required=True)
    category_id: Identifier(required=True)
    vendor_id: Identifier()
    price: Float(required=True)
    currency: String(required=True)
    created_at: DateTime(required=True)


@storefront.event(part_of="Product")
class ProductDetailsUpdated:
    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True)
    slug: String(required=True)


@storefront.event(part_of="Product")
class ProductPriceChanged:
    """The selling price (and optionally the compare-at price) changed."""

    __version__ = 1

    product_id: Identifier(required=True)
    previous_price: Float(required=True)
    price: Float(required=True)
    compare_at_price: Float()


@storefront.event(part_of="Product")
class ProductActivated:
    __version__ = 1

    product_id: Identifier(required=True)
    category_id: Identifier(required=True)
    activated_at: DateTime(required=True)


@storefront.event(part_of="Product")
class ProductDeactivated:
    __version__ = 1

    product_id: Identifier(required=True)
    category_id: Identifier(required=True)
    deactivated_at: DateTime(required=True)


@storefront.event(part_of="Product")
class ProductArchived:
    __version__ = 1

    product_id: Identifier(required=True)
    category_id: Identifier(required=True)
    archived_at: DateTime(required=True)


@storefront.event(part_of="Product")
class StockAdjusted:
    """On-hand quantity changed by a manual adjustment or a sale."""

    __version__ = 1

    product_id: Identifier(required=True)
    previous_quantity: Integer(required=True)
    quantity: Integer(required=True)
    reason: String()


@storefront.event(part_of="Product")
class ProductImageAdded:
    __version__ = 1

    product_id: Identifier(required=True)
    image_id: Identifier(required=True)
    url: String(required=True)
    is_primary: String(required=True)


@storefront.event(part_of="Product")
class ProductImageRemoved:
    __version__ = 1

    product_id: Identifier(required=True)
    image_id: Identifier(required=True)


@storefront.event(part_of="Product")
class ProductRatingUpdated:
    """The denormalized rating summary was recomputed from approved reviews."""

    __version__ = 1

    product_id: Identifier(required=True)
    average: Float(required=True)
    count: Integer(required=True)
