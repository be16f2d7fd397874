"""Product aggregate root with Image entity and inventory/rating value objects."""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.domain import storefront
from storefront.settings import get_settings
from storefront.shared.slug import slugify

_UNSET = object()


class ProductStatus(Enum):
    """Enumeration of product lifecycle statuses."""

    DRAFT = "draft"
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


class Currency(Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    INR = "INR"


@storefront.value_object(part_of="Product")
class Inventory:
    """Stock counters and ordering limits."""

    quantity: Integer(default=0, min_value=0)
    low_stock_threshold: Integer(default=10, min_value=0)
    track_quantity: Boolean(default=True)
    allow_backorder: Boolean(default=False)
    max_order_quantity: Integer(default=100, min_value=1)

    def with_quantity(self, quantity):
        return Inventory(
            quantity=quantity,
            low_stock_threshold=self.low_stock_threshold,
            track_quantity=self.track_quantity,
            allow_backorder=self.allow_backorder,
            max_order_quantity=self.max_order_quantity,
        )


@storefront.value_object(part_of="Product")
class RatingSummary:
    """Denormalized summary of approved review ratings."""

    average: Float(default=0.0, min_value=0.0, max_value=5.0)
    count: Integer(default=0, min_value=0)


@storefront.value_object(part_of="Product")
class SalesSummary:
    total: Float(default=0.0, min_value=0.0)
    count: Integer(default=0, min_value=0)


@storefront.value_object(part_of="Product")
class ProductSEO:
    title: String(max_length=60)
    description: String(max_length=160)
    keywords: Text()  # JSON array of strings


@storefront.entity(part_of="Product")
class ProductImage:
    """Product image entity."""

    url: String(required=True, max_length=500)
    alt: String(max_length=255)
    is_primary: Boolean(default=False)


@storefront.aggregate
class Product:
    """Catalogue entry with pricing, stock and a denormalized rating."""

    name: String(required=True, max_length=100)
    slug: String(max_length=150)
    description: String(required=True, max_length=2000)
    short_description: String(max_length=200)
    category_id: Identifier(required=True)
    subcategory_id: Identifier()
    brand: String(required=True, max_length=100)
    vendor_id: Identifier()
    price: Float(required=True, min_value=0.0)
    compare_at_price: Float(min_value=0.0)
    cost_price: Float(min_value=0.0)
    currency: String(choices=Currency, default=Currency.USD.value)
    sku: String(max_length=64)
    barcode: String(max_length=64)
    images: HasMany(ProductImage)
    inventory: ValueObject(Inventory)
    seo: ValueObject(ProductSEO)
    tags: Text()  # JSON array of strings
    status: String(choices=ProductStatus, default=ProductStatus.DRAFT.value)
    featured: Boolean(default=False)
    rating: ValueObject(RatingSummary)
    sales: ValueObject(SalesSummary)
    view_count: Integer(default=0, min_value=0)
    created_at: DateTime(default=lambda: datetime.now(UTC))
    updated_at: DateTime(default=lambda: datetime.now(UTC))

    @invariant.post
    def at_most_one_primary_image(self):
        if len([i for i in self.images if i.is_primary]) > 1:
            raise ValidationError({"images": ["Only one image can be marked as primary"]})

    @classmethod
    def create(
        cls,
        name,
        description,
        category_id,
        brand,
        price,
        vendor_id=None,
        short_description=None,
        subcategory_id=None,
        compare_at_price=None,
        cost_price=None,
        currency=None,
        sku=None,
        barcode=None,
        inventory=None,
        tags=None,
        featured=False,
    ):
        from storefront.catalogue.product.events import ProductCreated

        if inventory is None:
            inventory = Inventory(max_order_quantity=get_settings().default_max_order_quantity)
        elif isinstance(inventory, dict):
            inventory = Inventory(**inventory)

        now = datetime.now(UTC)
        product = cls(
            name=name,
            slug=slugify(name),
            description=description,
            short_description=short_description,
            category_id=category_id,
            subcategory_id=subcategory_id,
            brand=brand,
            vendor_id=vendor_id,
            price=price,
            compare_at_price=compare_at_price,
            cost_price=cost_price,
            currency=currency or Currency.USD.value,
            sku=sku,
            barcode=barcode,
            inventory=inventory,
            tags=json.dumps(tags) if tags else None,
            featured=featured,
            rating=RatingSummary(),
            sales=SalesSummary(),
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductCreated(
                product_id=product.id,
                name=name,
                slug=product.slug,
                category_id=category_id,
                vendor_id=vendor_id,
                price=price,
                currency=product.currency,
                created_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------
    @property
    def tag_list(self):
        return json.loads(self.tags) if self.tags else []

    @property
    def is_active(self):
        return self.status == ProductStatus.ACTIVE.value

    @property
    def discount_percentage(self):
        if self.compare_at_price and self.compare_at_price > self.price:
            return int((self.compare_at_price - self.price) / self.compare_at_price * 100 + 0.5)
        return 0

    @property
    def primary_image(self):
        primary = next((i for i in self.images if i.is_primary), None)
        if primary:
            return primary.url
        return self.images[0].url if self.images else None

    @property
    def in_stock(self):
        if not self.inventory.track_quantity:
            return True
        return self.inventory.quantity > 0 or self.inventory.allow_backorder

    @property
    def low_stock(self):
        return 0 < self.inventory.quantity <= self.inventory.low_stock_threshold

    def can_supply(self, quantity):
        """Whether ``quantity`` units can be sold right now."""
        if not self.is_active:
            return False
        if not self.inventory.track_quantity or self.inventory.allow_backorder:
            return True
        return self.inventory.quantity >= quantity

    # -------------------------------------------------------------------
    # Details & pricing
    # -------------------------------------------------------------------
    def update_details(
        self,
        name=_UNSET,
        description=_UNSET,
        short_description=_UNSET,
        brand=_UNSET,
        subcategory_id=_UNSET,
        tags=_UNSET,
        featured=_UNSET,
        seo=_UNSET,
    ):
        from storefront.catalogue.product.events import ProductDetailsUpdated

        with atomic_change(self):
            if name is not _UNSET:
                self.name = name
                self.slug = slugify(name)
            if description is not _UNSET:
                self.description = description
            if short_description is not _UNSET:
                self.short_description = short_description
            if brand is not _UNSET:
                self.brand = brand
            if subcategory_id is not _UNSET:
                self.subcategory_id = subcategory_id
            if tags is not _UNSET:
                self.tags = json.dumps(tags) if tags else None
            if featured is not _UNSET:
                self.featured = featured
            if seo is not _UNSET:
                if isinstance(seo, dict):
                    keywords = seo.get("keywords")
                    seo = ProductSEO(
                        title=seo.get("title"),
                        description=seo.get("description"),
                        keywords=json.dumps(keywords) if keywords else None,
                    )
                self.seo = seo
            self.updated_at = datetime.now(UTC)

        self.raise_(ProductDetailsUpdated(product_id=self.id, name=self.name, slug=self.slug))

    def change_price(self, price, compare_at_price=_UNSET, cost_price=_UNSET):
        from storefront.catalogue.product.events import ProductPriceChanged

        previous_price = self.price
        with atomic_change(self):
            self.price = price
            if compare_at_price is not _UNSET:
                self.compare_at_price = compare_at_price
            if cost_price is not _UNSET:
                self.cost_price = cost_price
            self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductPriceChanged(
                product_id=self.id,
                previous_price=previous_price,
                price=self.price,
                compare_at_price=self.compare_at_price,
            )
        )

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def activate(self):
        from storefront.catalogue.product.events import ProductActivated

        if self.status not in (ProductStatus.DRAFT.value, ProductStatus.INACTIVE.value):
            raise ValidationError({"status": ["Only draft or inactive products can be activated"]})

        now = datetime.now(UTC)
        self.status = ProductStatus.ACTIVE.value
        self.updated_at = now
        self.raise_(ProductActivated(product_id=self.id, category_id=self.category_id, activated_at=now))

    def deactivate(self):
        from storefront.catalogue.product.events import ProductDeactivated

        if self.status != ProductStatus.ACTIVE.value:
            raise ValidationError({"status": ["Only active products can be deactivated"]})

        now = datetime.now(UTC)
        self.status = ProductStatus.INACTIVE.value
        self.updated_at = now
        self.raise_(ProductDeactivated(product_id=self.id, category_id=self.category_id, deactivated_at=now))

    def archive(self):
        from storefront.catalogue.product.events import ProductArchived

        if self.status == ProductStatus.ARCHIVED.value:
            raise ValidationError({"status": ["Product is already archived"]})

        now = datetime.now(UTC)
        self.status = ProductStatus.ARCHIVED.value
        self.updated_at = now
        self.raise_(ProductArchived(product_id=self.id, category_id=self.category_id, archived_at=now))

    # -------------------------------------------------------------------
    # Stock & counters
    # -------------------------------------------------------------------
    def adjust_stock(self, delta, reason=None):
        from storefront.catalogue.product.events import StockAdjusted

        previous = self.inventory.quantity
        new_quantity = previous + delta
        if new_quantity < 0:
            raise ValidationError({"inventory": ["Stock cannot go below zero"]})

        self.inventory = self.inventory.with_quantity(new_quantity)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockAdjusted(
                product_id=self.id,
                previous_quantity=previous,
                quantity=new_quantity,
                reason=reason,
            )
        )

    def record_sale(self, quantity, amount):
        self.sales = SalesSummary(
            total=round(self.sales.total + amount, 2),
            count=self.sales.count + quantity,
        )
        if self.inventory.track_quantity:
            self.adjust_stock(-min(quantity, self.inventory.quantity), reason="sale")

    def increment_view_count(self):
        self.view_count = (self.view_count or 0) + 1

    def update_rating(self, ratings):
        """Recompute the rating summary from approved review ratings."""
        from storefront.catalogue.product.events import ProductRatingUpdated

        ratings = list(ratings)
        if ratings:
            # Half-up rounding to one decimal place
            average = int(sum(ratings) / len(ratings) * 10 + 0.5) / 10
        else:
            average = 0.0

        self.rating = RatingSummary(average=average, count=len(ratings))
        self.raise_(ProductRatingUpdated(product_id=self.id, average=average, count=len(ratings)))

    # -------------------------------------------------------------------
    # Images
    # -------------------------------------------------------------------
    def add_image(self, url, alt=None, is_primary=False):
        from storefront.catalogue.product.events import ProductImageAdded

        with atomic_change(self):
            # First image is always primary
            if not self.images:
                is_primary = True

            if is_primary:
                for img in self.images:
                    if img.is_primary:
                        img.is_primary = False

            image = ProductImage(url=url, alt=alt, is_primary=is_primary)
            self.add_images(image)

        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductImageAdded(
                product_id=self.id,
                image_id=image.id,
                url=url,
                is_primary=str(is_primary),
            )
        )
        return image

    def remove_image(self, image_id):
        from storefront.catalogue.product.events import ProductImageRemoved

        image = next((i for i in self.images if str(i.id) == str(image_id)), None)
        if image is None:
            raise ValidationError({"images": [f"Image {image_id} not found"]})

        with atomic_change(self):
            self.remove_images(image)
            if image.is_primary and self.images:
                self.images[0].is_primary = True

        self.updated_at = datetime.now(UTC)
        self.raise_(ProductImageRemoved(product_id=self.id, image_id=image_id))
