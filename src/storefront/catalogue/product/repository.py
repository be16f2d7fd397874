"""Catalogue queries over the Product aggregate."""

from storefront.catalogue.product.product import Product, ProductStatus
from storefront.domain import storefront


@storefront.repository(part_of=Product)
class ProductRepository:
    """Read-side helpers used by handlers, carts and the HTTP layer.

    Also serves as the product lookup injected into ``Cart.validate_items``.
    """

    def find(self, product_id) -> Product | None:
        """Like ``get`` but returns None for unknown ids."""
        matches = self._dao.query.filter(id=str(product_id)).all().items
        return matches[0] if matches else None

    def find_by_slug(self, slug: str) -> Product | None:
        matches = self._dao.query.filter(slug=slug).all().items
        return matches[0] if matches else None

    def active(self) -> list[Product]:
        return self._dao.query.filter(status=ProductStatus.ACTIVE.value).limit(None).all().items

    def in_category(self, category_id) -> list[Product]:
        return (
            self._dao.query.filter(category_id=str(category_id), status=ProductStatus.ACTIVE.value)
            .limit(None)
            .all()
            .items
        )

    def count_active_in_category(self, category_id) -> int:
        return (
            self._dao.query.filter(category_id=str(category_id), status=ProductStatus.ACTIVE.value)
            .all()
            .total
        )

    def featured(self) -> list[Product]:
        return (
            self._dao.query.filter(status=ProductStatus.ACTIVE.value, featured=True).limit(None).all().items
        )

    def search(self, term: str) -> list[Product]:
        """Case-insensitive match on name, description and tags."""
        needle = term.strip().lower()
        if not needle:
            return []

        def matches(product):
            haystack = [product.name, product.description or ""] + product.tag_list
            return any(needle in text.lower() for text in haystack)

        return [p for p in self.active() if matches(p)]
