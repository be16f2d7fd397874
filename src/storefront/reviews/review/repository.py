"""Review listing and rating statistics."""

from storefront.domain import storefront
from storefront.reviews.review.review import Review, ReviewStatus
from storefront.shared.pagination import page_window

# Secondary keys applied on top of newest-first ordering
_SORT_KEYS = {
    "rating": lambda r: r.rating,
    "helpful": lambda r: r.helpful_count,
    "verified": lambda r: r.verified,
}


@storefront.repository(part_of=Review)
class ReviewRepository:
    def find_for(self, user_id, product_id) -> Review | None:
        matches = self._dao.query.filter(user_id=str(user_id), product_id=str(product_id)).all().items
        return matches[0] if matches else None

    def approved_for_product(self, product_id) -> list[Review]:
        return (
            self._dao.query.filter(product_id=str(product_id), status=ReviewStatus.APPROVED.value)
            .limit(None)
            .all()
            .items
        )

    def for_product(self, product_id, sort="newest", page=1, limit=None):
        """Approved reviews of a product. Returns ``(reviews, total)``.

        ``sort`` is one of newest, oldest, rating, helpful or verified; ties
        fall back to newest first.
        """
        reviews = sorted(self.approved_for_product(product_id), key=lambda r: r.created_at, reverse=sort != "oldest")
        if sort in _SORT_KEYS:
            reviews = sorted(reviews, key=_SORT_KEYS[sort], reverse=True)

        offset, limit = page_window(page, limit)
        return reviews[offset : offset + limit], len(reviews)

    def _newest_first(self, page, limit, **criteria):
        offset, limit = page_window(page, limit)
        result = self._dao.query.filter(**criteria).order_by("-created_at").offset(offset).limit(limit).all()
        return result.items, result.total

    def by_user(self, user_id, page=1, limit=None):
        return self._newest_first(page, limit, user_id=str(user_id))

    def pending(self, page=1, limit=None):
        return self._newest_first(page, limit, status=ReviewStatus.PENDING.value)

    def rating_distribution(self, product_id) -> dict[int, int]:
        """Count of approved reviews per star, 5 down to 1."""
        distribution = {star: 0 for star in range(5, 0, -1)}
        for review in self.approved_for_product(product_id):
            distribution[review.rating] += 1
        return distribution

    def average_rating(self, product_id) -> dict:
        ratings = [r.rating for r in self.approved_for_product(product_id)]
        if not ratings:
            return {"average": 0.0, "count": 0}
        return {"average": sum(ratings) / len(ratings), "count": len(ratings)}
