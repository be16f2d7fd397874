"""SubmitReview — submit a new product review.

Enforces one-review-per-user-per-product at handler level (cross-instance
check requires repository query). Past delivered orders flag the review as a
verified purchase.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product.product import Product
from storefront.domain import storefront
from storefront.ordering.order.order import Order
from storefront.reviews.review.review import Review

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Review")
class SubmitReview:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    rating = Integer(required=True, min_value=1, max_value=5)
    title = String(required=True, max_length=100)
    comment = String(required=True, max_length=1000)
    images = Text()  # JSON array of {url, alt}
    tags = Text()  # JSON array of strings
    language = String(max_length=10)
    ip_address = String(max_length=45)
    user_agent = String(max_length=500)


@storefront.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        repo = current_domain.repository_for(Review)

        # Raises ObjectNotFoundError for an unknown product
        current_domain.repository_for(Product).get(command.product_id)

        if repo.find_for(command.user_id, command.product_id):
            raise ValidationError({"review": ["You have already reviewed this product"]})

        order = current_domain.repository_for(Order).delivered_with_product(command.user_id, command.product_id)

        review = Review.submit(
            user_id=command.user_id,
            product_id=command.product_id,
            rating=command.rating,
            title=command.title,
            comment=command.comment,
            order_id=order.id if order else None,
            verified_purchase=order is not None,
            images=json.loads(command.images) if command.images else None,
            tags=json.loads(command.tags) if command.tags else None,
            language=command.language,
            ip_address=command.ip_address,
            user_agent=command.user_agent,
        )
        repo.add(review)

        logger.info(
            "Review submitted",
            review_id=str(review.id),
            product_id=str(command.product_id),
            verified_purchase=review.verified_purchase,
        )
        return str(review.id)
