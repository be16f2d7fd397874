"""EditReview — change the rating, title or comment of one's own review."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product.product import Product
from storefront.domain import storefront
from storefront.reviews.review.rating import refresh_product_rating
from storefront.reviews.review.review import Review

_EDITABLE = {"rating", "title", "comment"}


@storefront.command(part_of="Review")
class EditReview:
    review_id = Identifier(required=True)
    user_id = Identifier(required=True)
    changes = Text(required=True)  # JSON object with any of rating, title, comment


@storefront.command_handler(part_of=Review)
class EditReviewHandler:
    @handle(EditReview)
    def edit_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        if str(review.user_id) != str(command.user_id):
            raise ValidationError({"review": ["Only the author can edit a review"]})

        changes = {k: v for k, v in json.loads(command.changes).items() if k in _EDITABLE}
        rating_changed = "rating" in changes and changes["rating"] != review.rating

        review.edit(**changes)
        repo.add(review)

        if rating_changed and review.is_approved:
            refresh_product_rating(review, repo, current_domain.repository_for(Product))
