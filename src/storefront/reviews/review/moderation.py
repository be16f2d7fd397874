"""Review moderation — approve, reject and respond.

Approving or rejecting changes which reviews count toward the product
rating, so both refresh it in the same unit of work.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.catalogue.product.product import Product
from storefront.domain import storefront
from storefront.reviews.review.rating import refresh_product_rating
from storefront.reviews.review.review import Review


@storefront.command(part_of="Review")
class ApproveReview:
    review_id = Identifier(required=True)


@storefront.command(part_of="Review")
class RejectReview:
    review_id = Identifier(required=True)


@storefront.command(part_of="Review")
class AddAdminResponse:
    review_id = Identifier(required=True)
    admin_id = Identifier(required=True)
    comment = String(required=True, max_length=1000)


@storefront.command_handler(part_of=Review)
class ModerateReviewHandler:
    @handle(ApproveReview)
    def approve_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        review.approve()
        repo.add(review)
        refresh_product_rating(review, repo, current_domain.repository_for(Product))

    @handle(RejectReview)
    def reject_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        review.reject()
        repo.add(review)
        refresh_product_rating(review, repo, current_domain.repository_for(Product))

    @handle(AddAdminResponse)
    def add_admin_response(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        review.add_admin_response(command.comment, command.admin_id)
        repo.add(review)
