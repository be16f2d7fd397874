"""ReportReview — flag a review for moderation."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.reviews.review.review import Review


@storefront.command(part_of="Review")
class ReportReview:
    review_id = Identifier(required=True)
    user_id = Identifier(required=True)
    reason = String(required=True, max_length=20)


@storefront.command_handler(part_of=Review)
class ReportReviewHandler:
    @handle(ReportReview)
    def report_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        review.report(command.user_id, command.reason)
        repo.add(review)
        return review.report_count
