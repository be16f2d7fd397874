"""Helpful marks on reviews — commands and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.reviews.review.review import Review


@storefront.command(part_of="Review")
class MarkReviewHelpful:
    review_id = Identifier(required=True)
    user_id = Identifier(required=True)


@storefront.command(part_of="Review")
class UnmarkReviewHelpful:
    review_id = Identifier(required=True)
    user_id = Identifier(required=True)


@storefront.command_handler(part_of=Review)
class HelpfulVoteHandler:
    @handle(MarkReviewHelpful)
    def mark_helpful(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        review.mark_helpful(command.user_id)
        repo.add(review)
        return review.helpful_count

    @handle(UnmarkReviewHelpful)
    def unmark_helpful(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        review.unmark_helpful(command.user_id)
        repo.add(review)
        return review.helpful_count
