"""Domain events for the Review aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Review")
class ReviewSubmitted:
    """A user submitted a review; it awaits moderation."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(required=True)
    title = String(required=True)
    verified_purchase = String(required=True)
    submitted_at = DateTime(required=True)


@storefront.event(part_of="Review")
class ReviewEdited:
    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    rating = Integer(required=True)
    previous_rating = Integer(required=True)
    edited_at = DateTime(required=True)


@storefront.event(part_of="Review")
class ReviewApproved:
    """A moderator approved the review; it now counts toward the product rating."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    rating = Integer(required=True)
    approved_at = DateTime(required=True)


@storefront.event(part_of="Review")
class ReviewRejected:
    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    rejected_at = DateTime(required=True)


@storefront.event(part_of="Review")
class ReviewMarkedHelpful:
    __version__ = 1

    review_id = Identifier(required=True)
    user_id = Identifier(required=True)
    helpful_count = Integer(required=True)


@storefront.event(part_of="Review")
class ReviewUnmarkedHelpful:
    __version__ = 1

    review_id = Identifier(required=True)
    user_id = Identifier(required=True)
    helpful_count = Integer(required=True)


@storefront.event(part_of="Review")
class ReviewReported:
    """A user flagged the review for moderation."""

    __version__ = 1

    review_id = Identifier(required=True)
    reporter_id = Identifier(required=True)
    reason = String(required=True)
    report_count = Integer(required=True)
    reported_at = DateTime(required=True)


@storefront.event(part_of="Review")
class AdminResponseAdded:
    __version__ = 1

    review_id = Identifier(required=True)
    responded_by = Identifier(required=True)
    responded_at = DateTime(required=True)
