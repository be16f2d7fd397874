"""Review aggregate (CQRS) — a user's rating and comment on a product.

One review exists per (user, product); the submission handler enforces it.
Only approved reviews count toward the product's rating summary.

State Machine:
    PENDING → APPROVED | REJECTED
    APPROVED ↔ REJECTED (moderators may change their mind)

Mutators never persist; the command handlers own the save boundary.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.domain import storefront
from storefront.reviews.review.events import (
    AdminResponseAdded,
    ReviewApproved,
    ReviewEdited,
    ReviewMarkedHelpful,
    ReviewRejected,
    ReviewReported,
    ReviewSubmitted,
    ReviewUnmarkedHelpful,
)

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ReviewStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReportReason(Enum):
    INAPPROPRIATE = "inappropriate"
    SPAM = "spam"
    FAKE = "fake"
    OFFENSIVE = "offensive"
    OTHER = "other"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Review")
class AdminResponse:
    comment = String(required=True, max_length=1000)
    responded_by = Identifier(required=True)
    responded_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Review")
class ReviewImage:
    url = String(required=True, max_length=500)
    alt = String(max_length=255)


@storefront.entity(part_of="Review")
class HelpfulVote:
    """One user's "this helped me" mark. At most one per user."""

    user_id = Identifier(required=True)
    voted_at = DateTime(required=True)


@storefront.entity(part_of="Review")
class ReviewReport:
    reason = String(required=True, choices=ReportReason)
    reported_by = Identifier(required=True)
    reported_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Review:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    order_id = Identifier()

    # Content
    rating = Integer(required=True, min_value=1, max_value=5)
    title = String(required=True, max_length=100)
    comment = String(required=True, max_length=1000)
    images = HasMany(ReviewImage)
    tags = Text()  # JSON array of strings
    language = String(max_length=10, default="en")

    # Moderation
    status = String(choices=ReviewStatus, default=ReviewStatus.PENDING.value)
    verified = Boolean(default=False)
    verified_purchase = Boolean(default=False)
    admin_response = ValueObject(AdminResponse)

    # Helpfulness
    helpful_votes = HasMany(HelpfulVote)
    helpful_count = Integer(default=0, min_value=0)

    # Reporting
    reports = HasMany(ReviewReport)
    report_count = Integer(default=0, min_value=0)

    # Request metadata
    ip_address = String(max_length=45)
    user_agent = String(max_length=500)

    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def submit(
        cls,
        user_id,
        product_id,
        rating,
        title,
        comment,
        order_id=None,
        verified_purchase=False,
        images=None,
        tags=None,
        language=None,
        ip_address=None,
        user_agent=None,
    ):
        now = datetime.now(UTC)

        review = cls(
            user_id=user_id,
            product_id=product_id,
            order_id=order_id,
            rating=rating,
            title=title,
            comment=comment,
            tags=json.dumps(tags) if tags else None,
            language=language or "en",
            status=ReviewStatus.PENDING.value,
            verified_purchase=verified_purchase,
            helpful_count=0,
            report_count=0,
            ip_address=ip_address,
            user_agent=user_agent,
            created_at=now,
            updated_at=now,
        )

        for img in images or []:
            review.add_images(ReviewImage(url=img["url"], alt=img.get("alt")))

        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                product_id=str(product_id),
                user_id=str(user_id),
                rating=rating,
                title=title,
                verified_purchase=str(verified_purchase),
                submitted_at=now,
            )
        )
        return review

    # -------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------
    @property
    def is_approved(self):
        return self.status == ReviewStatus.APPROVED.value

    @property
    def is_helpful(self):
        return self.helpful_count > 0

    @property
    def helpful_percentage(self):
        if not self.helpful_votes:
            return 0
        return int(self.helpful_count / len(self.helpful_votes) * 100 + 0.5)

    @property
    def tag_list(self):
        return json.loads(self.tags) if self.tags else []

    # -------------------------------------------------------------------
    # Edit
    # -------------------------------------------------------------------
    def edit(self, rating=_UNSET, title=_UNSET, comment=_UNSET):
        now = datetime.now(UTC)
        previous_rating = self.rating

        with atomic_change(self):
            if rating is not _UNSET:
                self.rating = rating
            if title is not _UNSET:
                self.title = title
            if comment is not _UNSET:
                self.comment = comment
            self.updated_at = now

        self.raise_(
            ReviewEdited(
                review_id=str(self.id),
                product_id=str(self.product_id),
                rating=self.rating,
                previous_rating=previous_rating,
                edited_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Moderation
    # -------------------------------------------------------------------
    def approve(self):
        if self.is_approved:
            raise ValidationError({"status": ["Review is already approved"]})

        now = datetime.now(UTC)
        self.status = ReviewStatus.APPROVED.value
        self.updated_at = now

        self.raise_(
            ReviewApproved(
                review_id=str(self.id),
                product_id=str(self.product_id),
                rating=self.rating,
                approved_at=now,
            )
        )

    def reject(self):
        if self.status == ReviewStatus.REJECTED.value:
            raise ValidationError({"status": ["Review is already rejected"]})

        now = datetime.now(UTC)
        self.status = ReviewStatus.REJECTED.value
        self.updated_at = now

        self.raise_(ReviewRejected(review_id=str(self.id), product_id=str(self.product_id), rejected_at=now))

    def add_admin_response(self, comment, admin_id):
        now = datetime.now(UTC)
        self.admin_response = AdminResponse(comment=comment, responded_by=admin_id, responded_at=now)
        self.updated_at = now

        self.raise_(AdminResponseAdded(review_id=str(self.id), responded_by=str(admin_id), responded_at=now))

    # -------------------------------------------------------------------
    # Helpfulness
    # -------------------------------------------------------------------
    def _vote_by(self, user_id):
        return next((v for v in self.helpful_votes if str(v.user_id) == str(user_id)), None)

    def mark_helpful(self, user_id):
        """Count ``user_id`` as helped. Repeat marks are ignored."""
        if str(user_id) == str(self.user_id):
            raise ValidationError({"helpful": ["Cannot mark your own review as helpful"]})
        if self._vote_by(user_id):
            return

        now = datetime.now(UTC)
        self.add_helpful_votes(HelpfulVote(user_id=user_id, voted_at=now))
        self.helpful_count = self.helpful_count + 1
        self.updated_at = now

        self.raise_(
            ReviewMarkedHelpful(review_id=str(self.id), user_id=str(user_id), helpful_count=self.helpful_count)
        )

    def unmark_helpful(self, user_id):
        vote = self._vote_by(user_id)
        if vote is None:
            return

        self.remove_helpful_votes(vote)
        self.helpful_count = max(0, self.helpful_count - 1)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ReviewUnmarkedHelpful(review_id=str(self.id), user_id=str(user_id), helpful_count=self.helpful_count)
        )

    # -------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------
    def report(self, user_id, reason):
        if str(user_id) == str(self.user_id):
            raise ValidationError({"report": ["Cannot report your own review"]})

        now = datetime.now(UTC)
        self.add_reports(ReviewReport(reason=reason, reported_by=user_id, reported_at=now))
        self.report_count = self.report_count + 1
        self.updated_at = now

        self.raise_(
            ReviewReported(
                review_id=str(self.id),
                reporter_id=str(user_id),
                reason=reason,
                report_count=self.report_count,
                reported_at=now,
            )
        )
