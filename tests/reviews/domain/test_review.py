"""Tests for the Review aggregate."""

import pytest
from protean.exceptions import ValidationError
from storefront.reviews.review.events import ReviewApproved, ReviewEdited, ReviewSubmitted
from storefront.reviews.review.review import Review, ReviewStatus


@pytest.fixture()
def review():
    return Review.submit(
        user_id="user-001",
        product_id="prod-001",
        rating=4,
        title="Comfy",
        comment="Great for long runs.",
        images=[{"url": "https://cdn.example.com/r.jpg"}],
        tags=["running"],
    )


class TestSubmit:
    def test_starts_pending(self, review):
        assert review.status == ReviewStatus.PENDING.value
        assert review.verified_purchase is False
        assert review.helpful_count == 0
        assert review.language == "en"
        assert review.tag_list == ["running"]
        assert len(review.images) == 1

    def test_raises_submitted_event(self, review):
        event = review._events[0]
        assert isinstance(event, ReviewSubmitted)
        assert event.rating == 4

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_bounds(self, rating):
        with pytest.raises(ValidationError):
            Review.submit(user_id="u", product_id="p", rating=rating, title="t", comment="c")


class TestModeration:
    def test_approve(self, review):
        review.approve()
        assert review.is_approved is True
        assert isinstance(review._events[-1], ReviewApproved)

    def test_approve_twice(self, review):
        review.approve()
        with pytest.raises(ValidationError):
            review.approve()

    def test_rejected_review_can_be_approved_later(self, review):
        review.reject()
        review.approve()
        assert review.is_approved is True

    def test_reject_twice(self, review):
        review.reject()
        with pytest.raises(ValidationError):
            review.reject()

    def test_admin_response(self, review):
        review.add_admin_response("Thanks for the feedback", "admin-001")
        assert review.admin_response.comment == "Thanks for the feedback"


class TestHelpfulness:
    def test_mark_once_per_user(self, review):
        review.mark_helpful("user-002")
        review.mark_helpful("user-002")
        review.mark_helpful("user-003")

        assert review.helpful_count == 2
        assert review.is_helpful is True
        assert review.helpful_percentage == 100

    def test_author_cannot_mark_own_review(self, review):
        with pytest.raises(ValidationError):
            review.mark_helpful("user-001")

    def test_unmark(self, review):
        review.mark_helpful("user-002")
        review.unmark_helpful("user-002")
        review.unmark_helpful("user-002")

        assert review.helpful_count == 0
        assert review.helpful_votes == []


class TestReporting:
    def test_reports_accumulate(self, review):
        review.report("user-002", "spam")
        review.report("user-003", "fake")
        assert review.report_count == 2

    def test_author_cannot_report_own_review(self, review):
        with pytest.raises(ValidationError):
            review.report("user-001", "spam")

    def test_reason_must_be_known(self, review):
        with pytest.raises(ValidationError):
            review.report("user-002", "boring")


class TestEdit:
    def test_partial_edit(self, review):
        review.edit(rating=2)

        assert review.rating == 2
        assert review.title == "Comfy"
        event = review._events[-1]
        assert isinstance(event, ReviewEdited)
        assert event.previous_rating == 4
