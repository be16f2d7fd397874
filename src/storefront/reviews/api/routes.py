"""FastAPI endpoints for product reviews."""

import json

from fastapi import APIRouter, Depends, Request
from protean.utils.globals import current_domain

from storefront.identity.api.principal import current_user, require_role
from storefront.identity.user.user import Role, User
from storefront.reviews.api.schemas import (
    AdminResponseRequest,
    EditReviewRequest,
    ReportReviewRequest,
    SubmitReviewRequest,
)
from storefront.reviews.review.editing import EditReview
from storefront.reviews.review.moderation import AddAdminResponse, ApproveReview, RejectReview
from storefront.reviews.review.reporting import ReportReview
from storefront.reviews.review.review import Review
from storefront.reviews.review.submission import SubmitReview
from storefront.reviews.review.voting import MarkReviewHelpful, UnmarkReviewHelpful
from storefront.shared.api import envelope, paginated

review_router = APIRouter(prefix="/reviews", tags=["reviews"])


def review_view(review: Review) -> dict:
    data = review.to_dict()
    data["tags"] = review.tag_list
    data["helpful_percentage"] = review.helpful_percentage
    data.pop("ip_address", None)
    data.pop("user_agent", None)
    return data


def _review(review_id) -> dict:
    return review_view(current_domain.repository_for(Review).get(review_id))


@review_router.post("", status_code=201)
async def submit_review(request: Request, body: SubmitReviewRequest, user: User = Depends(current_user)) -> dict:
    command = SubmitReview(
        user_id=user.id,
        product_id=body.product_id,
        rating=body.rating,
        title=body.title,
        comment=body.comment,
        images=json.dumps([i.model_dump() for i in body.images]) if body.images else None,
        tags=json.dumps(body.tags) if body.tags else None,
        language=body.language,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    review_id = current_domain.process(command, asynchronous=False)
    return envelope(_review(review_id), "Review submitted for moderation")


@review_router.get("/product/{product_id}")
async def product_reviews(product_id: str, sort: str = "newest", page: int = 1, limit: int | None = None) -> dict:
    repo = current_domain.repository_for(Review)
    reviews, total = repo.for_product(product_id, sort=sort, page=page, limit=limit)

    body = paginated([review_view(r) for r in reviews], total, page, limit)
    body["data"]["rating"] = repo.average_rating(product_id)
    body["data"]["distribution"] = repo.rating_distribution(product_id)
    return body


@review_router.get("/mine")
async def my_reviews(page: int = 1, limit: int | None = None, user: User = Depends(current_user)) -> dict:
    reviews, total = current_domain.repository_for(Review).by_user(user.id, page, limit)
    return paginated([review_view(r) for r in reviews], total, page, limit)


@review_router.get("/pending")
async def pending_reviews(page: int = 1, limit: int | None = None, user: User = Depends(current_user)) -> dict:
    require_role(user, Role.ADMIN.value)
    reviews, total = current_domain.repository_for(Review).pending(page, limit)
    return paginated([review_view(r) for r in reviews], total, page, limit)


@review_router.get("/{review_id}")
async def get_review(review_id: str) -> dict:
    return envelope(_review(review_id))


@review_router.put("/{review_id}")
async def edit_review(review_id: str, body: EditReviewRequest, user: User = Depends(current_user)) -> dict:
    changes = body.model_dump(exclude_none=True)
    current_domain.process(
        EditReview(review_id=review_id, user_id=user.id, changes=json.dumps(changes)),
        asynchronous=False,
    )
    return envelope(_review(review_id), "Review updated")


@review_router.put("/{review_id}/approve")
async def approve_review(review_id: str, user: User = Depends(current_user)) -> dict:
    require_role(user, Role.ADMIN.value)
    current_domain.process(ApproveReview(review_id=review_id), asynchronous=False)
    return envelope(_review(review_id), "Review approved")


@review_router.put("/{review_id}/reject")
async def reject_review(review_id: str, user: User = Depends(current_user)) -> dict:
    require_role(user, Role.ADMIN.value)
    current_domain.process(RejectReview(review_id=review_id), asynchronous=False)
    return envelope(_review(review_id), "Review rejected")


@review_router.post("/{review_id}/response")
async def add_admin_response(review_id: str, body: AdminResponseRequest, user: User = Depends(current_user)) -> dict:
    require_role(user, Role.ADMIN.value)
    command = AddAdminResponse(review_id=review_id, admin_id=user.id, comment=body.comment)
    current_domain.process(command, asynchronous=False)
    return envelope(_review(review_id), "Response added")


@review_router.post("/{review_id}/helpful")
async def mark_helpful(review_id: str, user: User = Depends(current_user)) -> dict:
    current_domain.process(MarkReviewHelpful(review_id=review_id, user_id=user.id), asynchronous=False)
    return envelope(_review(review_id), "Marked as helpful")


@review_router.delete("/{review_id}/helpful")
async def unmark_helpful(review_id: str, user: User = Depends(current_user)) -> dict:
    current_domain.process(UnmarkReviewHelpful(review_id=review_id, user_id=user.id), asynchronous=False)
    return envelope(_review(review_id), "Helpful mark removed")


@review_router.post("/{review_id}/report")
async def report_review(review_id: str, body: ReportReviewRequest, user: User = Depends(current_user)) -> dict:
    current_domain.process(ReportReview(review_id=review_id, user_id=user.id, reason=body.reason), asynchronous=False)
    return envelope(message="Review reported")
