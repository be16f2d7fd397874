"""Pydantic request schemas for the reviews API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ReviewImageRequest(BaseModel):
    url: str = Field(..., max_length=500)
    alt: str | None = Field(None, max_length=255)


class SubmitReviewRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "8c1d6a4e-2f0b-4b7e-9d8a-0f1e2d3c4b5a",
                    "rating": 4,
                    "title": "Comfortable from day one",
                    "comment": "No break-in period needed, grip is great on wet rock.",
                    "tags": ["comfort", "grip"],
                }
            ]
        }
    }

    product_id: str
    rating: int = Field(..., ge=1, le=5)
    title: str = Field(..., max_length=100)
    comment: str = Field(..., max_length=1000)
    images: list[ReviewImageRequest] | None = None
    tags: list[str] | None = None
    language: str | None = Field(None, max_length=10)


class EditReviewRequest(BaseModel):
    rating: int | None = Field(None, ge=1, le=5)
    title: str | None = Field(None, max_length=100)
    comment: str | None = Field(None, max_length=1000)


class AdminResponseRequest(BaseModel):
    comment: str = Field(..., max_length=1000)


class ReportReviewRequest(BaseModel):
    reason: str = Field(..., max_length=20)
