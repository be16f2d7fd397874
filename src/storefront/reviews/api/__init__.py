"""Reviews HTTP API package."""

from storefront.reviews.api.routes import review_router

__all__ = ["review_router"]
