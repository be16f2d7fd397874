"""Operational endpoints meant to be called by an external scheduler."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.catalogue.category.category import Category
from storefront.catalogue.category.management import RefreshCategoryProductCount
from storefront.identity.api.principal import current_user, require_role
from storefront.identity.user.user import Role, User
from storefront.ordering.cart.expiry import CleanExpiredCarts
from storefront.shared.api import envelope

maintenance_router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@maintenance_router.post("/carts/clean-expired")
async def clean_expired_carts(user: User = Depends(current_user)) -> dict:
    require_role(user, Role.ADMIN.value)
    count = current_domain.process(CleanExpiredCarts(), asynchronous=False)
    return envelope({"deactivated": count})


@maintenance_router.post("/categories/refresh-counts")
async def refresh_category_counts(user: User = Depends(current_user)) -> dict:
    require_role(user, Role.ADMIN.value)
    repo = current_domain.repository_for(Category)
    categories = repo.roots(active_only=False)
    for root in list(categories):
        categories.extend(repo.descendants_of(root.id))

    counts = {
        str(category.id): current_domain.process(
            RefreshCategoryProductCount(category_id=category.id), asynchronous=False
        )
        for category in categories
    }
    return envelope(counts)
