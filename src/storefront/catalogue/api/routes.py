"""FastAPI endpoints for categories and products."""

import json

from fastapi import APIRouter, Depends
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.api.schemas import (
    AddProductImageRequest,
    AdjustStockRequest,
    ChangePriceRequest,
    CreateCategoryRequest,
    CreateProductRequest,
    MoveCategoryRequest,
    UpdateCategoryRequest,
    UpdateProductDetailsRequest,
)
from storefront.catalogue.category.category import Category
from storefront.catalogue.category.management import (
    ActivateCategory,
    CreateCategory,
    DeactivateCategory,
    MoveCategory,
    RefreshCategoryProductCount,
    RenameCategory,
    UpdateCategoryDetails,
)
from storefront.catalogue.product.creation import CreateProduct
from storefront.catalogue.product.details import (
    AdjustStock,
    ChangeProductPrice,
    RecordProductView,
    UpdateProductDetails,
)
from storefront.catalogue.product.images import AddProductImage, RemoveProductImage
from storefront.catalogue.product.lifecycle import ActivateProduct, ArchiveProduct, DeactivateProduct
from storefront.catalogue.product.product import Product
from storefront.identity.api.principal import current_user, require_role
from storefront.identity.user.user import Role, User
from storefront.shared.api import envelope, paginated
from storefront.shared.pagination import page_window

product_router = APIRouter(prefix="/products", tags=["products"])
category_router = APIRouter(prefix="/categories", tags=["categories"])

_CATALOGUE_EDITORS = (Role.ADMIN.value, Role.VENDOR.value)


def category_view(category: Category) -> dict:
    data = category.to_dict()
    data["ancestors"] = category.ancestor_list
    data["full_path"] = category.full_path
    data["full_slug_path"] = category.full_slug_path
    return data


def _tree_view(nodes) -> list[dict]:
    return [{**category_view(node["category"]), "children": _tree_view(node["children"])} for node in nodes]


def product_view(product: Product) -> dict:
    data = product.to_dict()
    data["tags"] = product.tag_list
    data["discount_percentage"] = product.discount_percentage
    data["primary_image"] = product.primary_image
    data["in_stock"] = product.in_stock
    data["low_stock"] = product.low_stock
    return data


def _page_of(items, page, limit):
    offset, limit = page_window(page, limit)
    return items[offset : offset + limit]


def _category(key: str) -> Category:
    """Look a category up by id, falling back to its slug."""
    repo = current_domain.repository_for(Category)
    try:
        return repo.get(key)
    except ObjectNotFoundError:
        category = repo.find_by_slug(key)
        if category is None:
            raise
        return category


# --- Category endpoints ---


@category_router.get("")
async def list_root_categories() -> dict:
    roots = current_domain.repository_for(Category).roots()
    return envelope([category_view(c) for c in roots])


@category_router.get("/tree")
async def category_tree() -> dict:
    return envelope(_tree_view(current_domain.repository_for(Category).tree()))


@category_router.get("/{key}")
async def get_category(key: str) -> dict:
    return envelope(category_view(_category(key)))


@category_router.get("/{key}/children")
async def category_children(key: str) -> dict:
    category = _category(key)
    children = current_domain.repository_for(Category).children_of(category.id)
    return envelope([category_view(c) for c in children])


@category_router.get("/{key}/breadcrumb")
async def category_breadcrumb(key: str) -> dict:
    return envelope(_category(key).breadcrumb)


@category_router.get("/{key}/products")
async def category_products(key: str, page: int = 1, limit: int | None = None) -> dict:
    category = _category(key)
    products = current_domain.repository_for(Product).in_category(category.id)
    return paginated([product_view(p) for p in _page_of(products, page, limit)], len(products), page, limit)


@category_router.post("", status_code=201)
async def create_category(body: CreateCategoryRequest, user: User = Depends(current_user)) -> dict:
    require_role(user, Role.ADMIN.value)
    command = CreateCategory(
        name=body.name,
        parent_id=body.parent_id,
        description=body.description,
        icon=body.icon,
        color=body.color,
        sort_order=body.sort_order,
        featured=body.featured,
    )
    category_id = current_domain.process(command, asynchronous=False)
    return envelope(category_view(_category(category_id)), "Category created")


@category_router.put("/{category_id}")
async def update_category(category_id: str, body: UpdateCategoryRequest, user: User = Depends(current_user)) -> dict:
    require_role(user, Role.ADMIN.value)
    details = body.model_dump(exclude_unset=True)
    name = details.pop("name", None)

    if name:
        current_domain.process(RenameCategory(category_id=category_id, name=name), asynchronous=False)
    if details:
        current_domain.process(
            UpdateCategoryDetails(category_id=category_id, details=json.dumps(details)),
            asynchronous=False,
        )
    return envelope(category_view(_category(category_id)), "Category updated")


@category_router.put("/{category_id}/move")
async def move_category(category_id: str, body: MoveCategoryRequest, user: User = Depends(current_user)) -> dict:
    require_role(user, Role.ADMIN.value)
    current_domain.process(MoveCategory(category_id=category_id, parent_id=body.parent_id), asynchronous=False)
    return envelope(category_view(_category(category_id)), "Category moved")


@category_router.put("/{category_id}/activate")
async def activate_category(category_id: str, user: User = Depends(current_user)) -> dict:
    require_role(user, Role.ADMIN.value)
    current_domain.process(ActivateCategory(category_id=category_id), asynchronous=False)
    return envelope(category_view(_category(category_id)), "Category activated")


@category_router.put("/{category_id}/deactivate")
async def deactivate_category(category_id: str, user: User = Depends(current_user)) -> dict:
    require_role(user, Role.ADMIN.value)
    current_domain.process(DeactivateCategory(category_id=category_id), asynchronous=False)
    return envelope(category_view(_category(category_id)), "Category deactivated")


@category_router.post("/{category_id}/refresh-count")
async def refresh_product_count(category_id: str, user: User = Depends(current_user)) -> dict:
    require_role(user, Role.ADMIN.value)
    count = current_domain.process(RefreshCategoryProductCount(category_id=category_id), asynchronous=False)
    return envelope({"product_count": count})


# --- Product endpoints ---


@product_router.get("")
async def list_products(
    page: int = 1,
    limit: int | None = None,
    category: str | None = None,
    search: str | None = None,
    featured: bool = False,
) -> dict:
    repo = current_domain.repository_for(Product)
    if search:
        products = repo.search(search)
    elif category:
        products = repo.in_category(_category(category).id)
    elif featured:
        products = repo.featured()
    else:
        products = repo.active()

    products = sorted(products, key=lambda p: p.created_at, reverse=True)
    return paginated([product_view(p) for p in _page_of(products, page, limit)], len(products), page, limit)


@product_router.get("/{key}")
async def get_product(key: str) -> dict:
    repo = current_domain.repository_for(Product)
    product = repo.find(key) or repo.find_by_slug(key)
    if product is None:
        raise ObjectNotFoundError(f"Product {key} not found")

    current_domain.process(RecordProductView(product_id=product.id), asynchronous=False)
    return envelope(product_view(repo.get(product.id)))


@product_router.post("", status_code=201)
async def create_product(body: CreateProductRequest, user: User = Depends(current_user)) -> dict:
    require_role(user, *_CATALOGUE_EDITORS)
    inventory = body.inventory.model_dump(exclude_none=True) if body.inventory else None
    command = CreateProduct(
        name=body.name,
        description=body.description,
        short_description=body.short_description,
        category_id=body.category_id,
        subcategory_id=body.subcategory_id,
        brand=body.brand,
        vendor_id=body.vendor_id or (user.id if user.role == Role.VENDOR.value else None),
        price=body.price,
        compare_at_price=body.compare_at_price,
        cost_price=body.cost_price,
        currency=body.currency,
        sku=body.sku,
        barcode=body.barcode,
        inventory=json.dumps(inventory) if inventory else None,
        tags=json.dumps(body.tags) if body.tags else None,
        featured=body.featured,
    )
    product_id = current_domain.process(command, asynchronous=False)
    return envelope(product_view(current_domain.repository_for(Product).get(product_id)), "Product created")


@product_router.put("/{product_id}")
async def update_product(
    product_id: str, body: UpdateProductDetailsRequest, user: User = Depends(current_user)
) -> dict:
    require_role(user, *_CATALOGUE_EDITORS)
    details = body.model_dump(exclude_unset=True)
    current_domain.process(
        UpdateProductDetails(product_id=product_id, details=json.dumps(details)),
        asynchronous=False,
    )
    return envelope(product_view(current_domain.repository_for(Product).get(product_id)), "Product updated")


@product_router.put("/{product_id}/price")
async def change_price(product_id: str, body: ChangePriceRequest, user: User = Depends(current_user)) -> dict:
    require_role(user, *_CATALOGUE_EDITORS)
    command = ChangeProductPrice(
        product_id=product_id,
        price=body.price,
        compare_at_price=body.compare_at_price,
        cost_price=body.cost_price,
    )
    current_domain.process(command, asynchronous=False)
    return envelope(product_view(current_domain.repository_for(Product).get(product_id)), "Price updated")


@product_router.put("/{product_id}/stock")
async def adjust_stock(product_id: str, body: AdjustStockRequest, user: User = Depends(current_user)) -> dict:
    require_role(user, *_CATALOGUE_EDITORS)
    quantity = current_domain.process(
        AdjustStock(product_id=product_id, delta=body.delta, reason=body.reason),
        asynchronous=False,
    )
    return envelope({"quantity": quantity}, "Stock adjusted")


@product_router.put("/{product_id}/activate")
async def activate_product(product_id: str, user: User = Depends(current_user)) -> dict:
    require_role(user, *_CATALOGUE_EDITORS)
    current_domain.process(ActivateProduct(product_id=product_id), asynchronous=False)
    return envelope(message="Product activated")


@product_router.put("/{product_id}/deactivate")
async def deactivate_product(product_id: str, user: User = Depends(current_user)) -> dict:
    require_role(user, *_CATALOGUE_EDITORS)
    current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
    return envelope(message="Product deactivated")


@product_router.put("/{product_id}/archive")
async def archive_product(product_id: str, user: User = Depends(current_user)) -> dict:
    require_role(user, Role.ADMIN.value)
    current_domain.process(ArchiveProduct(product_id=product_id), asynchronous=False)
    return envelope(message="Product archived")


@product_router.post("/{product_id}/images", status_code=201)
async def add_image(product_id: str, body: AddProductImageRequest, user: User = Depends(current_user)) -> dict:
    require_role(user, *_CATALOGUE_EDITORS)
    command = AddProductImage(product_id=product_id, url=body.url, alt=body.alt, is_primary=body.is_primary)
    image_id = current_domain.process(command, asynchronous=False)
    return envelope({"image_id": image_id}, "Image added")


@product_router.delete("/{product_id}/images/{image_id}")
async def remove_image(product_id: str, image_id: str, user: User = Depends(current_user)) -> dict:
    require_role(user, *_CATALOGUE_EDITORS)
    current_domain.process(RemoveProductImage(product_id=product_id, image_id=image_id), asynchronous=False)
    return envelope(message="Image removed")
