"""Category management — commands and handlers."""

import json

import structlog
from protean import handle
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.category.category import Category
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Category")
class CreateCategory:
    name: String(required=True, max_length=50)
    parent_id: Identifier()
    description: String(max_length=500)
    icon: String(max_length=50)
    color: String(max_length=20)
    sort_order: Integer(default=0)
    featured: Boolean(default=False)


@storefront.command(part_of="Category")
class RenameCategory:
    category_id: Identifier(required=True)
    name: String(required=True, max_length=50)


@storefront.command(part_of="Category")
class UpdateCategoryDetails:
    category_id: Identifier(required=True)
    details: Text(required=True)  # JSON object of the fields to change


@storefront.command(part_of="Category")
class MoveCategory:
    category_id: Identifier(required=True)
    parent_id: Identifier()  # None makes the category a root


@storefront.command(part_of="Category")
class ActivateCategory:
    category_id: Identifier(required=True)


@storefront.command(part_of="Category")
class DeactivateCategory:
    category_id: Identifier(required=True)


@storefront.command(part_of="Category")
class RefreshCategoryProductCount:
    category_id: Identifier(required=True)


def _live_product_count(category_id):
    from storefront.catalogue.product.product import Product

    return current_domain.repository_for(Product).count_active_in_category(category_id)


@storefront.command_handler(part_of=Category)
class ManageCategoryHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        repo = current_domain.repository_for(Category)
        parent = repo.get(command.parent_id) if command.parent_id else None

        category = Category.create(
            name=command.name,
            parent=parent,
            description=command.description,
            icon=command.icon,
            color=command.color,
            sort_order=command.sort_order or 0,
            featured=bool(command.featured),
        )
        category.refresh_product_count(_live_product_count(category.id))
        repo.add(category)

        logger.info("Category created", category_id=str(category.id), level=category.level)
        return str(category.id)

    @handle(RenameCategory)
    def rename_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.rename(command.name)
        repo.add(category)

    @handle(UpdateCategoryDetails)
    def update_category_details(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.update_details(**json.loads(command.details))
        repo.add(category)

    @handle(MoveCategory)
    def move_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        parent = repo.get(command.parent_id) if command.parent_id else None

        category.move_to(parent)
        repo.add(category)

        # Rebuild every descendant's materialized path from its fresh parent
        rebuilt = {str(category.id): category}
        for descendant in repo.descendants_of(category.id):
            fresh_parent = rebuilt[str(descendant.parent_id)]
            descendant.refresh_ancestry(fresh_parent)
            repo.add(descendant)
            rebuilt[str(descendant.id)] = descendant

        logger.info(
            "Category moved",
            category_id=str(category.id),
            parent_id=str(category.parent_id) if category.parent_id else None,
            descendants_rebuilt=len(rebuilt) - 1,
        )

    @handle(ActivateCategory)
    def activate_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.activate()
        category.refresh_product_count(_live_product_count(category.id))
        repo.add(category)

    @handle(DeactivateCategory)
    def deactivate_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.deactivate()
        category.refresh_product_count(_live_product_count(category.id))
        repo.add(category)

    @handle(RefreshCategoryProductCount)
    def refresh_product_count(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.refresh_product_count(_live_product_count(category.id))
        repo.add(category)
        return category.product_count
