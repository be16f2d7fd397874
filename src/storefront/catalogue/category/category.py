"""Category aggregate root for product categorization.

Categories form a tree through ``parent_id``. Each node also carries a
materialized path (``ancestors``, root first) and its ``level`` so that
breadcrumbs and depth never need a recursive lookup.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text, ValueObject

from storefront.catalogue.category.events import (
    CategoryActivated,
    CategoryCreated,
    CategoryDeactivated,
    CategoryDetailsUpdated,
    CategoryMoved,
    CategoryRenamed,
)
from storefront.domain import storefront
from storefront.shared.slug import slugify

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


class CategoryStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


@storefront.value_object(part_of="Category")
class CategoryImage:
    url: String(required=True, max_length=500)
    alt: String(max_length=255)


@storefront.value_object(part_of="Category")
class CategorySEO:
    """Search-engine metadata shown on the category landing page."""

    title: String(max_length=60)
    description: String(max_length=160)
    keywords: Text()  # JSON array of strings


@storefront.aggregate
class Category:
    """A node in the catalogue tree.

    ``ancestors`` holds ``{id, name, slug}`` summaries from the root down to
    the immediate parent, so ``level`` always equals its length.
    """

    name: String(required=True, max_length=50)
    slug: String(max_length=100)
    description: String(max_length=500)
    parent_id: Identifier()
    ancestors: Text()  # JSON: [{id, name, slug}], root first
    level: Integer(default=0, min_value=0)
    image: ValueObject(CategoryImage)
    icon: String(max_length=50, default="folder")
    color: String(max_length=20, default="#6c757d")
    seo: ValueObject(CategorySEO)
    status: String(choices=CategoryStatus, default=CategoryStatus.ACTIVE.value)
    featured: Boolean(default=False)
    sort_order: Integer(default=0)
    product_count: Integer(default=0, min_value=0)
    attributes: Text()  # JSON: [{name, type, required, options, unit, min, max}]
    filters: Text()  # JSON: [{name, type, options, min, max}]
    created_at: DateTime(default=lambda: datetime.now(UTC))
    updated_at: DateTime(default=lambda: datetime.now(UTC))

    @invariant.post
    def level_matches_materialized_path(self):
        if self.level != len(self.ancestor_list):
            raise ValidationError({"level": ["Level must equal the number of ancestors"]})

    @invariant.post
    def cannot_be_its_own_parent(self):
        if self.parent_id is not None and str(self.parent_id) == str(self.id):
            raise ValidationError({"parent_id": ["A category cannot be its own parent"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, name, parent=None, description=None, icon=None, color=None, sort_order=0, featured=False):
        ancestors, level = _ancestry_under(parent)
        now = datetime.now(UTC)

        category = cls(
            name=name,
            slug=slugify(name),
            description=description,
            parent_id=parent.id if parent is not None else None,
            ancestors=json.dumps(ancestors),
            level=level,
            icon=icon or "folder",
            color=color or "#6c757d",
            sort_order=sort_order,
            featured=featured,
            status=CategoryStatus.ACTIVE.value,
            product_count=0,
            created_at=now,
            updated_at=now,
        )
        category.raise_(
            CategoryCreated(
                category_id=category.id,
                name=name,
                slug=category.slug,
                parent_id=category.parent_id,
                level=level,
            )
        )
        return category

    # -------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------
    @property
    def ancestor_list(self):
        return json.loads(self.ancestors) if self.ancestors else []

    @property
    def ancestor_ids(self):
        return [a["id"] for a in self.ancestor_list]

    def summary(self):
        return {"id": str(self.id), "name": self.name, "slug": self.slug}

    @property
    def breadcrumb(self):
        return self.ancestor_list + [self.summary()]

    @property
    def full_path(self):
        return " > ".join(a["name"] for a in self.breadcrumb)

    @property
    def full_slug_path(self):
        return "/".join(a["slug"] for a in self.breadcrumb)

    @property
    def is_active(self):
        return self.status == CategoryStatus.ACTIVE.value

    # -------------------------------------------------------------------
    # Details
    # -------------------------------------------------------------------
    def rename(self, name):
        previous_name = self.name
        self.name = name
        self.slug = slugify(name)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CategoryRenamed(
                category_id=self.id,
                previous_name=previous_name,
                name=self.name,
                slug=self.slug,
            )
        )

    def update_details(
        self,
        description=_UNSET,
        icon=_UNSET,
        color=_UNSET,
        featured=_UNSET,
        sort_order=_UNSET,
        image=_UNSET,
        seo=_UNSET,
        attributes=_UNSET,
        filters=_UNSET,
    ):
        with atomic_change(self):
            if description is not _UNSET:
                self.description = description
            if icon is not _UNSET:
                self.icon = icon
            if color is not _UNSET:
                self.color = color
            if featured is not _UNSET:
                self.featured = featured
            if sort_order is not _UNSET:
                self.sort_order = sort_order
            if image is not _UNSET:
                self.image = CategoryImage(**image) if isinstance(image, dict) else image
            if seo is not _UNSET:
                if isinstance(seo, dict):
                    keywords = seo.get("keywords")
                    seo = CategorySEO(
                        title=seo.get("title"),
                        description=seo.get("description"),
                        keywords=json.dumps(keywords) if keywords else None,
                    )
                self.seo = seo
            if attributes is not _UNSET:
                self.attributes = json.dumps(attributes) if attributes is not None else None
            if filters is not _UNSET:
                self.filters = json.dumps(filters) if filters is not None else None
            self.updated_at = datetime.now(UTC)

        self.raise_(CategoryDetailsUpdated(category_id=self.id))

    # -------------------------------------------------------------------
    # Hierarchy
    # -------------------------------------------------------------------
    def move_to(self, parent=None):
        """Attach this category under ``parent`` (or make it a root).

        Only this node's materialized path is recomputed; descendants are
        rebuilt separately by the caller.
        """
        if parent is not None:
            if str(parent.id) == str(self.id):
                raise ValidationError({"parent_id": ["A category cannot be its own parent"]})
            if str(self.id) in parent.ancestor_ids:
                raise ValidationError({"parent_id": ["A category cannot be moved under one of its descendants"]})

        previous_parent_id = self.parent_id
        ancestors, level = _ancestry_under(parent)

        with atomic_change(self):
            self.parent_id = parent.id if parent is not None else None
            self.ancestors = json.dumps(ancestors)
            self.level = level
            self.updated_at = datetime.now(UTC)

        self.raise_(
            CategoryMoved(
                category_id=self.id,
                previous_parent_id=previous_parent_id,
                parent_id=self.parent_id,
                level=level,
            )
        )

    def refresh_ancestry(self, parent):
        """Re-derive the materialized path from an already up-to-date parent.

        The parent link itself is unchanged.
        """
        ancestors, level = _ancestry_under(parent)
        with atomic_change(self):
            self.ancestors = json.dumps(ancestors)
            self.level = level
            self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Status & counters
    # -------------------------------------------------------------------
    def activate(self):
        if self.is_active:
            raise ValidationError({"status": ["Category is already active"]})

        now = datetime.now(UTC)
        self.status = CategoryStatus.ACTIVE.value
        self.updated_at = now
        self.raise_(CategoryActivated(category_id=self.id, activated_at=now))

    def deactivate(self):
        if not self.is_active:
            raise ValidationError({"status": ["Category is already inactive"]})

        now = datetime.now(UTC)
        self.status = CategoryStatus.INACTIVE.value
        self.updated_at = now
        self.raise_(CategoryDeactivated(category_id=self.id, deactivated_at=now))

    def refresh_product_count(self, count):
        self.product_count = count


def _ancestry_under(parent):
    """Return ``(ancestors, level)`` for a node placed under ``parent``."""
    if parent is None:
        return [], 0
    return parent.ancestor_list + [parent.summary()], parent.level + 1
