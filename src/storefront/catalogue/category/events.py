"""Domain events for the Category aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Category")
class CategoryCreated:
    """A new product category was added to the catalogue hierarchy."""

    __version__ = 1

    category_id: Identifier(required=True)
    name: String(required=True)
    slug: String(required=True)
    parent_id: Identifier()
    level: Integer(required=True)


@storefront.event(part_of="Category")
class CategoryRenamed:
    """A category's name (and therefore its slug) changed."""

    __version__ = 1

    category_id: Identifier(required=True)
    previous_name: String(required=True)
    name: String(required=True)
    slug: String(required=True)


@storefront.event(part_of="Category")
class CategoryDetailsUpdated:
    """Presentation details of a category were changed."""

    __version__ = 1

    category_id: Identifier(required=True)


@storefront.event(part_of="Category")
class CategoryMoved:
    """A category was attached to a different parent (or made a root)."""

    __version__ = 1

    category_id: Identifier(required=True)
    previous_parent_id: Identifier()
    parent_id: Identifier()
    level: Integer(required=True)


@storefront.event(part_of="Category")
class CategoryActivated:
    """A category was made visible on the storefront."""

    __version__ = 1

    category_id: Identifier(required=True)
    activated_at: DateTime(required=True)


@storefront.event(part_of="Category")
class CategoryDeactivated:
    """A category was deactivated and hidden from the storefront."""

    __version__ = 1

    category_id: Identifier(required=True)
    deactivated_at: DateTime(required=True)
