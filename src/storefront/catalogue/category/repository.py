"""Hierarchy queries over the Category aggregate."""

from storefront.catalogue.category.category import Category, CategoryStatus
from storefront.domain import storefront


def _ordered(categories):
    return sorted(categories, key=lambda c: (c.sort_order or 0, c.name))


@storefront.repository(part_of=Category)
class CategoryRepository:
    """Tree navigation on top of the materialized path.

    Children are looked up by ``parent_id``; everything else walks the tree
    breadth first so results never depend on a query page size.
    """

    def find_by_slug(self, slug: str) -> Category | None:
        matches = self._dao.query.filter(slug=slug).all().items
        return matches[0] if matches else None

    def roots(self, active_only: bool = True) -> list[Category]:
        return self.children_of(None, active_only=active_only)

    def children_of(self, parent_id, active_only: bool = True) -> list[Category]:
        criteria = {"status": CategoryStatus.ACTIVE.value} if active_only else {}
        if parent_id is None:
            # Roots have no parent link to match on
            query = self._dao.query.filter(**criteria) if criteria else self._dao.query
            candidates = query.limit(None).all().items
            return _ordered(c for c in candidates if not c.parent_id)
        children = self._dao.query.filter(parent_id=str(parent_id), **criteria).limit(None).all().items
        return _ordered(children)

    def has_children(self, category_id) -> bool:
        return bool(self.children_of(category_id, active_only=False))

    def descendants_of(self, category_id, active_only: bool = False) -> list[Category]:
        """All categories below ``category_id``, parents before children."""
        result = []
        frontier = [category_id]
        while frontier:
            parent_id = frontier.pop(0)
            for child in self.children_of(parent_id, active_only=active_only):
                result.append(child)
                frontier.append(child.id)
        return result

    def ancestors_of(self, category: Category) -> list[Category]:
        """Loaded ancestor aggregates, root first."""
        return [self.get(ancestor_id) for ancestor_id in category.ancestor_ids]

    def tree(self, parent_id=None) -> list[dict]:
        """Nested ``{category, children}`` dictionaries of active categories."""
        return [
            {"category": child, "children": self.tree(child.id)}
            for child in self.children_of(parent_id, active_only=True)
        ]
