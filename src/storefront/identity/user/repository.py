"""Account lookups over the User aggregate."""

from storefront.domain import storefront
from storefront.identity.user.user import User
from storefront.shared.pagination import page_window


@storefront.repository(part_of=User)
class UserRepository:
    def find_by_email(self, email: str) -> User | None:
        if not email:
            return None
        matches = self._dao.query.filter(email=email.strip().lower()).all().items
        return matches[0] if matches else None

    def find(self, user_id) -> User | None:
        """Like ``get`` but returns None for unknown ids."""
        matches = self._dao.query.filter(id=str(user_id)).all().items
        return matches[0] if matches else None

    def listing(self, page=1, limit=None, role=None):
        """Users newest first, optionally of one role. Returns ``(users, total)``."""
        offset, limit = page_window(page, limit)
        query = self._dao.query
        if role:
            query = query.filter(role=role)
        result = query.order_by("-created_at").offset(offset).limit(limit).all()
        return result.items, result.total
