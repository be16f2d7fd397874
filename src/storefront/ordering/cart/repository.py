"""Cart lookups by owner."""

from storefront.domain import storefront
from storefront.ordering.cart.cart import Cart


@storefront.repository(part_of=Cart)
class CartRepository:
    def active_for_user(self, user_id) -> Cart | None:
        matches = self._dao.query.filter(user_id=str(user_id), is_active=True).all().items
        return matches[0] if matches else None

    def active_for_session(self, session_id: str) -> Cart | None:
        matches = self._dao.query.filter(session_id=session_id, is_active=True).all().items
        return matches[0] if matches else None

    def active(self) -> list[Cart]:
        return self._dao.query.filter(is_active=True).limit(None).all().items
