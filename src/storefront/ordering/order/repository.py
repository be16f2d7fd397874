"""Order listing and reporting queries."""

from storefront.domain import storefront
from storefront.ordering.order.order import Order, OrderStatus
from storefront.shared.pagination import page_window


@storefront.repository(part_of=Order)
class OrderRepository:
    def find_by_number(self, order_number: str) -> Order | None:
        matches = self._dao.query.filter(order_number=order_number).all().items
        return matches[0] if matches else None

    def _page(self, page, limit, **criteria):
        offset, limit = page_window(page, limit)
        result = self._dao.query.filter(**criteria).order_by("-created_at").offset(offset).limit(limit).all()
        return result.items, result.total

    def by_user(self, user_id, page=1, limit=None):
        """A user's orders, newest first. Returns ``(orders, total)``."""
        return self._page(page, limit, user_id=str(user_id))

    def by_status(self, status, page=1, limit=None):
        """Orders in ``status``, newest first. Returns ``(orders, total)``."""
        return self._page(page, limit, status=status)

    def delivered_with_product(self, user_id, product_id) -> Order | None:
        """A delivered order of ``user_id`` containing ``product_id``, if any."""
        delivered = (
            self._dao.query.filter(user_id=str(user_id), status=OrderStatus.DELIVERED.value).limit(None).all().items
        )
        for order in delivered:
            if any(str(item.product_id) == str(product_id) for item in order.items):
                return order
        return None

    def stats(self) -> dict:
        """Order count and summed total per status."""
        summary = {status.value: {"count": 0, "total": 0.0} for status in OrderStatus}
        for status in OrderStatus:
            orders = self._dao.query.filter(status=status.value).limit(None).all().items
            summary[status.value]["count"] = len(orders)
            summary[status.value]["total"] = round(sum(o.total for o in orders), 2)
        return summary
