"""Expired cart sweep — command and handler.

Meant to be triggered periodically by an external scheduler (cron, K8s
CronJob) through the maintenance API endpoint or ``manage.py clean-carts``.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.fields import DateTime
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.ordering.cart.cart import Cart

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class CleanExpiredCarts:
    """Deactivate every active cart whose expiry has passed."""

    as_of = DateTime()  # Optional: defaults to now, naive values are read as UTC


@storefront.command_handler(part_of=Cart)
class CleanExpiredCartsHandler:
    @handle(CleanExpiredCarts)
    def clean_expired_carts(self, command):
        as_of = command.as_of or datetime.now(UTC)
        if as_of.tzinfo is None:
            as_of = as_of.replace(tzinfo=UTC)
        repo = current_domain.repository_for(Cart)

        expired = [cart for cart in repo.active() if cart.expires_at and cart.expires_at < as_of]
        if not expired:
            logger.info("No expired carts found", as_of=as_of.isoformat())
            return 0

        for cart in expired:
            cart.deactivate(reason="expired")
            repo.add(cart)

        logger.info("Expired carts deactivated", count=len(expired), as_of=as_of.isoformat())
        return len(expired)
