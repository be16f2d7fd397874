"""Order refunds — command and handler."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.ordering.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class RefundOrder:
    order_id = Identifier(required=True)
    amount = Float(min_value=0.0)  # Defaults to the order total
    reason = String(max_length=500)
    processed_by = Identifier()


@storefront.command_handler(part_of=Order)
class RefundOrderHandler:
    @handle(RefundOrder)
    def refund_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if not order.can_be_refunded:
            raise ValidationError({"status": ["Only paid, delivered orders can be refunded"]})

        amount = command.amount if command.amount is not None else order.total
        order.process_refund(amount, command.reason, command.processed_by)
        repo.add(order)

        logger.info(
            "Order refunded",
            order_id=str(order.id),
            amount=amount,
            payment_status=order.payment_status,
        )
