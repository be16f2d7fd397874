"""Order status changes, cancellation and tracking — commands and handler."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.ordering.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    note = String(max_length=500)
    updated_by = Identifier()


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(max_length=500)
    cancelled_by = Identifier()


@storefront.command(part_of="Order")
class AddTracking:
    order_id = Identifier(required=True)
    carrier = String(required=True, max_length=100)
    tracking_number = String(required=True, max_length=255)
    estimated_delivery = DateTime()


@storefront.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.status
        order.update_status(command.status, note=command.note or "", updated_by=command.updated_by)
        repo.add(order)

        logger.info("Order status updated", order_id=str(order.id), previous=previous, status=order.status)

    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if not order.can_be_cancelled:
            raise ValidationError({"status": [f"Order cannot be cancelled while {order.status}"]})

        order.update_status(
            OrderStatus.CANCELLED.value,
            note=command.reason or "Cancelled",
            updated_by=command.cancelled_by,
        )
        repo.add(order)

        logger.info("Order cancelled", order_id=str(order.id), reason=command.reason)

    @handle(AddTracking)
    def add_tracking(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.add_tracking(
            carrier=command.carrier,
            tracking_number=command.tracking_number,
            estimated_delivery=command.estimated_delivery,
        )
        repo.add(order)
