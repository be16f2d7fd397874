"""Payment outcome recording — commands and handler.

Gateway integration is out of scope; these commands record what the gateway
reported.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.ordering.order.order import Order


@storefront.command(part_of="Order")
class RecordPayment:
    order_id = Identifier(required=True)
    transaction_id = String(required=True, max_length=255)
    gateway = String(max_length=50)
    payment_intent_id = String(max_length=255)


@storefront.command(part_of="Order")
class RecordPaymentFailure:
    order_id = Identifier(required=True)
    reason = String(max_length=500)


@storefront.command_handler(part_of=Order)
class OrderPaymentHandler:
    @handle(RecordPayment)
    def record_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.record_payment(
            transaction_id=command.transaction_id,
            gateway=command.gateway,
            payment_intent_id=command.payment_intent_id,
        )
        repo.add(order)

    @handle(RecordPaymentFailure)
    def record_payment_failure(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.record_payment_failure(reason=command.reason)
        repo.add(order)
