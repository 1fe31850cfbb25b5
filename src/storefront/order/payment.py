"""RecordOrderPayment: attach an opaque payment result to an order."""

import json

from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import Forbidden
from storefront.order.order import Order


@storefront.command(part_of="Order")
class RecordOrderPayment:
    order_id = Identifier(required=True)
    requester_id = Identifier(required=True)
    payment_result = Text()  # JSON: {id, status, update_time, email_address}


@storefront.command_handler(part_of=Order)
class RecordOrderPaymentHandler:
    @handle(RecordOrderPayment)
    def record_order_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        if not order.owned_by(command.requester_id):
            raise Forbidden("Not authorized to update this order")

        payment_result = json.loads(command.payment_result) if command.payment_result else {}
        order.record_payment(payment_result)
        repo.add(order)
