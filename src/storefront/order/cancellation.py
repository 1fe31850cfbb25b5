"""CancelOrder: flip an order to cancelled and report the stock it held.

The order is marked cancelled in its own Unit of Work before any stock is
credited. The compare-and-set on the order's version means only one of two
racing cancellations can commit; the other re-reads a cancelled order and
fails with ``InvalidState``. Stock is therefore credited at most once.
"""

from protean import handle
from protean.fields import Boolean, Identifier
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.errors import Forbidden
from storefront.order.order import Order


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    requester_id = Identifier()
    as_admin = Boolean(default=False)


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        if not command.as_admin and not order.owned_by(command.requester_id):
            raise Forbidden("Not authorized to cancel this order")

        order.cancel()
        repo.add(order)

        logger.info(
            "Order cancelled",
            order_id=str(order.id),
            order_number=order.order_number,
            by_admin=command.as_admin,
        )
        return order.stock_lines()
