"""RecordOrder: persist an order whose stock has already been debited.

Only the fulfillment engine issues this command, after every line has been
reserved. The handler prices nothing itself: unit prices arrive frozen in
the line data. Tax and shipping come from the domain's flat-rate config.
"""

import json

from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order, PaymentMethod


@storefront.command(part_of="Order")
class RecordOrder:
    user_id = Identifier(required=True)
    lines = Text(required=True)  # JSON: list of {product_id, product_name, quantity, unit_price, size, color}
    payment_method = String(required=True, choices=PaymentMethod)
    shipping_address = Text(required=True)  # JSON: ShippingAddress fields
    discount = Float(default=0.0, min_value=0.0)
    notes = Text()


@storefront.command_handler(part_of=Order)
class RecordOrderHandler:
    @handle(RecordOrder)
    def record_order(self, command):
        order = Order.place(
            user_id=command.user_id,
            lines_data=json.loads(command.lines),
            payment_method=command.payment_method,
            shipping_address=json.loads(command.shipping_address),
            tax_rate=getattr(current_domain, "TAX_RATE", 0.0),
            shipping_fee=getattr(current_domain, "SHIPPING_FEE", 0.0),
            discount=command.discount,
            notes=command.notes,
        )
        current_domain.repository_for(Order).add(order)
        return str(order.id)
