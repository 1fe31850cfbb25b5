"""Order aggregate: an immutable record of what was bought and at what price.

Lines and prices are frozen when the order is placed. Only the lifecycle
fields (status, payment, delivery) change afterwards.

State Machine (5 states):
    PENDING → PROCESSING → SHIPPED → DELIVERED
    PENDING | PROCESSING | SHIPPED → CANCELLED
    DELIVERED, CANCELLED → (terminal)
"""

import json
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.domain import storefront
from storefront.errors import InvalidState
from storefront.order.events import OrderCancelled, OrderPaid, OrderPlaced, OrderStatusChanged


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    CREDIT_CARD = "credit_card"
    PAYPAL = "paypal"
    COD = "cod"
    UPI = "upi"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


def generate_order_number(now=None):
    """Human-readable order number: ``ORD-<YYYY-MM-DD>-<8 hex>``."""
    now = now or datetime.now(UTC)
    return f"ORD-{now.date().isoformat()}-{uuid4().hex[:8]}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships, captured at checkout and never updated."""

    full_name = String(required=True, max_length=100)
    address_line1 = String(required=True, max_length=255)
    address_line2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    phone = String(required=True, max_length=30)


@storefront.value_object(part_of="Order")
class PaymentResult:
    """Opaque result handed back by the payment gateway."""

    payment_id = String(max_length=255)
    status = String(max_length=50)
    update_time = String(max_length=50)
    email_address = String(max_length=254)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderLine:
    """A product, quantity and unit price frozen at the moment of ordering."""

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    size = String(max_length=20)
    color = String(max_length=50)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=30, unique=True)
    user_id = Identifier(required=True)
    lines = HasMany(OrderLine)
    payment_method = String(required=True, choices=PaymentMethod)
    shipping_address = ValueObject(ShippingAddress, required=True)
    total_price = Float(required=True, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    shipping_fee = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    grand_total = Float(required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    is_paid = Boolean(default=False)
    paid_at = DateTime()
    payment_result = ValueObject(PaymentResult)
    is_delivered = Boolean(default=False)
    delivered_at = DateTime()
    tracking_number = String(max_length=100)
    notes = Text()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def grand_total_must_balance(self):
        if None in (self.total_price, self.grand_total):
            return
        expected = (self.total_price or 0.0) + (self.tax or 0.0) + (self.shipping_fee or 0.0) - (self.discount or 0.0)
        if abs(self.grand_total - expected) > 0.005:
            raise ValidationError({"grand_total": ["Grand total must equal total + tax + shipping - discount"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        user_id,
        lines_data,
        payment_method,
        shipping_address,
        tax_rate=0.0,
        shipping_fee=0.0,
        discount=0.0,
        notes=None,
    ):
        """Create a pending, unpaid order from priced line data.

        Args:
            user_id: The shopper placing the order.
            lines_data: List of dicts with product_id, product_name, quantity,
                        unit_price and optionally size and color.
            payment_method: One of ``PaymentMethod`` values.
            shipping_address: Dict matching ``ShippingAddress``.
            tax_rate: Flat rate applied to the line total.
            shipping_fee: Flat shipping charge.
            discount: Amount taken off the grand total.
        """
        if not lines_data:
            raise ValidationError({"items": ["No order items provided"]})

        now = datetime.now(UTC)
        total_price = round(sum(line["unit_price"] * line["quantity"] for line in lines_data), 2)
        tax = round(total_price * (tax_rate or 0.0), 2)
        shipping_fee = shipping_fee or 0.0
        discount = discount or 0.0
        grand_total = round(total_price + tax + shipping_fee - discount, 2)

        order = cls(
            order_number=generate_order_number(now),
            user_id=user_id,
            payment_method=payment_method,
            shipping_address=ShippingAddress(**shipping_address),
            total_price=total_price,
            tax=tax,
            shipping_fee=shipping_fee,
            discount=discount,
            grand_total=grand_total,
            status=OrderStatus.PENDING.value,
            is_paid=False,
            is_delivered=False,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        for line in lines_data:
            order.add_lines(
                OrderLine(
                    product_id=line["product_id"],
                    product_name=line["product_name"],
                    quantity=line["quantity"],
                    unit_price=line["unit_price"],
                    size=line.get("size"),
                    color=line.get("color"),
                )
            )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                user_id=str(user_id),
                lines=json.dumps([{k: v for k, v in line.items() if v is not None} for line in lines_data]),
                total_price=total_price,
                grand_total=grand_total,
                payment_method=payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        """Validate that the current state allows transition to target."""
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidState(f"Cannot transition from {current.value} to {target_status.value}")

    def owned_by(self, user_id):
        return str(self.user_id) == str(user_id)

    def stock_lines(self):
        """(product_id, quantity) pairs debited from the stock ledger for this order."""
        return [(str(line.product_id), line.quantity) for line in self.lines]

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def update_status(self, new_status):
        """Administrative status change. Cancellation goes through ``cancel``."""
        try:
            target = OrderStatus(new_status)
        except ValueError:
            raise ValidationError({"status": [f"Invalid order status: {new_status}"]})

        self._assert_can_transition(target)
        if target == OrderStatus.CANCELLED:
            raise ValidationError({"status": ["Orders are cancelled through order cancellation"]})

        now = datetime.now(UTC)
        previous = self.status
        self.status = target.value
        if target == OrderStatus.DELIVERED:
            self.is_delivered = True
            self.delivered_at = now
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=target.value,
                changed_at=now,
            )
        )

    def cancel(self):
        current = OrderStatus(self.status)
        if current == OrderStatus.DELIVERED:
            raise InvalidState("Cannot cancel a delivered order")
        if current == OrderStatus.CANCELLED:
            raise InvalidState("Order is already cancelled")
        self._assert_can_transition(OrderStatus.CANCELLED)

        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                user_id=str(self.user_id),
                previous_status=current.value,
                lines=json.dumps(
                    [{"product_id": product_id, "quantity": quantity} for product_id, quantity in self.stock_lines()]
                ),
                cancelled_at=now,
            )
        )

    def record_payment(self, payment_result):
        """Attach the gateway's result and mark paid. Status is left as is."""
        if OrderStatus(self.status) == OrderStatus.CANCELLED:
            raise InvalidState("Cannot pay for a cancelled order")

        now = datetime.now(UTC)
        payment_result = payment_result or {}
        result = PaymentResult(
            payment_id=payment_result.get("id"),
            status=payment_result.get("status"),
            update_time=payment_result.get("update_time"),
            email_address=payment_result.get("email_address"),
        )
        self.is_paid = True
        self.paid_at = now
        self.payment_result = result
        self.updated_at = now

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                payment_id=result.payment_id,
                payment_status=result.status,
                paid_at=now,
            )
        )
