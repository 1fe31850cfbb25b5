"""Tests for the Order aggregate: pricing, order numbers and the status state machine."""

import re

import pytest
from protean.exceptions import ValidationError
from storefront.errors import InvalidState
from storefront.order.events import OrderCancelled, OrderPaid, OrderPlaced, OrderStatusChanged
from storefront.order.order import Order, OrderStatus, generate_order_number

ADDRESS = {
    "full_name": "Asha Rao",
    "address_line1": "12 Lake View Road",
    "city": "Pune",
    "state": "MH",
    "postal_code": "411001",
    "country": "IN",
    "phone": "+91-9800000000",
}


def _lines():
    return [
        {"product_id": "prod-1", "product_name": "Tote", "quantity": 2, "unit_price": 10.0},
        {"product_id": "prod-2", "product_name": "Mug", "quantity": 1, "unit_price": 4.5, "color": "blue"},
    ]


def _order(**overrides):
    defaults = {
        "user_id": "user-001",
        "lines_data": _lines(),
        "payment_method": "credit_card",
        "shipping_address": ADDRESS,
    }
    defaults.update(overrides)
    order = Order.place(**defaults)
    order._events.clear()
    return order


def _order_at(status):
    order = _order()
    path = {
        OrderStatus.PENDING: [],
        OrderStatus.PROCESSING: ["processing"],
        OrderStatus.SHIPPED: ["processing", "shipped"],
        OrderStatus.DELIVERED: ["processing", "shipped", "delivered"],
    }
    if status == OrderStatus.CANCELLED:
        order.cancel()
    else:
        for step in path[status]:
            order.update_status(step)
    order._events.clear()
    return order


class TestPlacement:
    def test_placed_order_is_pending_and_unpaid(self):
        order = _order()
        assert order.status == OrderStatus.PENDING.value
        assert order.is_paid is False
        assert order.is_delivered is False

    def test_total_is_sum_of_lines(self):
        assert _order().total_price == 24.5

    def test_grand_total_with_tax_shipping_and_discount(self):
        order = _order(tax_rate=0.1, shipping_fee=5.0, discount=2.0)
        assert order.tax == 2.45
        assert order.grand_total == pytest.approx(24.5 + 2.45 + 5.0 - 2.0)

    def test_lines_are_frozen_copies(self):
        order = _order()
        assert len(order.lines) == 2
        mug = next(line for line in order.lines if line.product_name == "Mug")
        assert mug.unit_price == 4.5
        assert mug.color == "blue"

    def test_no_lines_rejected(self):
        with pytest.raises(ValidationError) as exc:
            Order.place(user_id="u", lines_data=[], payment_method="cod", shipping_address=ADDRESS)
        assert "items" in exc.value.messages

    def test_invalid_payment_method_rejected(self):
        with pytest.raises(ValidationError):
            _order(payment_method="bitcoin")

    def test_incomplete_address_rejected(self):
        with pytest.raises(ValidationError):
            _order(shipping_address={"full_name": "Asha Rao"})

    def test_order_placed_event(self):
        order = Order.place(user_id="u", lines_data=_lines(), payment_method="upi", shipping_address=ADDRESS)
        event = order._events[-1]
        assert isinstance(event, OrderPlaced)
        assert event.order_number == order.order_number
        assert event.total_price == 24.5

    def test_stock_lines(self):
        assert sorted(_order().stock_lines()) == [("prod-1", 2), ("prod-2", 1)]

    def test_owned_by(self):
        order = _order()
        assert order.owned_by("user-001")
        assert not order.owned_by("user-002")


class TestOrderNumber:
    def test_format(self):
        assert re.fullmatch(r"ORD-\d{4}-\d{2}-\d{2}-[0-9a-f]{8}", generate_order_number())

    def test_numbers_differ(self):
        assert generate_order_number() != generate_order_number()

    def test_assigned_on_placement(self):
        assert _order().order_number.startswith("ORD-")


class TestGrandTotalInvariant:
    def test_unbalanced_grand_total_rejected(self):
        order = _order()
        with pytest.raises(ValidationError):
            order.grand_total = order.grand_total + 1

    @pytest.mark.parametrize("status", ["processing", "shipped", "delivered"])
    def test_grand_total_holds_across_status_updates(self, status):
        order = _order(tax_rate=0.18, shipping_fee=5.0, discount=1.0)
        for step in ["processing", "shipped", "delivered"]:
            order.update_status(step)
            expected = order.total_price + order.tax + order.shipping_fee - order.discount
            assert order.grand_total == pytest.approx(expected)
            if step == status:
                break


class TestStatusTransitions:
    @pytest.mark.parametrize(
        "start,target",
        [
            (OrderStatus.PENDING, "processing"),
            (OrderStatus.PROCESSING, "shipped"),
            (OrderStatus.SHIPPED, "delivered"),
        ],
    )
    def test_valid_transitions(self, start, target):
        order = _order_at(start)
        order.update_status(target)
        assert order.status == target
        assert isinstance(order._events[-1], OrderStatusChanged)

    @pytest.mark.parametrize(
        "start,target",
        [
            (OrderStatus.PENDING, "shipped"),
            (OrderStatus.PENDING, "delivered"),
            (OrderStatus.PROCESSING, "pending"),
            (OrderStatus.SHIPPED, "processing"),
        ],
    )
    def test_invalid_transitions(self, start, target):
        order = _order_at(start)
        with pytest.raises(InvalidState):
            order.update_status(target)

    @pytest.mark.parametrize("terminal", [OrderStatus.DELIVERED, OrderStatus.CANCELLED])
    @pytest.mark.parametrize("target", ["pending", "processing", "shipped", "delivered"])
    def test_no_transition_out_of_terminal_states(self, terminal, target):
        order = _order_at(terminal)
        with pytest.raises(InvalidState):
            order.update_status(target)

    def test_delivery_stamps_delivered_at(self):
        order = _order_at(OrderStatus.SHIPPED)
        order.update_status("delivered")
        assert order.is_delivered is True
        assert order.delivered_at is not None

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _order().update_status("lost")
        assert "status" in exc.value.messages

    def test_cancelled_is_not_a_plain_status_update(self):
        order = _order()
        with pytest.raises(ValidationError):
            order.update_status("cancelled")
        assert order.status == OrderStatus.PENDING.value


class TestCancel:
    @pytest.mark.parametrize("start", [OrderStatus.PENDING, OrderStatus.PROCESSING, OrderStatus.SHIPPED])
    def test_cancel_from_open_states(self, start):
        order = _order_at(start)
        order.cancel()
        assert order.status == OrderStatus.CANCELLED.value
        event = order._events[-1]
        assert isinstance(event, OrderCancelled)
        assert event.previous_status == start.value

    def test_cannot_cancel_delivered_order(self):
        order = _order_at(OrderStatus.DELIVERED)
        with pytest.raises(InvalidState) as exc:
            order.cancel()
        assert exc.value.messages == {"status": ["Cannot cancel a delivered order"]}

    def test_cannot_cancel_twice(self):
        order = _order_at(OrderStatus.CANCELLED)
        with pytest.raises(InvalidState) as exc:
            order.cancel()
        assert exc.value.messages == {"status": ["Order is already cancelled"]}


class TestPayment:
    def test_record_payment(self):
        order = _order()
        order.record_payment({"id": "PAY-1", "status": "COMPLETED", "email_address": "a@b.com"})
        assert order.is_paid is True
        assert order.paid_at is not None
        assert order.payment_result.payment_id == "PAY-1"
        assert isinstance(order._events[-1], OrderPaid)

    def test_payment_does_not_change_status(self):
        order = _order_at(OrderStatus.PROCESSING)
        order.record_payment({"id": "PAY-2"})
        assert order.status == OrderStatus.PROCESSING.value

    def test_cannot_pay_cancelled_order(self):
        order = _order_at(OrderStatus.CANCELLED)
        with pytest.raises(InvalidState):
            order.record_payment({"id": "PAY-3"})
