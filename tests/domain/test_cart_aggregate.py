"""Tests for the Cart aggregate: line merging, derived totals and abandonment."""

from datetime import UTC, datetime

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError
from storefront.cart.cart import Cart
from storefront.cart.events import CartAbandoned, CartLineAdded


def _cart():
    return Cart.create(user_id="user-001")


class TestAddLine:
    def test_add_line(self):
        cart = _cart()
        line = cart.add_line(product_id="prod-1", quantity=2, price=10.0)
        assert len(cart.lines) == 1
        assert line.quantity == 2
        assert line.price == 10.0

    def test_same_product_and_variant_merges(self):
        cart = _cart()
        first = cart.add_line(product_id="prod-1", quantity=1, price=10.0, size="M")
        second = cart.add_line(product_id="prod-1", quantity=2, price=10.0, size="M")
        assert len(cart.lines) == 1
        assert first.id == second.id
        assert cart.lines[0].quantity == 3

    def test_merge_takes_latest_price(self):
        cart = _cart()
        cart.add_line(product_id="prod-1", quantity=1, price=10.0)
        cart.add_line(product_id="prod-1", quantity=1, price=12.0)
        assert cart.lines[0].price == 12.0

    def test_different_variant_is_separate_line(self):
        cart = _cart()
        cart.add_line(product_id="prod-1", quantity=1, price=10.0, size="M")
        cart.add_line(product_id="prod-1", quantity=1, price=10.0, size="L")
        cart.add_line(product_id="prod-1", quantity=1, price=10.0, size="L", color="red")
        assert len(cart.lines) == 3

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_rejects_quantity_below_one(self, quantity):
        cart = _cart()
        with pytest.raises(ValidationError):
            cart.add_line(product_id="prod-1", quantity=quantity, price=10.0)

    def test_add_line_raises_event(self):
        cart = _cart()
        cart.add_line(product_id="prod-1", quantity=2, price=10.0)
        assert isinstance(cart._events[-1], CartLineAdded)
        assert cart._events[-1].quantity == 2


class TestTotal:
    def test_empty_cart_total_is_zero(self):
        assert _cart().total_price() == 0

    def test_total_is_sum_of_price_times_quantity(self):
        cart = _cart()
        cart.add_line(product_id="prod-1", quantity=2, price=10.0)
        cart.add_line(product_id="prod-2", quantity=3, price=1.5)
        assert cart.total_price() == 24.5

    def test_total_follows_line_changes(self):
        cart = _cart()
        line = cart.add_line(product_id="prod-1", quantity=2, price=10.0)
        cart.set_quantity(line.id, 5, current_price=10.0)
        assert cart.total_price() == 50.0
        cart.remove_line(line.id)
        assert cart.total_price() == 0


class TestSetQuantity:
    def test_set_quantity_reprices_line(self):
        cart = _cart()
        line = cart.add_line(product_id="prod-1", quantity=1, price=10.0)
        cart.set_quantity(line.id, 2, current_price=15.0)
        assert cart.lines[0].quantity == 2
        assert cart.lines[0].price == 15.0
        assert cart.total_price() == 30.0

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_rejects_non_positive_quantity(self, quantity):
        cart = _cart()
        line = cart.add_line(product_id="prod-1", quantity=1, price=10.0)
        with pytest.raises(ValidationError):
            cart.set_quantity(line.id, quantity, current_price=10.0)

    def test_unknown_line_not_found(self):
        cart = _cart()
        with pytest.raises(ObjectNotFoundError):
            cart.set_quantity("missing", 2, current_price=10.0)


class TestRemoveLine:
    def test_remove_line(self):
        cart = _cart()
        line = cart.add_line(product_id="prod-1", quantity=1, price=10.0)
        cart.remove_line(line.id)
        assert len(cart.lines) == 0

    def test_remove_unknown_line_not_found(self):
        with pytest.raises(ObjectNotFoundError):
            _cart().remove_line("missing")


class TestAbandonment:
    def test_mark_abandoned(self):
        cart = _cart()
        cart.add_line(product_id="prod-1", quantity=1, price=10.0)
        as_of = datetime(2026, 1, 2, tzinfo=UTC)
        cart.mark_abandoned(as_of=as_of)
        assert cart.abandoned_at == as_of
        assert isinstance(cart._events[-1], CartAbandoned)

    def test_empty_cart_cannot_be_abandoned(self):
        with pytest.raises(ValidationError):
            _cart().mark_abandoned()

    def test_cannot_flag_twice(self):
        cart = _cart()
        cart.add_line(product_id="prod-1", quantity=1, price=10.0)
        cart.mark_abandoned()
        with pytest.raises(ValidationError):
            cart.mark_abandoned()

    def test_mutation_clears_abandoned_flag(self):
        cart = _cart()
        cart.add_line(product_id="prod-1", quantity=1, price=10.0)
        cart.mark_abandoned()
        cart.add_line(product_id="prod-2", quantity=1, price=5.0)
        assert cart.abandoned_at is None
