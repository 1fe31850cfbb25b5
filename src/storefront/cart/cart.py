"""Cart aggregate: a user's mutable selection of products.

One cart per user, created lazily on the first add and deleted on checkout or
an explicit clear. Carts never hold inventory: stock is only soft-checked here
and debited at checkout. Each line keeps the price seen when it was last
written; the cart total is always derived from the lines.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.cart.events import (
    CartAbandoned,
    CartLineAdded,
    CartLineQuantityChanged,
    CartLineRemoved,
)
from storefront.domain import storefront


@storefront.entity(part_of="Cart")
class CartLine:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)  # Unit price when the line was last written
    size = String(max_length=20)
    color = String(max_length=50)
    added_at = DateTime()


@storefront.aggregate
class Cart:
    user_id = Identifier(required=True, unique=True)
    lines = HasMany(CartLine)
    abandoned_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, created_at=now, updated_at=now)

    def total_price(self):
        """Sum of line price times quantity, recomputed on every call."""
        return round(sum(line.price * line.quantity for line in self.lines), 2)

    def find_line(self, line_id):
        line = next((line for line in self.lines if str(line.id) == str(line_id)), None)
        if line is None:
            raise ObjectNotFoundError("Item not found in cart")
        return line

    def _touch(self):
        self.updated_at = datetime.now(UTC)
        self.abandoned_at = None

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add_line(self, product_id, quantity, price, size=None, color=None):
        """Add a product line, or grow the existing line for the same product and variant."""
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = next(
            (
                line
                for line in self.lines
                if str(line.product_id) == str(product_id) and line.size == size and line.color == color
            ),
            None,
        )

        if existing:
            existing.quantity += quantity
            existing.price = price
            line = existing
        else:
            line = CartLine(
                product_id=product_id,
                quantity=quantity,
                price=price,
                size=size,
                color=color,
                added_at=datetime.now(UTC),
            )
            self.add_lines(line)

        self._touch()

        self.raise_(
            CartLineAdded(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                line_id=str(line.id),
                product_id=str(product_id),
                quantity=line.quantity,
                price=price,
            )
        )
        return line

    def set_quantity(self, line_id, quantity, current_price):
        """Set a line's quantity and reprice it at the product's current price."""
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be greater than 0"]})

        line = self.find_line(line_id)
        previous_quantity = line.quantity
        line.quantity = quantity
        line.price = current_price
        self._touch()

        self.raise_(
            CartLineQuantityChanged(
                cart_id=str(self.id),
                line_id=str(line.id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
                price=current_price,
            )
        )

    def remove_line(self, line_id):
        line = self.find_line(line_id)
        self.remove_lines(line)
        self._touch()

        self.raise_(CartLineRemoved(cart_id=str(self.id), line_id=str(line_id)))

    # -------------------------------------------------------------------
    # Abandonment
    # -------------------------------------------------------------------
    def mark_abandoned(self, as_of=None):
        if not self.lines:
            raise ValidationError({"cart": ["An empty cart cannot be abandoned"]})
        if self.abandoned_at is not None:
            raise ValidationError({"cart": ["Cart is already flagged as abandoned"]})

        now = as_of or datetime.now(UTC)
        self.abandoned_at = now

        self.raise_(
            CartAbandoned(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                abandoned_at=now,
            )
        )
