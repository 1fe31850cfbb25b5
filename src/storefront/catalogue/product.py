"""Product aggregate: the catalogue's view of price, stock and rating.

The catalogue itself is an external collaborator. Within this context the
Product owns three counters that other flows may only change through narrow
methods: ``available_quantity`` (the stock ledger), and ``average_rating`` /
``rating_count`` (the rating aggregate).
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Integer, String, Text

from storefront.catalogue.events import (
    ProductAdded,
    ProductPriceChanged,
    ProductRatingRecalculated,
    StockReleased,
    StockReserved,
)
from storefront.domain import storefront
from storefront.errors import InsufficientStock


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    description = Text()
    price = Float(required=True, min_value=0.0)
    available_quantity = Integer(default=0, min_value=0)
    average_rating = Float(default=0.0, min_value=0.0, max_value=5.0)
    rating_count = Integer(default=0, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def stock_cannot_go_negative(self):
        if self.available_quantity is not None and self.available_quantity < 0:
            raise ValidationError({"available_quantity": ["Available quantity cannot be negative"]})

    @classmethod
    def add(cls, name, price, available_quantity=0, description=None):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            description=description,
            price=price,
            available_quantity=available_quantity,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                name=name,
                price=price,
                available_quantity=available_quantity,
            )
        )
        return product

    def change_price(self, new_price):
        if new_price is None or new_price < 0:
            raise ValidationError({"price": ["Price must be a non-negative number"]})

        previous_price = self.price
        self.price = new_price
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductPriceChanged(
                product_id=str(self.id),
                previous_price=previous_price,
                new_price=new_price,
            )
        )

    # -------------------------------------------------------------------
    # Stock ledger
    # -------------------------------------------------------------------
    def reserve(self, quantity):
        """Debit ``quantity`` units, or fail without mutating anything."""
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if quantity > self.available_quantity:
            raise InsufficientStock(self.name, self.available_quantity)

        now = datetime.now(UTC)
        self.available_quantity -= quantity
        self.updated_at = now

        self.raise_(
            StockReserved(
                product_id=str(self.id),
                quantity=quantity,
                available_quantity=self.available_quantity,
                reserved_at=now,
            )
        )

    def release(self, quantity):
        """Credit ``quantity`` units back to the available count."""
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        now = datetime.now(UTC)
        self.available_quantity += quantity
        self.updated_at = now

        self.raise_(
            StockReleased(
                product_id=str(self.id),
                quantity=quantity,
                available_quantity=self.available_quantity,
                released_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Rating aggregate
    # -------------------------------------------------------------------
    def record_rating(self, average_rating, rating_count):
        self.average_rating = average_rating
        self.rating_count = rating_count
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductRatingRecalculated(
                product_id=str(self.id),
                average_rating=average_rating,
                rating_count=rating_count,
            )
        )
