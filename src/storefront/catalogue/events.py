"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductAdded:
    """A product was added to the catalogue with an opening stock count."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    available_quantity = Integer(required=True)


@storefront.event(part_of="Product")
class ProductPriceChanged:
    """The unit price of a product changed."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_price = Float(required=True)
    new_price = Float(required=True)


@storefront.event(part_of="Product")
class StockReserved:
    """Stock was debited from a product's available quantity."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    available_quantity = Integer(required=True)
    reserved_at = DateTime(required=True)


@storefront.event(part_of="Product")
class StockReleased:
    """Previously debited stock was credited back."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    available_quantity = Integer(required=True)
    released_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductRatingRecalculated:
    """The product's average rating was recomputed from its counted reviews."""

    __version__ = 1

    product_id = Identifier(required=True)
    average_rating = Float(required=True)
    rating_count = Integer(required=True)
