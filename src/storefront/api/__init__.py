"""Storefront API package."""

from storefront.api.errors import register_error_handlers
from storefront.api.routes import (
    cart_router,
    maintenance_router,
    order_router,
    product_router,
    review_router,
    shopper_router,
    wishlist_router,
)

routers = [
    product_router,
    cart_router,
    order_router,
    shopper_router,
    wishlist_router,
    review_router,
    maintenance_router,
]

__all__ = ["register_error_handlers", "routers"]
