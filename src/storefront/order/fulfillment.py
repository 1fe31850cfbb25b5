"""Order fulfillment engine.

Turns a cart or an ad-hoc item list into an order, debiting stock line by
line through the stock ledger. There is no transaction spanning documents:
every ``reserve`` commits on its own, so the engine tracks which lines it has
debited and releases them, newest first, if any later step fails.

Flow for ``place_order``:
    validate input → look up every product → reserve each line
    → RecordOrder → clear the cart (best effort) → place_order lead event

Cancellation runs the other way: the order is marked cancelled in its own
Unit of Work, then every line is credited back to the ledger.
"""

import json

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.cart.items import ClearCart
from storefront.catalogue import stock
from storefront.catalogue.product import Product
from storefront.errors import Forbidden
from storefront.leads.scoring import LeadActivity, record_lead_activity
from storefront.order.cancellation import CancelOrder
from storefront.order.creation import RecordOrder
from storefront.order.order import Order, OrderStatus, PaymentMethod, ShippingAddress
from storefront.order.payment import RecordOrderPayment
from storefront.order.removal import DeleteOrder
from storefront.order.status import UpdateOrderStatus
from storefront.utils.side_effects import best_effort

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------
def _normalize_items(items):
    """Validate raw items and return them as a list of plain dicts."""
    if not items:
        raise ValidationError({"items": ["No order items provided"]})

    normalized = []
    for item in items:
        product_id = item.get("product_id")
        quantity = item.get("quantity")
        if not product_id:
            raise ValidationError({"product_id": ["Product is required for every item"]})
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be a whole number of at least 1"]})
        normalized.append(
            {
                "product_id": str(product_id),
                "quantity": quantity,
                "size": item.get("size"),
                "color": item.get("color"),
            }
        )
    return normalized


def _validate_checkout(payment_method, shipping_address):
    if payment_method not in {method.value for method in PaymentMethod}:
        raise ValidationError({"payment_method": [f"Invalid payment method: {payment_method}"]})
    if not shipping_address:
        raise ValidationError({"shipping_address": ["Shipping address is required"]})
    # Builds the value object only to surface missing or malformed fields
    ShippingAddress(**shipping_address)


def _items_from_cart(user_id):
    cart = current_domain.repository_for(Cart).for_user(user_id)
    if cart is None or not cart.lines:
        raise ValidationError({"items": ["No order items provided"]})
    return [
        {
            "product_id": str(line.product_id),
            "quantity": line.quantity,
            "size": line.size,
            "color": line.color,
        }
        for line in cart.lines
    ]


# ---------------------------------------------------------------------------
# Compensation
# ---------------------------------------------------------------------------
def _compensate(reserved, reason):
    """Release every reserved line, most recent first. Never raises."""
    for product_id, quantity in reversed(reserved):
        with best_effort("stock_compensation", product_id=product_id, quantity=quantity):
            stock.release(product_id, quantity)

    if reserved:
        logger.warning(
            "Order attempt rolled back",
            reason=reason,
            released_lines=len(reserved),
        )


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------
def place_order(
    user_id,
    items,
    payment_method,
    shipping_address,
    from_cart=False,
    discount=0.0,
    notes=None,
):
    """Create an order, debiting stock for every line.

    Args:
        user_id: The shopper placing the order.
        items: List of dicts with ``product_id``, ``quantity`` and optionally
            ``size`` and ``color``. When empty and ``from_cart`` is set, the
            lines are taken from the shopper's cart.
        payment_method: One of ``PaymentMethod`` values.
        shipping_address: Dict matching ``ShippingAddress``.
        from_cart: Delete the shopper's cart once the order is persisted.

    Returns:
        The persisted ``Order``.

    Raises:
        ValidationError: malformed items, payment method or address.
        ObjectNotFoundError: any product id is unknown. Nothing is debited.
        InsufficientStock: a line could not be debited. Earlier lines are
            released and no order is persisted.
    """
    if not items and from_cart:
        items = _items_from_cart(user_id)
    items = _normalize_items(items)
    _validate_checkout(payment_method, shipping_address)

    # Every product must exist before any stock moves
    product_repo = current_domain.repository_for(Product)
    products = {item["product_id"]: product_repo.get(item["product_id"]) for item in items}

    reserved = []
    try:
        for item in items:
            stock.reserve(item["product_id"], item["quantity"])
            reserved.append((item["product_id"], item["quantity"]))

        lines = [
            {
                "product_id": item["product_id"],
                "product_name": products[item["product_id"]].name,
                "quantity": item["quantity"],
                "unit_price": products[item["product_id"]].price,
                "size": item["size"],
                "color": item["color"],
            }
            for item in items
        ]
        order_id = current_domain.process(
            RecordOrder(
                user_id=str(user_id),
                lines=json.dumps(lines),
                payment_method=payment_method,
                shipping_address=json.dumps(shipping_address),
                discount=discount or 0.0,
                notes=notes,
            ),
            asynchronous=False,
        )
    except Exception as exc:
        _compensate(reserved, reason=type(exc).__name__)
        raise

    order = current_domain.repository_for(Order).get(order_id)
    logger.info(
        "Order placed",
        order_id=str(order.id),
        order_number=order.order_number,
        user_id=str(user_id),
        lines=len(items),
        grand_total=order.grand_total,
    )

    if from_cart:
        with best_effort("clear_cart_after_order", user_id=str(user_id), order_id=str(order.id)):
            current_domain.process(ClearCart(user_id=str(user_id)), asynchronous=False)

    record_lead_activity(user_id, LeadActivity.PLACE_ORDER)
    return order


def cancel_order(order_id, requester_id, as_admin=False):
    """Cancel an order and credit its lines back to the stock ledger.

    Raises:
        ObjectNotFoundError: unknown order.
        Forbidden: the requester neither owns the order nor acts as admin.
        InvalidState: the order is delivered or already cancelled.
    """
    stock_lines = current_domain.process(
        CancelOrder(order_id=str(order_id), requester_id=requester_id, as_admin=as_admin),
        asynchronous=False,
    )

    for product_id, quantity in stock_lines:
        try:
            stock.release(product_id, quantity)
        except ObjectNotFoundError:
            logger.warning(
                "Skipped stock release for missing product",
                order_id=str(order_id),
                product_id=product_id,
                quantity=quantity,
            )
        except Exception as exc:
            logger.warning(
                "Best-effort operation failed",
                operation="stock_release_on_cancel",
                order_id=str(order_id),
                product_id=product_id,
                quantity=quantity,
                error=str(exc),
                error_type=type(exc).__name__,
                exc_info=True,
            )

    return current_domain.repository_for(Order).get(order_id)


def update_order_status(order_id, status, tracking_number=None):
    """Administrative status change. Moving to ``cancelled`` credits stock."""
    if status == OrderStatus.CANCELLED.value:
        return cancel_order(order_id, requester_id=None, as_admin=True)

    current_domain.process(
        UpdateOrderStatus(order_id=str(order_id), status=status, tracking_number=tracking_number),
        asynchronous=False,
    )
    return current_domain.repository_for(Order).get(order_id)


def update_order_payment(order_id, requester_id, payment_result):
    """Attach a payment result. Only the owner may pay for an order."""
    current_domain.process(
        RecordOrderPayment(
            order_id=str(order_id),
            requester_id=str(requester_id),
            payment_result=json.dumps(payment_result or {}),
        ),
        asynchronous=False,
    )
    return current_domain.repository_for(Order).get(order_id)


def delete_order(order_id):
    current_domain.process(DeleteOrder(order_id=str(order_id)), asynchronous=False)


def get_order(order_id, requester_id, as_admin=False):
    order = current_domain.repository_for(Order).get(order_id)
    if not as_admin and not order.owned_by(requester_id):
        raise Forbidden("Not authorized to view this order")
    return order
