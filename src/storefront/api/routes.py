"""FastAPI routes for the Storefront: products, cart, orders, shoppers, wishlist and reviews.

Every write goes through a command or the fulfillment engine. Lead-scoring
activities are handed off after the primary operation has returned and never
change the response.
"""

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from storefront.api.identity import Requester, admin_requester, current_requester, optional_requester
from storefront.api.schemas import (
    AbandonedCartsRequest,
    AbandonedCartsResponse,
    AddCartLineRequest,
    AddProductRequest,
    CartLineResponse,
    CartResponse,
    ChangePriceRequest,
    EditReviewRequest,
    ModerateReviewRequest,
    OrderLineResponse,
    OrderPageResponse,
    OrderResponse,
    PaymentResultSchema,
    PayOrderRequest,
    PlaceOrderRequest,
    ProductIdResponse,
    ProductResponse,
    RegisterShopperRequest,
    ReviewIdResponse,
    ReviewResponse,
    ShippingAddressSchema,
    ShopperResponse,
    StatusResponse,
    SubmitReviewRequest,
    UpdateCartLineRequest,
    UpdateOrderStatusRequest,
    WishlistRequest,
    WishlistResponse,
)
from storefront.cart.abandonment import flag_abandoned_carts
from storefront.cart.cart import Cart
from storefront.cart.items import AddCartLine, ClearCart, RemoveCartLine, SetCartLineQuantity
from storefront.catalogue.management import AddProduct, ChangeProductPrice, RemoveProduct
from storefront.catalogue.product import Product
from storefront.errors import Forbidden
from storefront.leads.registration import LogIn, RegisterShopper
from storefront.leads.scoring import LeadActivity, record_lead_activity
from storefront.leads.shopper import Shopper
from storefront.order import fulfillment
from storefront.order.order import Order
from storefront.reviews.editing import EditReview
from storefront.reviews.moderation import ModerateReview
from storefront.reviews.removal import DeleteReview
from storefront.reviews.review import Review
from storefront.reviews.submission import SubmitReview
from storefront.wishlist.management import AddToWishlist, RemoveFromWishlist
from storefront.wishlist.wishlist import Wishlist


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------
def _product_view(product: Product) -> ProductResponse:
    return ProductResponse(
        id=str(product.id),
        name=product.name,
        description=product.description,
        price=product.price,
        available_quantity=product.available_quantity,
        average_rating=product.average_rating or 0.0,
        rating_count=product.rating_count or 0,
    )


def _cart_view(cart: Cart | None, user_id: str) -> CartResponse:
    if cart is None:
        return CartResponse(user_id=user_id)
    return CartResponse(
        id=str(cart.id),
        user_id=str(cart.user_id),
        lines=[
            CartLineResponse(
                id=str(line.id),
                product_id=str(line.product_id),
                quantity=line.quantity,
                price=line.price,
                size=line.size,
                color=line.color,
            )
            for line in cart.lines
        ],
        total_price=cart.total_price(),
    )


def _user_cart(user_id: str) -> CartResponse:
    return _cart_view(current_domain.repository_for(Cart).for_user(user_id), user_id)


def _order_view(order: Order) -> OrderResponse:
    payment_result = None
    if order.payment_result is not None:
        payment_result = PaymentResultSchema(
            id=order.payment_result.payment_id,
            status=order.payment_result.status,
            update_time=order.payment_result.update_time,
            email_address=order.payment_result.email_address,
        )

    address = order.shipping_address
    return OrderResponse(
        id=str(order.id),
        order_number=order.order_number,
        user_id=str(order.user_id),
        lines=[
            OrderLineResponse(
                id=str(line.id),
                product_id=str(line.product_id),
                product_name=line.product_name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                size=line.size,
                color=line.color,
            )
            for line in order.lines
        ],
        payment_method=order.payment_method,
        shipping_address=ShippingAddressSchema(
            full_name=address.full_name,
            address_line1=address.address_line1,
            address_line2=address.address_line2,
            city=address.city,
            state=address.state,
            postal_code=address.postal_code,
            country=address.country,
            phone=address.phone,
        ),
        total_price=order.total_price,
        tax=order.tax,
        shipping_fee=order.shipping_fee,
        discount=order.discount,
        grand_total=order.grand_total,
        status=order.status,
        is_paid=order.is_paid,
        paid_at=order.paid_at,
        payment_result=payment_result,
        is_delivered=order.is_delivered,
        delivered_at=order.delivered_at,
        tracking_number=order.tracking_number,
        notes=order.notes,
        created_at=order.created_at,
    )


def _shopper_view(shopper: Shopper) -> ShopperResponse:
    return ShopperResponse(
        id=str(shopper.id),
        name=shopper.name,
        email=shopper.email,
        phone=shopper.phone,
        source=shopper.source,
        role=shopper.role,
        score=shopper.score,
    )


def _review_view(review: Review) -> ReviewResponse:
    return ReviewResponse(
        id=str(review.id),
        product_id=str(review.product_id),
        user_id=str(review.user_id),
        rating=review.score(),
        comment=review.comment,
        status=review.status,
        created_at=review.created_at,
    )


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def add_product(body: AddProductRequest, admin: Requester = Depends(admin_requester)) -> ProductIdResponse:
    command = AddProduct(
        name=body.name,
        price=body.price,
        available_quantity=body.available_quantity,
        description=body.description,
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@product_router.put("/{product_id}/price", response_model=StatusResponse)
async def change_product_price(
    product_id: str, body: ChangePriceRequest, admin: Requester = Depends(admin_requester)
) -> StatusResponse:
    current_domain.process(ChangeProductPrice(product_id=product_id, price=body.price), asynchronous=False)
    return StatusResponse()


@product_router.delete("/{product_id}", response_model=StatusResponse)
async def remove_product(product_id: str, admin: Requester = Depends(admin_requester)) -> StatusResponse:
    current_domain.process(RemoveProduct(product_id=product_id), asynchronous=False)
    return StatusResponse(status="removed")


@product_router.get("/{product_id}", response_model=ProductResponse)
async def view_product(product_id: str, requester: Requester | None = Depends(optional_requester)) -> ProductResponse:
    product = current_domain.repository_for(Product).get(product_id)
    if requester is not None:
        record_lead_activity(requester.user_id, LeadActivity.VIEW_PRODUCT)
    return _product_view(product)


@product_router.get("/{product_id}/reviews", response_model=list[ReviewResponse])
async def product_reviews(product_id: str) -> list[ReviewResponse]:
    current_domain.repository_for(Product).get(product_id)
    reviews = current_domain.repository_for(Review).for_product(product_id)
    return [_review_view(review) for review in reviews]


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(requester: Requester = Depends(current_requester)) -> CartResponse:
    return _user_cart(requester.user_id)


@cart_router.post("", response_model=CartResponse)
async def add_cart_line(body: AddCartLineRequest, requester: Requester = Depends(current_requester)) -> CartResponse:
    command = AddCartLine(
        user_id=requester.user_id,
        product_id=body.product_id,
        quantity=body.quantity,
        size=body.size,
        color=body.color,
    )
    current_domain.process(command, asynchronous=False)
    record_lead_activity(requester.user_id, LeadActivity.ADD_TO_CART)
    return _user_cart(requester.user_id)


@cart_router.put("/{line_id}", response_model=CartResponse)
async def set_cart_line_quantity(
    line_id: str, body: UpdateCartLineRequest, requester: Requester = Depends(current_requester)
) -> CartResponse:
    command = SetCartLineQuantity(user_id=requester.user_id, line_id=line_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return _user_cart(requester.user_id)


@cart_router.delete("/{line_id}", response_model=CartResponse)
async def remove_cart_line(line_id: str, requester: Requester = Depends(current_requester)) -> CartResponse:
    current_domain.process(RemoveCartLine(user_id=requester.user_id, line_id=line_id), asynchronous=False)
    return _user_cart(requester.user_id)


@cart_router.delete("", response_model=StatusResponse)
async def clear_cart(requester: Requester = Depends(current_requester)) -> StatusResponse:
    current_domain.process(ClearCart(user_id=requester.user_id), asynchronous=False)
    return StatusResponse(status="cleared")


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def place_order(body: PlaceOrderRequest, requester: Requester = Depends(current_requester)) -> OrderResponse:
    order = fulfillment.place_order(
        user_id=requester.user_id,
        items=[item.model_dump() for item in body.items],
        payment_method=body.payment_method,
        shipping_address=body.shipping_address.model_dump(),
        from_cart=body.from_cart,
        discount=body.discount,
        notes=body.notes,
    )
    return _order_view(order)


@order_router.get("", response_model=list[OrderResponse])
async def my_orders(requester: Requester = Depends(current_requester)) -> list[OrderResponse]:
    orders = current_domain.repository_for(Order).for_user(requester.user_id)
    return [_order_view(order) for order in orders]


# Admin routes are declared before ``/{order_id}`` so "admin" is never read as an id
@order_router.get("/admin", response_model=OrderPageResponse)
async def list_orders(
    status: str | None = None,
    page: int = 1,
    limit: int = Query(default=10, ge=1),
    admin: Requester = Depends(admin_requester),
) -> OrderPageResponse:
    listing = current_domain.repository_for(Order).listing(status=status, page=page, limit=limit)
    return OrderPageResponse(
        orders=[_order_view(order) for order in listing["orders"]],
        page=listing["page"],
        pages=listing["pages"],
        total=listing["total"],
    )


@order_router.put("/admin/{order_id}", response_model=OrderResponse)
async def update_order_status(
    order_id: str, body: UpdateOrderStatusRequest, admin: Requester = Depends(admin_requester)
) -> OrderResponse:
    order = fulfillment.update_order_status(order_id, body.status, tracking_number=body.tracking_number)
    return _order_view(order)


@order_router.delete("/admin/{order_id}", response_model=StatusResponse)
async def delete_order(order_id: str, admin: Requester = Depends(admin_requester)) -> StatusResponse:
    fulfillment.delete_order(order_id)
    return StatusResponse(status="deleted")


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, requester: Requester = Depends(current_requester)) -> OrderResponse:
    order = fulfillment.get_order(order_id, requester.user_id, as_admin=requester.is_admin)
    return _order_view(order)


@order_router.put("/{order_id}/pay", response_model=OrderResponse)
async def pay_order(
    order_id: str, body: PayOrderRequest, requester: Requester = Depends(current_requester)
) -> OrderResponse:
    order = fulfillment.update_order_payment(order_id, requester.user_id, body.payment_result.model_dump())
    return _order_view(order)


@order_router.put("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(order_id: str, requester: Requester = Depends(current_requester)) -> OrderResponse:
    order = fulfillment.cancel_order(order_id, requester.user_id)
    return _order_view(order)


# ---------------------------------------------------------------------------
# Shopper Router
# ---------------------------------------------------------------------------
shopper_router = APIRouter(prefix="/shoppers", tags=["shoppers"])


@shopper_router.post("", status_code=201, response_model=ShopperResponse)
async def register_shopper(body: RegisterShopperRequest) -> ShopperResponse:
    command = RegisterShopper(
        name=body.name,
        email=body.email,
        phone=body.phone,
        source=body.source,
    )
    shopper_id = current_domain.process(command, asynchronous=False)
    record_lead_activity(shopper_id, LeadActivity.REGISTER)
    return _shopper_view(current_domain.repository_for(Shopper).get(shopper_id))


@shopper_router.post("/{shopper_id}/login", response_model=ShopperResponse)
async def log_in(shopper_id: str, requester: Requester = Depends(current_requester)) -> ShopperResponse:
    if requester.user_id != shopper_id:
        raise Forbidden("Not authorized to log in as this shopper")
    current_domain.process(LogIn(user_id=shopper_id), asynchronous=False)
    record_lead_activity(shopper_id, LeadActivity.LOGIN)
    return _shopper_view(current_domain.repository_for(Shopper).get(shopper_id))


@shopper_router.get("/{shopper_id}", response_model=ShopperResponse)
async def get_shopper(shopper_id: str, requester: Requester = Depends(current_requester)) -> ShopperResponse:
    if not requester.is_admin and requester.user_id != shopper_id:
        raise Forbidden("Not authorized to view this shopper")
    return _shopper_view(current_domain.repository_for(Shopper).get(shopper_id))


# ---------------------------------------------------------------------------
# Wishlist Router
# ---------------------------------------------------------------------------
wishlist_router = APIRouter(prefix="/wishlist", tags=["wishlist"])


@wishlist_router.get("", response_model=WishlistResponse)
async def get_wishlist(requester: Requester = Depends(current_requester)) -> WishlistResponse:
    wishlist = current_domain.repository_for(Wishlist).for_user(requester.user_id)
    return WishlistResponse(user_id=requester.user_id, product_ids=wishlist.products() if wishlist else [])


@wishlist_router.post("", response_model=WishlistResponse)
async def add_to_wishlist(body: WishlistRequest, requester: Requester = Depends(current_requester)) -> WishlistResponse:
    command = AddToWishlist(user_id=requester.user_id, product_id=body.product_id)
    product_ids = current_domain.process(command, asynchronous=False)
    record_lead_activity(requester.user_id, LeadActivity.ADD_TO_WISHLIST)
    return WishlistResponse(user_id=requester.user_id, product_ids=product_ids)


@wishlist_router.delete("/{product_id}", response_model=WishlistResponse)
async def remove_from_wishlist(
    product_id: str, requester: Requester = Depends(current_requester)
) -> WishlistResponse:
    command = RemoveFromWishlist(user_id=requester.user_id, product_id=product_id)
    product_ids = current_domain.process(command, asynchronous=False)
    return WishlistResponse(user_id=requester.user_id, product_ids=product_ids)


# ---------------------------------------------------------------------------
# Review Router
# ---------------------------------------------------------------------------
review_router = APIRouter(prefix="/reviews", tags=["reviews"])


@review_router.post("", status_code=201, response_model=ReviewIdResponse)
async def submit_review(body: SubmitReviewRequest, requester: Requester = Depends(current_requester)) -> ReviewIdResponse:
    command = SubmitReview(
        product_id=body.product_id,
        user_id=requester.user_id,
        rating=body.rating,
        comment=body.comment,
    )
    result = current_domain.process(command, asynchronous=False)
    return ReviewIdResponse(review_id=result)


@review_router.put("/{review_id}", response_model=StatusResponse)
async def edit_review(
    review_id: str, body: EditReviewRequest, requester: Requester = Depends(current_requester)
) -> StatusResponse:
    command = EditReview(
        review_id=review_id,
        user_id=requester.user_id,
        rating=body.rating,
        comment=body.comment,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@review_router.delete("/{review_id}", response_model=StatusResponse)
async def delete_review(review_id: str, requester: Requester = Depends(current_requester)) -> StatusResponse:
    command = DeleteReview(review_id=review_id, requester_id=requester.user_id, as_admin=requester.is_admin)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="deleted")


@review_router.put("/{review_id}/moderate", response_model=StatusResponse)
async def moderate_review(
    review_id: str, body: ModerateReviewRequest, admin: Requester = Depends(admin_requester)
) -> StatusResponse:
    command = ModerateReview(review_id=review_id, moderator_id=admin.user_id, action=body.action)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Maintenance Router
# ---------------------------------------------------------------------------
maintenance_router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@maintenance_router.post("/abandoned-carts", response_model=AbandonedCartsResponse)
async def detect_abandoned_carts(
    body: AbandonedCartsRequest, admin: Requester = Depends(admin_requester)
) -> AbandonedCartsResponse:
    flagged = flag_abandoned_carts(idle_threshold_hours=body.idle_threshold_hours)
    return AbandonedCartsResponse(flagged_users=flagged)
