"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands. Quantities are plain ints here so the domain,
not the schema, decides what a bad quantity is.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
class AddProductRequest(BaseModel):
    name: str
    price: float = Field(ge=0)
    available_quantity: int = Field(ge=0, default=0)
    description: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Linen Shirt",
                    "price": 39.0,
                    "available_quantity": 25,
                    "description": "Relaxed fit, stone washed",
                }
            ]
        }
    }


class ChangePriceRequest(BaseModel):
    price: float = Field(ge=0)


class ProductIdResponse(BaseModel):
    product_id: str


class ProductResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    price: float
    available_quantity: int
    average_rating: float
    rating_count: int


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddCartLineRequest(BaseModel):
    product_id: str
    quantity: int = 1
    size: str | None = None
    color: str | None = None


class UpdateCartLineRequest(BaseModel):
    quantity: int


class CartLineResponse(BaseModel):
    id: str
    product_id: str
    quantity: int
    price: float
    size: str | None = None
    color: str | None = None


class CartResponse(BaseModel):
    id: str | None = None
    user_id: str
    lines: list[CartLineResponse] = []
    total_price: float = 0.0


class AbandonedCartsRequest(BaseModel):
    idle_threshold_hours: int | None = Field(ge=0, default=None)


class AbandonedCartsResponse(BaseModel):
    flagged_users: list[str]


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class ShippingAddressSchema(BaseModel):
    full_name: str
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    postal_code: str
    country: str
    phone: str


class OrderItemSchema(BaseModel):
    product_id: str
    quantity: int
    size: str | None = None
    color: str | None = None


class PlaceOrderRequest(BaseModel):
    items: list[OrderItemSchema] = []
    payment_method: str
    shipping_address: ShippingAddressSchema
    from_cart: bool = False
    discount: float = Field(ge=0, default=0.0)
    notes: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"product_id": "prod-001", "quantity": 2}],
                    "payment_method": "credit_card",
                    "shipping_address": {
                        "full_name": "Asha Rao",
                        "address_line1": "12 Lake View Road",
                        "city": "Pune",
                        "state": "MH",
                        "postal_code": "411001",
                        "country": "IN",
                        "phone": "+91-9800000000",
                    },
                    "from_cart": False,
                }
            ]
        }
    }


class PaymentResultSchema(BaseModel):
    id: str | None = None
    status: str | None = None
    update_time: str | None = None
    email_address: str | None = None


class PayOrderRequest(BaseModel):
    payment_result: PaymentResultSchema = PaymentResultSchema()


class UpdateOrderStatusRequest(BaseModel):
    status: str
    tracking_number: str | None = None


class OrderLineResponse(BaseModel):
    id: str
    product_id: str
    product_name: str
    quantity: int
    unit_price: float
    size: str | None = None
    color: str | None = None


class OrderResponse(BaseModel):
    id: str
    order_number: str
    user_id: str
    lines: list[OrderLineResponse]
    payment_method: str
    shipping_address: ShippingAddressSchema
    total_price: float
    tax: float
    shipping_fee: float
    discount: float
    grand_total: float
    status: str
    is_paid: bool
    paid_at: datetime | None = None
    payment_result: PaymentResultSchema | None = None
    is_delivered: bool
    delivered_at: datetime | None = None
    tracking_number: str | None = None
    notes: str | None = None
    created_at: datetime | None = None


class OrderPageResponse(BaseModel):
    orders: list[OrderResponse]
    page: int
    pages: int
    total: int


# ---------------------------------------------------------------------------
# Shoppers
# ---------------------------------------------------------------------------
class RegisterShopperRequest(BaseModel):
    name: str
    email: str
    phone: str | None = None
    source: str = "direct"


class ShopperResponse(BaseModel):
    id: str
    name: str
    email: str
    phone: str | None = None
    source: str
    role: str
    score: int


# ---------------------------------------------------------------------------
# Wishlist
# ---------------------------------------------------------------------------
class WishlistRequest(BaseModel):
    product_id: str


class WishlistResponse(BaseModel):
    user_id: str
    product_ids: list[str] = []


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------
class SubmitReviewRequest(BaseModel):
    product_id: str
    rating: int
    comment: str | None = None


class EditReviewRequest(BaseModel):
    rating: int | None = None
    comment: str | None = None


class ModerateReviewRequest(BaseModel):
    action: str  # "approve" or "reject"


class ReviewIdResponse(BaseModel):
    review_id: str


class ReviewResponse(BaseModel):
    id: str
    product_id: str
    user_id: str
    rating: int
    comment: str | None = None
    status: str
    created_at: datetime | None = None
