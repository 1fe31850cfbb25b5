"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the domain's validation rules
and match the exact field names expected by the API's Pydantic request
schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()

PAYMENT_METHODS = ["credit_card", "paypal", "cod", "upi"]
LEAD_SOURCES = ["web", "email", "social_media", "referral", "direct", "google"]


def shopper_data() -> dict:
    local = fake.user_name()[:20]
    return {
        "name": fake.name(),
        "email": f"{local}.{uuid.uuid4().hex[:6]}@{fake.free_email_domain()}",
        "phone": fake.phone_number()[:30],
        "source": random.choice(LEAD_SOURCES),
    }


def product_data(stock: int | None = None) -> dict:
    return {
        "name": f"{fake.color_name()} {fake.word().title()} {uuid.uuid4().hex[:4]}",
        "price": round(random.uniform(5, 250), 2),
        "available_quantity": stock if stock is not None else random.randint(50, 500),
        "description": fake.sentence(),
    }


def shipping_address() -> dict:
    return {
        "full_name": fake.name(),
        "address_line1": fake.street_address(),
        "city": fake.city(),
        "state": fake.state_abbr(),
        "postal_code": fake.postcode(),
        "country": "US",
        "phone": fake.phone_number()[:30],
    }


def checkout_data(from_cart: bool = True, items: list[dict] | None = None) -> dict:
    return {
        "items": items or [],
        "payment_method": random.choice(PAYMENT_METHODS),
        "shipping_address": shipping_address(),
        "from_cart": from_cart,
    }


def payment_result() -> dict:
    return {
        "payment_result": {
            "id": f"PAY-{uuid.uuid4().hex[:12].upper()}",
            "status": "COMPLETED",
            "update_time": fake.iso8601(),
            "email_address": fake.email(),
        }
    }
