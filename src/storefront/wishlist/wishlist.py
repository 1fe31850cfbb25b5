"""Wishlist aggregate: the set of products a shopper is keeping an eye on."""

import json
from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Text

from storefront.domain import storefront
from storefront.wishlist.events import WishlistProductAdded, WishlistProductRemoved


@storefront.aggregate
class Wishlist:
    user_id = Identifier(required=True, unique=True)
    product_ids = Text(default="[]")  # JSON array of product ids, in insertion order
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, product_ids=json.dumps([]), created_at=now, updated_at=now)

    def products(self):
        return json.loads(self.product_ids or "[]")

    def add_product(self, product_id):
        products = self.products()
        if str(product_id) in products:
            raise ValidationError({"product_id": ["Product already in wishlist"]})

        products.append(str(product_id))
        self.product_ids = json.dumps(products)
        self.updated_at = datetime.now(UTC)

        self.raise_(WishlistProductAdded(wishlist_id=str(self.id), user_id=str(self.user_id), product_id=str(product_id)))

    def remove_product(self, product_id):
        products = self.products()
        if str(product_id) not in products:
            raise ValidationError({"product_id": ["Product not in wishlist"]})

        products.remove(str(product_id))
        self.product_ids = json.dumps(products)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            WishlistProductRemoved(wishlist_id=str(self.id), user_id=str(self.user_id), product_id=str(product_id))
        )
