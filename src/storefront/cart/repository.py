"""Repository for the Cart aggregate."""

from storefront.cart.cart import Cart
from storefront.domain import storefront


@storefront.repository(part_of=Cart)
class CartRepository:
    def for_user(self, user_id) -> Cart | None:
        """The user's cart with its lines loaded, or None if they have none."""
        record = self._dao.query.filter(user_id=str(user_id)).all().first
        if record is None:
            return None
        return self.get(record.id)
