"""Repository for the Order aggregate."""

import math

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.repository(part_of=Order)
class OrderRepository:
    def for_user(self, user_id) -> list[Order]:
        """All orders placed by a user, newest first."""
        records = self._dao.query.filter(user_id=str(user_id)).order_by("-created_at").limit(None).all().items
        return [self.get(record.id) for record in records]

    def listing(self, status=None, page=1, limit=10):
        """One page of orders, newest first, optionally filtered by status.

        Returns a dict with ``orders``, ``page``, ``pages`` and ``total``.
        """
        query = self._dao.query
        if status:
            query = query.filter(status=status)

        page = max(page, 1)
        limit = max(limit, 1)
        result = query.order_by("-created_at").offset((page - 1) * limit).limit(limit).all()
        return {
            "orders": [self.get(record.id) for record in result.items],
            "page": page,
            "pages": math.ceil(result.total / limit),
            "total": result.total,
        }
