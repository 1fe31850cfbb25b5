"""Repository for the Review aggregate."""

from storefront.domain import storefront
from storefront.reviews.review import Review


@storefront.repository(part_of=Review)
class ReviewRepository:
    def for_product(self, product_id, approved_only=False) -> list[Review]:
        """A product's reviews, newest first."""
        query = self._dao.query.filter(product_id=str(product_id))
        if approved_only:
            query = query.filter(status="approved")
        return list(query.order_by("-created_at").limit(None).all().items)
