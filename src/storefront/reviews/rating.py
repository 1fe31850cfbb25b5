"""Product rating aggregator.

Every review handler calls ``recompute_product_rating`` inside its own Unit
of Work, so the product's ``average_rating`` and ``rating_count`` commit
together with the review mutation. The review set is re-read on each write
(O(n) in the product's review count).

The mutated review is passed in explicitly: a review added or removed in the
current Unit of Work is not yet visible to a fresh query.
"""

import structlog
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.reviews.review import Review

logger = structlog.get_logger(__name__)


def moderation_enabled():
    return bool(getattr(current_domain, "REVIEW_MODERATION", True))


def average_of(ratings):
    """Mean of ``ratings`` and their count. (0.0, 0) when empty."""
    if not ratings:
        return 0.0, 0
    return sum(ratings) / len(ratings), len(ratings)


def recompute_product_rating(product_id, changed=None, removed_id=None):
    """Recompute and store a product's rating from its current reviews.

    Args:
        product_id: The product whose rating is recomputed.
        changed: A review created or updated in the current Unit of Work.
        removed_id: Id of a review deleted in the current Unit of Work.
    """
    records = (
        current_domain.repository_for(Review)._dao.query.filter(product_id=str(product_id)).limit(None).all().items
    )
    reviews = {str(review.id): review for review in records}
    if changed is not None:
        reviews[str(changed.id)] = changed
    if removed_id is not None:
        reviews.pop(str(removed_id), None)

    moderated = moderation_enabled()
    ratings = [review.score() for review in reviews.values() if review.counts_towards_rating(moderated)]
    average, count = average_of(ratings)

    product_repo = current_domain.repository_for(Product)
    product = product_repo.get(product_id)
    product.record_rating(average, count)
    product_repo.add(product)

    logger.info(
        "Product rating recalculated",
        product_id=str(product_id),
        average_rating=average,
        rating_count=count,
        moderated=moderated,
    )
    return average, count
