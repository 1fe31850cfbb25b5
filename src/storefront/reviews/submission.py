"""SubmitReview: one review per shopper per product."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.reviews.rating import moderation_enabled, recompute_product_rating
from storefront.reviews.review import Review


@storefront.command(part_of="Review")
class SubmitReview:
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(required=True)
    comment = Text()


@storefront.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        # Raises ObjectNotFoundError for an unknown product
        current_domain.repository_for(Product).get(command.product_id)

        repo = current_domain.repository_for(Review)
        existing = repo._dao.query.filter(
            user_id=str(command.user_id),
            product_id=str(command.product_id),
        ).all()
        if existing.items:
            raise ValidationError({"review": ["You have already reviewed this product"]})

        review = Review.submit(
            product_id=command.product_id,
            user_id=command.user_id,
            rating=command.rating,
            comment=command.comment,
            requires_moderation=moderation_enabled(),
        )
        repo.add(review)

        recompute_product_rating(command.product_id, changed=review)
        return str(review.id)
