"""EditReview: only the author may change a review's rating or comment."""

from protean import handle
from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import Forbidden
from storefront.reviews.rating import moderation_enabled, recompute_product_rating
from storefront.reviews.review import Review


@storefront.command(part_of="Review")
class EditReview:
    review_id = Identifier(required=True)
    user_id = Identifier(required=True)  # Must match the author
    rating = Integer()
    comment = Text()


@storefront.command_handler(part_of=Review)
class EditReviewHandler:
    @handle(EditReview)
    def edit_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        if str(review.user_id) != str(command.user_id):
            raise Forbidden("Only the review author can edit this review")

        review.edit(
            rating=command.rating,
            comment=command.comment,
            requires_moderation=moderation_enabled(),
        )
        repo.add(review)

        recompute_product_rating(review.product_id, changed=review)
