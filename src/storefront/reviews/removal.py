"""DeleteReview: the author or an administrator removes a review."""

from protean import handle
from protean.fields import Boolean, Identifier
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.errors import Forbidden
from storefront.reviews.rating import recompute_product_rating
from storefront.reviews.review import Review


@storefront.command(part_of="Review")
class DeleteReview:
    review_id = Identifier(required=True)
    requester_id = Identifier()
    as_admin = Boolean(default=False)


@storefront.command_handler(part_of=Review)
class DeleteReviewHandler:
    @handle(DeleteReview)
    def delete_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        if not command.as_admin and str(review.user_id) != str(command.requester_id):
            raise Forbidden("Not authorized to delete this review")

        product_id = review.product_id
        repo._dao.delete(review)
        logger.info("Review deleted", review_id=str(command.review_id), product_id=str(product_id))

        recompute_product_rating(product_id, removed_id=command.review_id)
