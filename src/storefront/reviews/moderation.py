"""ModerateReview: an administrator approves or rejects a review."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.reviews.rating import recompute_product_rating
from storefront.reviews.review import ModerationAction, Review


@storefront.command(part_of="Review")
class ModerateReview:
    review_id = Identifier(required=True)
    moderator_id = Identifier(required=True)
    action = String(required=True, choices=ModerationAction)


@storefront.command_handler(part_of=Review)
class ModerateReviewHandler:
    @handle(ModerateReview)
    def moderate_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        review.moderate(command.action, moderator_id=command.moderator_id)
        repo.add(review)

        recompute_product_rating(review.product_id, changed=review)
