"""Review aggregate: one shopper's rating of one product.

State Machine (3 states):
    PENDING → APPROVED | REJECTED
    APPROVED | REJECTED → PENDING (edited while moderation is on)
    APPROVED ⇄ REJECTED (re-moderation)

Whether a review counts towards its product's rating depends on the domain's
moderation mode; see ``storefront.reviews.rating``.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text, ValueObject

from storefront.domain import storefront
from storefront.reviews.events import ReviewEdited, ReviewModerated, ReviewSubmitted


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ReviewStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ModerationAction(Enum):
    APPROVE = "approve"
    REJECT = "reject"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Review")
class Rating:
    """A star rating from 1 to 5."""

    score = Integer(required=True)

    @invariant.post
    def score_must_be_in_range(self):
        if self.score is not None and (self.score < 1 or self.score > 5):
            raise ValidationError({"rating": ["Rating must be between 1 and 5"]})


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Review:
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = ValueObject(Rating, required=True)
    comment = Text()
    status = String(choices=ReviewStatus, default=ReviewStatus.PENDING.value)
    moderated_by = Identifier()
    moderated_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def submit(cls, product_id, user_id, rating, comment=None, requires_moderation=True):
        """New review. Without moderation it is approved on arrival."""
        now = datetime.now(UTC)
        status = ReviewStatus.PENDING if requires_moderation else ReviewStatus.APPROVED
        review = cls(
            product_id=product_id,
            user_id=user_id,
            rating=Rating(score=rating),
            comment=comment,
            status=status.value,
            created_at=now,
            updated_at=now,
        )
        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                product_id=str(product_id),
                user_id=str(user_id),
                rating=rating,
                status=review.status,
                submitted_at=now,
            )
        )
        return review

    def score(self):
        return self.rating.score

    def counts_towards_rating(self, moderated):
        """Whether this review is part of its product's rating."""
        return not moderated or self.status == ReviewStatus.APPROVED.value

    def edit(self, rating=None, comment=None, requires_moderation=True):
        """Change rating and/or comment. A moderated review goes back to pending."""
        now = datetime.now(UTC)
        if rating is not None:
            self.rating = Rating(score=rating)
        if comment is not None:
            self.comment = comment
        if requires_moderation:
            self.status = ReviewStatus.PENDING.value
            self.moderated_by = None
            self.moderated_at = None
        self.updated_at = now

        self.raise_(
            ReviewEdited(
                review_id=str(self.id),
                product_id=str(self.product_id),
                rating=self.rating.score,
                status=self.status,
                edited_at=now,
            )
        )

    def moderate(self, action, moderator_id):
        try:
            action = ModerationAction(action)
        except ValueError:
            raise ValidationError({"action": [f"Invalid moderation action: {action}"]})

        target = ReviewStatus.APPROVED if action == ModerationAction.APPROVE else ReviewStatus.REJECTED
        now = datetime.now(UTC)
        self.status = target.value
        self.moderated_by = moderator_id
        self.moderated_at = now
        self.updated_at = now

        self.raise_(
            ReviewModerated(
                review_id=str(self.id),
                product_id=str(self.product_id),
                moderator_id=str(moderator_id),
                status=target.value,
                moderated_at=now,
            )
        )
