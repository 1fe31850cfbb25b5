"""Application tests for reviews and the product rating they maintain."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import Forbidden
from storefront.reviews.editing import EditReview
from storefront.reviews.moderation import ModerateReview
from storefront.reviews.removal import DeleteReview
from storefront.reviews.review import Review, ReviewStatus
from storefront.reviews.submission import SubmitReview


def _submit(product_id, user_id, rating, comment=None):
    return current_domain.process(
        SubmitReview(product_id=product_id, user_id=user_id, rating=rating, comment=comment),
        asynchronous=False,
    )


def _moderate(review_id, action="approve"):
    current_domain.process(
        ModerateReview(review_id=review_id, moderator_id="admin-1", action=action),
        asynchronous=False,
    )


def _rating(product_id):
    product = current_domain.repository_for(Product).get(product_id)
    return product.average_rating, product.rating_count


class TestModeratedRatings:
    def test_approved_reviews_average(self, make_product):
        product_id = make_product()
        review_ids = [_submit(product_id, f"user-{score}", score) for score in (5, 3, 4)]
        for review_id in review_ids:
            _moderate(review_id)

        assert _rating(product_id) == (4.0, 3)

        current_domain.process(DeleteReview(review_id=review_ids[1], requester_id="user-3"), asynchronous=False)

        assert _rating(product_id) == (4.5, 2)

    def test_pending_review_does_not_count(self, make_product):
        product_id = make_product()
        review_id = _submit(product_id, "user-1", 4)

        assert current_domain.repository_for(Review).get(review_id).status == ReviewStatus.PENDING.value
        assert _rating(product_id) == (0.0, 0)

    def test_rejected_review_does_not_count(self, make_product):
        product_id = make_product()
        kept = _submit(product_id, "user-1", 5)
        rejected = _submit(product_id, "user-2", 1)
        _moderate(kept)
        _moderate(rejected, action="reject")

        assert _rating(product_id) == (5.0, 1)

    def test_edit_sends_review_back_to_moderation(self, make_product):
        product_id = make_product()
        review_id = _submit(product_id, "user-1", 2)
        _moderate(review_id)
        assert _rating(product_id) == (2.0, 1)

        current_domain.process(EditReview(review_id=review_id, user_id="user-1", rating=5), asynchronous=False)
        assert _rating(product_id) == (0.0, 0)

        _moderate(review_id)
        assert _rating(product_id) == (5.0, 1)

    def test_deleting_last_review_resets_rating(self, make_product):
        product_id = make_product()
        review_id = _submit(product_id, "user-1", 4)
        _moderate(review_id)

        current_domain.process(DeleteReview(review_id=review_id, requester_id="user-1"), asynchronous=False)

        assert _rating(product_id) == (0.0, 0)

    def test_invalid_moderation_action(self, make_product):
        review_id = _submit(make_product(), "user-1", 4)
        with pytest.raises(ValidationError):
            _moderate(review_id, action="shrug")


class TestUnmoderatedRatings:
    @pytest.fixture(autouse=True)
    def _moderation_off(self, monkeypatch):
        monkeypatch.setattr(storefront, "REVIEW_MODERATION", False)

    def test_reviews_count_immediately(self, make_product):
        product_id = make_product()
        for score in (5, 3, 4):
            _submit(product_id, f"user-{score}", score)

        assert _rating(product_id) == (4.0, 3)

    def test_edit_recomputes(self, make_product):
        product_id = make_product()
        review_id = _submit(product_id, "user-1", 1)
        _submit(product_id, "user-2", 5)

        current_domain.process(EditReview(review_id=review_id, user_id="user-1", rating=4), asynchronous=False)

        assert _rating(product_id) == (4.5, 2)

    def test_average_is_the_exact_mean(self, make_product):
        product_id = make_product()
        for user, score in (("a", 5), ("b", 4), ("c", 4)):
            _submit(product_id, user, score)

        average, count = _rating(product_id)
        assert average == pytest.approx(13 / 3)
        assert average != 4.33
        assert count == 3


class TestReviewRules:
    def test_one_review_per_shopper_and_product(self, make_product):
        product_id = make_product()
        _submit(product_id, "user-1", 4)
        with pytest.raises(ValidationError) as exc:
            _submit(product_id, "user-1", 5)
        assert exc.value.messages == {"review": ["You have already reviewed this product"]}

    def test_same_shopper_may_review_other_products(self, make_product):
        _submit(make_product(name="Tote"), "user-1", 4)
        _submit(make_product(name="Mug"), "user-1", 4)

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_out_of_range(self, make_product, rating):
        with pytest.raises(ValidationError):
            _submit(make_product(), "user-1", rating)

    def test_unknown_product(self):
        with pytest.raises(ObjectNotFoundError):
            _submit("ghost", "user-1", 4)

    def test_only_author_may_edit(self, make_product):
        review_id = _submit(make_product(), "user-1", 4)
        with pytest.raises(Forbidden):
            current_domain.process(EditReview(review_id=review_id, user_id="user-2", rating=1), asynchronous=False)

    def test_only_author_or_admin_may_delete(self, make_product):
        product_id = make_product()
        review_id = _submit(product_id, "user-1", 4)

        with pytest.raises(Forbidden):
            current_domain.process(DeleteReview(review_id=review_id, requester_id="user-2"), asynchronous=False)

        current_domain.process(
            DeleteReview(review_id=review_id, requester_id="admin-1", as_admin=True),
            asynchronous=False,
        )
        assert current_domain.repository_for(Review).for_product(product_id) == []
