"""Tests for lead-score deltas and the Shopper aggregate."""

import pytest
from storefront.leads.events import LeadScoreAdjusted
from storefront.leads.scoring import LeadActivity, score_delta
from storefront.leads.shopper import LeadSource, Shopper


class TestScoreDelta:
    @pytest.mark.parametrize(
        "activity,delta",
        [
            ("login", 2),
            ("view_product", 3),
            ("add_to_cart", 5),
            ("add_to_wishlist", 3),
            ("place_order", 10),
            ("abandoned_cart", -5),
            ("no_purchase_after_views", -5),
        ],
    )
    def test_activity_deltas(self, activity, delta):
        assert score_delta(activity) == delta

    def test_register_from_referral(self):
        assert score_delta("register", LeadSource.REFERRAL.value) == 10

    @pytest.mark.parametrize("source", ["web", "direct", "google", None])
    def test_register_from_other_sources(self, source):
        assert score_delta("register", source) == 5

    def test_accepts_enum_member(self):
        assert score_delta(LeadActivity.PLACE_ORDER) == 10

    def test_unknown_activity(self):
        assert score_delta("shared_on_social") is None


class TestShopper:
    def test_register_normalizes_email(self):
        shopper = Shopper.register(name="  Asha Rao ", email=" Asha@Example.COM ")
        assert shopper.name == "Asha Rao"
        assert shopper.email == "asha@example.com"
        assert shopper.score == 0
        assert shopper.source == LeadSource.DIRECT.value

    def test_adjust_score(self):
        shopper = Shopper.register(name="Asha", email="asha@example.com")
        shopper.adjust_score("place_order", 10)
        assert shopper.score == 10
        event = shopper._events[-1]
        assert isinstance(event, LeadScoreAdjusted)
        assert event.delta == 10

    def test_score_may_go_negative(self):
        shopper = Shopper.register(name="Asha", email="asha@example.com")
        shopper.adjust_score("abandoned_cart", -5)
        assert shopper.score == -5

    def test_record_login(self):
        shopper = Shopper.register(name="Asha", email="asha@example.com")
        shopper.record_login()
        assert shopper.last_login_at is not None
