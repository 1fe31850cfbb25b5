"""BDD tests for lead scoring."""

from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when
from storefront.cart.abandonment import flag_abandoned_carts
from storefront.cart.items import AddCartLine
from storefront.leads import scoring
from storefront.leads.registration import LogIn
from storefront.leads.scoring import LeadActivity, record_lead_activity
from storefront.leads.shopper import Shopper
from storefront.order import fulfillment

scenarios("features/lead_scoring.feature")


@pytest.fixture()
def shopper():
    return {"id": None}


def _log_in(shopper_id):
    current_domain.process(LogIn(user_id=shopper_id), asynchronous=False)
    record_lead_activity(shopper_id, LeadActivity.LOGIN)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a shopper registered from "{source}"'))
def registered_shopper(shopper, make_shopper, source):
    shopper["id"] = make_shopper(source=source)
    record_lead_activity(shopper["id"], LeadActivity.REGISTER)


@given("the shopper has logged in")
def has_logged_in(shopper):
    _log_in(shopper["id"])


@given(parsers.cfparse('lead scoring for "{activity}" is failing'))
def scoring_fails(monkeypatch, activity):
    original = scoring.score_delta

    def _flaky(name, source=None):
        if name == activity:
            raise RuntimeError("score store unavailable")
        return original(name, source)

    monkeypatch.setattr(scoring, "score_delta", _flaky)


@given(parsers.cfparse("the shopper left a cart idle for {days:d} days"))
def idle_cart(shopper, make_product, days):
    current_domain.process(
        AddCartLine(user_id=shopper["id"], product_id=make_product(), quantity=1),
        asynchronous=False,
    )
    shopper["as_of"] = datetime.now(UTC) + timedelta(days=days)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the shopper logs in")
def logs_in(shopper):
    _log_in(shopper["id"])


@when("the shopper places an order")
def places_order(shopper, make_product, address, attempt):
    product_id = make_product()
    attempt(
        lambda: fulfillment.place_order(
            user_id=shopper["id"],
            items=[{"product_id": product_id, "quantity": 1}],
            payment_method="credit_card",
            shipping_address=address,
        )
    )


@when("abandoned carts are flagged")
def flag_carts(shopper):
    flag_abandoned_carts(idle_threshold_hours=24, as_of=shopper["as_of"])


@when(parsers.cfparse('the shopper does "{activity}"'))
def does_activity(shopper, activity):
    record_lead_activity(shopper["id"], activity)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the shopper's score is {score:d}"))
def score_is(shopper, score):
    assert current_domain.repository_for(Shopper).get(shopper["id"]).score == score
