"""Lead scoring: behavioural activities nudge a shopper's score.

Callers hand activities off through ``record_lead_activity``, which never
raises. With ``command_processing = "async"`` the command is written to the
event store and applied later by the engine; in sync mode it runs inline,
after the caller's own Unit of Work has committed. Either way a failure is
logged and the triggering action's outcome is untouched.
"""

from enum import Enum

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.leads.shopper import LeadSource, Shopper
from storefront.utils.side_effects import best_effort

logger = structlog.get_logger(__name__)


class LeadActivity(Enum):
    REGISTER = "register"
    LOGIN = "login"
    VIEW_PRODUCT = "view_product"
    ADD_TO_CART = "add_to_cart"
    ADD_TO_WISHLIST = "add_to_wishlist"
    PLACE_ORDER = "place_order"
    ABANDONED_CART = "abandoned_cart"
    NO_PURCHASE_AFTER_VIEWS = "no_purchase_after_views"


_ACTIVITY_DELTAS = {
    LeadActivity.LOGIN: 2,
    LeadActivity.VIEW_PRODUCT: 3,
    LeadActivity.ADD_TO_CART: 5,
    LeadActivity.ADD_TO_WISHLIST: 3,
    LeadActivity.PLACE_ORDER: 10,
    LeadActivity.ABANDONED_CART: -5,
    LeadActivity.NO_PURCHASE_AFTER_VIEWS: -5,
}

_REFERRAL_REGISTRATION_DELTA = 10
_REGISTRATION_DELTA = 5


def score_delta(activity, source=None):
    """Score change for an activity, or None when the activity is unknown."""
    try:
        activity = LeadActivity(activity)
    except ValueError:
        return None

    if activity == LeadActivity.REGISTER:
        if source == LeadSource.REFERRAL.value:
            return _REFERRAL_REGISTRATION_DELTA
        return _REGISTRATION_DELTA
    return _ACTIVITY_DELTAS[activity]


@storefront.command(part_of="Shopper")
class RecordLeadActivity:
    """Apply one behavioural activity to a shopper's lead score."""

    user_id = Identifier(required=True)
    activity = String(required=True, max_length=50)


@storefront.command_handler(part_of=Shopper)
class LeadScoringHandler:
    @handle(RecordLeadActivity)
    def record_lead_activity(self, command):
        repo = current_domain.repository_for(Shopper)
        try:
            shopper = repo.get(command.user_id)
        except ObjectNotFoundError:
            logger.warning("Shopper not found for lead score update", user_id=str(command.user_id))
            return None

        delta = score_delta(command.activity, shopper.source)
        if delta is None:
            logger.info("Ignoring unknown lead activity", activity=command.activity)
            return shopper.score

        shopper.adjust_score(command.activity, delta)
        repo.add(shopper)

        logger.info(
            "Lead score updated",
            user_id=str(shopper.id),
            activity=command.activity,
            delta=delta,
            score=shopper.score,
        )
        return shopper.score


def record_lead_activity(user_id, activity):
    """Hand off a lead-scoring activity. Never raises."""
    if user_id is None:
        return
    if isinstance(activity, LeadActivity):
        activity = activity.value

    with best_effort("lead_scoring", user_id=str(user_id), activity=activity):
        current_domain.process(RecordLeadActivity(user_id=str(user_id), activity=activity))
