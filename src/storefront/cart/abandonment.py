"""Abandoned-cart detection: command, handler and trigger.

Triggered from outside this context (a cron job calling the maintenance
endpoint or ``manage.py flag-abandoned-carts``). Carts with lines that have
been idle past the threshold are flagged once; each flagged owner receives an
``abandoned_cart`` lead activity after the flagging commits. Any later cart
mutation clears the flag.
"""

from datetime import UTC, datetime, timedelta

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.domain import storefront
from storefront.leads.scoring import LeadActivity, record_lead_activity

logger = structlog.get_logger(__name__)


def _as_utc(value):
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@storefront.command(part_of="Cart")
class DetectAbandonedCarts:
    """Flag carts idle beyond the specified threshold."""

    idle_threshold_hours = Integer(min_value=0)
    as_of = DateTime()  # Optional: defaults to now


@storefront.command_handler(part_of=Cart)
class DetectAbandonedCartsHandler:
    @handle(DetectAbandonedCarts)
    def detect_abandoned_carts(self, command):
        as_of = _as_utc(command.as_of or datetime.now(UTC))
        threshold_hours = command.idle_threshold_hours
        if threshold_hours is None:
            threshold_hours = getattr(current_domain, "ABANDONED_CART_IDLE_HOURS", 24)
        cutoff = as_of - timedelta(hours=threshold_hours)

        logger.info(
            "Checking for abandoned carts",
            cutoff=cutoff.isoformat(),
            threshold_hours=threshold_hours,
        )

        repo = current_domain.repository_for(Cart)
        carts = repo._dao.query.limit(None).all().items

        flagged_users = []
        for record in carts:
            if record.abandoned_at is not None or record.updated_at is None:
                continue
            if _as_utc(record.updated_at) > cutoff:
                continue

            cart = repo.get(record.id)
            try:
                cart.mark_abandoned(as_of=as_of)
            except ValidationError as exc:
                logger.info("Skipping cart", cart_id=str(cart.id), reason=str(exc))
                continue

            repo.add(cart)
            flagged_users.append(str(cart.user_id))
            logger.info(
                "Marked cart as abandoned",
                cart_id=str(cart.id),
                user_id=str(cart.user_id),
                line_count=len(cart.lines),
                last_updated=str(cart.updated_at),
            )

        logger.info("Cart abandonment detection complete", abandoned_count=len(flagged_users))
        return flagged_users


def flag_abandoned_carts(idle_threshold_hours=None, as_of=None):
    """Flag idle carts, then score each owner. Returns the flagged user ids."""
    flagged_users = current_domain.process(
        DetectAbandonedCarts(idle_threshold_hours=idle_threshold_hours, as_of=as_of),
        asynchronous=False,
    )
    for user_id in flagged_users:
        record_lead_activity(user_id, LeadActivity.ABANDONED_CART)
    return flagged_users
