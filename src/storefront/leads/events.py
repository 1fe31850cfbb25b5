"""Domain events for the Shopper aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Shopper")
class ShopperRegistered:
    """A new shopper account was created."""

    __version__ = 1

    shopper_id = Identifier(required=True)
    email = String(required=True)
    source = String(required=True)
    registered_at = DateTime(required=True)


@storefront.event(part_of="Shopper")
class ShopperLoggedIn:
    """A shopper signed in."""

    __version__ = 1

    shopper_id = Identifier(required=True)
    logged_in_at = DateTime(required=True)


@storefront.event(part_of="Shopper")
class LeadScoreAdjusted:
    """A behavioural activity moved the shopper's lead score."""

    __version__ = 1

    shopper_id = Identifier(required=True)
    activity = String(required=True)
    delta = Integer(required=True)
    score = Integer(required=True)
