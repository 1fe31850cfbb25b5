"""Shopper aggregate: the storefront's view of a user and their lead score.

Authentication lives outside this context. The Shopper carries what lead
scoring needs: how the user arrived (``source``), their role, and ``score``,
a signed integer moved only by ``adjust_score``. No floor or ceiling applies.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import Boolean, DateTime, Integer, String

from storefront.domain import storefront
from storefront.leads.events import LeadScoreAdjusted, ShopperLoggedIn, ShopperRegistered


class LeadSource(Enum):
    WEB = "web"
    EMAIL = "email"
    SOCIAL_MEDIA = "social_media"
    REFERRAL = "referral"
    DIRECT = "direct"
    OTHER = "other"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    GOOGLE = "google"


class ShopperRole(Enum):
    USER = "user"
    ADMIN = "admin"


@storefront.aggregate
class Shopper:
    name = String(required=True, max_length=100)
    email = String(required=True, max_length=254, unique=True)
    phone = String(max_length=30)
    source = String(choices=LeadSource, default=LeadSource.DIRECT.value)
    role = String(choices=ShopperRole, default=ShopperRole.USER.value)
    score = Integer(default=0)
    is_active = Boolean(default=True)
    last_login_at = DateTime()
    registered_at = DateTime()

    @classmethod
    def register(cls, name, email, phone=None, source=None, role=None):
        now = datetime.now(UTC)
        shopper = cls(
            name=name.strip(),
            email=email.strip().lower(),
            phone=phone,
            source=source or LeadSource.DIRECT.value,
            role=role or ShopperRole.USER.value,
            score=0,
            registered_at=now,
        )
        shopper.raise_(
            ShopperRegistered(
                shopper_id=str(shopper.id),
                email=shopper.email,
                source=shopper.source,
                registered_at=now,
            )
        )
        return shopper

    def record_login(self):
        now = datetime.now(UTC)
        self.last_login_at = now
        self.raise_(ShopperLoggedIn(shopper_id=str(self.id), logged_in_at=now))

    def adjust_score(self, activity, delta):
        self.score = (self.score or 0) + delta
        self.raise_(
            LeadScoreAdjusted(
                shopper_id=str(self.id),
                activity=activity,
                delta=delta,
                score=self.score,
            )
        )
