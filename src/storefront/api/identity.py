"""Requester identity, read from headers set by the auth gateway.

``X-User-Id`` carries the authenticated user and ``X-User-Role`` their role
(``user`` or ``admin``). Token verification happens upstream.
"""

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException

from storefront.errors import Forbidden
from storefront.leads.shopper import ShopperRole


@dataclass(frozen=True)
class Requester:
    user_id: str
    role: str = ShopperRole.USER.value

    @property
    def is_admin(self) -> bool:
        return self.role == ShopperRole.ADMIN.value


def current_requester(
    x_user_id: str | None = Header(default=None),
    x_user_role: str = Header(default=ShopperRole.USER.value),
) -> Requester:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Not authorized, no user")
    return Requester(user_id=x_user_id, role=x_user_role)


def optional_requester(
    x_user_id: str | None = Header(default=None),
    x_user_role: str = Header(default=ShopperRole.USER.value),
) -> Requester | None:
    if not x_user_id:
        return None
    return Requester(user_id=x_user_id, role=x_user_role)


def admin_requester(requester: Requester = Depends(current_requester)) -> Requester:
    if not requester.is_admin:
        raise Forbidden("Not authorized as an admin")
    return requester
