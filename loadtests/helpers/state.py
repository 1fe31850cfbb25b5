"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state, with no cross-user sharing.
State tracks entity IDs returned by creation endpoints so follow-up
operations can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """Tracks state for a single simulated shopper's checkout journey."""

    shopper_id: str | None = None
    cart_line_ids: list[str] = field(default_factory=list)
    order_id: str | None = None
    order_status: str | None = None
