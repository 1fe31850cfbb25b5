"""Storefront bounded context: stock ledger, carts, orders, lead scoring and ratings.

Keeps product stock counts, cart contents and order records consistent across
concurrent requests. Lead scoring rides along as a best-effort side effect that
never blocks or rolls back the action that triggered it.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
