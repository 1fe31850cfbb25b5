"""Product stock ledger: reserve, release and peek.

Every stock mutation funnels through ``StockLedgerHandler``. Each command is
one Unit of Work that reads the product, applies the conditional change and
commits with a compare-and-set on the product's version. A writer that lost a
race is re-run against the fresh count by the handler's version retry, so two
callers can never both debit the last unit.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Product")
class ReserveStock:
    """Debit stock for one product, failing if it would go negative."""

    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Product")
class ReleaseStock:
    """Credit stock back to one product."""

    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command_handler(part_of=Product)
class StockLedgerHandler:
    @handle(ReserveStock)
    def reserve_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.reserve(command.quantity)
        repo.add(product)
        return product.available_quantity

    @handle(ReleaseStock)
    def release_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.release(command.quantity)
        repo.add(product)
        return product.available_quantity


def reserve(product_id, quantity):
    """Debit ``quantity`` units of a product and return the remaining count.

    Raises:
        ObjectNotFoundError: the product does not exist.
        InsufficientStock: fewer than ``quantity`` units are available.
    """
    remaining = current_domain.process(
        ReserveStock(product_id=product_id, quantity=quantity),
        asynchronous=False,
    )
    logger.info("Stock reserved", product_id=str(product_id), quantity=quantity, remaining=remaining)
    return remaining


def release(product_id, quantity):
    """Credit ``quantity`` units back to a product and return the new count."""
    remaining = current_domain.process(
        ReleaseStock(product_id=product_id, quantity=quantity),
        asynchronous=False,
    )
    logger.info("Stock released", product_id=str(product_id), quantity=quantity, remaining=remaining)
    return remaining


def peek(product_id):
    """Current available quantity. A read only; nothing is held."""
    return current_domain.repository_for(Product).get(product_id).available_quantity
