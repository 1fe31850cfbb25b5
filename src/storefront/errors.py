"""Error taxonomy for the storefront core.

Missing documents surface as ``protean.exceptions.ObjectNotFoundError`` and
malformed input as ``protean.exceptions.ValidationError``. The classes below
cover the remaining failures that abort a primary operation.
"""

from protean.exceptions import ProteanException, ValidationError


class InsufficientStock(ValidationError):
    """A stock debit would take a product's available quantity below zero."""

    def __init__(self, product_name, available, **kwargs):
        self.product_name = product_name
        self.available = available
        super().__init__(
            {"quantity": [f"Not enough stock for {product_name}. Available: {available}"]},
            **kwargs,
        )

    def __reduce__(self):
        return (InsufficientStock, (self.product_name, self.available))


class InvalidState(ValidationError):
    """The requested change is not allowed from the document's current state."""

    def __init__(self, message, field="status", **kwargs):
        super().__init__({field: [message]}, **kwargs)


class Forbidden(ProteanException):
    """The requester does not own the document or lacks the required role."""
