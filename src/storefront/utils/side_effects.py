"""Best-effort side effects.

Lead scoring, cart cleanup after checkout and stock compensation all run
after (or instead of) the primary operation's result. Their failures are
logged and swallowed so the caller's outcome never depends on them.
"""

from contextlib import contextmanager

import structlog

logger = structlog.get_logger(__name__)


@contextmanager
def best_effort(operation, **context):
    """Run the enclosed block, logging and swallowing any ``Exception``."""
    try:
        yield
    except Exception as exc:
        logger.warning(
            "Best-effort operation failed",
            operation=operation,
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=True,
            **context,
        )
