"""User-facing messages for failed interactions."""

from contextlib import contextmanager

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.backend.port import BackendError

logger = structlog.get_logger(__name__)


def message_for(exc: Exception) -> str:
    """The text shown to the shopper for a failed interaction."""
    if isinstance(exc, BackendError):
        return exc.message
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        parts = []
        for errors in messages.values():
            parts.extend(errors if isinstance(errors, list) else [errors])
        return "; ".join(str(part) for part in parts)
    return str(messages) if messages else str(exc)


@contextmanager
def reporting(view, event: str, **context):
    """Clear the view's error, then record and re-raise whatever the interaction fails with.

    The view keeps the message for display; the caller still sees the exception.
    """
    view.error = None
    try:
        yield
    except (BackendError, ValidationError, ObjectNotFoundError) as exc:
        view.error = message_for(exc)
        logger.warning(event, error=view.error, **context)
        raise
