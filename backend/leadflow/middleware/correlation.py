"""X-Request-ID handling for portal requests.

The portal frontend may send its own request id so a questionnaire step can
be traced from the browser through the engine logs. Ids it sends are kept
when they are short printable tokens; anything else is replaced with a
fresh UUID.
"""

import uuid

from asgi_correlation_id import CorrelationIdMiddleware
from asgi_correlation_id.context import correlation_id
from fastapi import FastAPI

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128


def is_acceptable_request_id(value: str) -> bool:
    """Accept 1-128 printable ASCII characters without whitespace."""
    return 0 < len(value) <= MAX_REQUEST_ID_LENGTH and value.isascii() and value.isprintable() and " " not in value


def setup_correlation_middleware(app: FastAPI) -> None:
    """Install the request id middleware on the app."""
    app.add_middleware(
        CorrelationIdMiddleware,
        header_name=REQUEST_ID_HEADER,
        generator=lambda: str(uuid.uuid4()),
        validator=is_acceptable_request_id,
    )


def get_correlation_id() -> str | None:
    """Return the current request id, or None outside a request."""
    return correlation_id.get(None)


__all__ = ["REQUEST_ID_HEADER", "setup_correlation_middleware", "get_correlation_id", "is_acceptable_request_id"]
