"""Request ID helpers."""

import re
import uuid

# Client-supplied IDs are echoed back, so only accept a conservative charset
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def generate_request_id() -> str:
    """Generate a new request ID."""
    return uuid.uuid4().hex


def resolve_request_id(incoming: str | None) -> str:
    """Reuse a well-formed incoming ``X-Request-ID`` or generate a fresh one.

    Args:
        incoming: Header value sent by the client, if any

    Returns:
        Request ID to attach to the request and response
    """
    if incoming and _REQUEST_ID_PATTERN.match(incoming):
        return incoming
    return generate_request_id()
