"""Payload encoding shared by the HTTP and gRPC adapters.

Payloads are JSON. Bodies that are not valid JSON are handed over as text so
that plain-text events and responses still reach the application.
"""

import json
from typing import Any


def encode(value: Any) -> bytes:
    """Encode a payload; `None` becomes an empty body."""
    if value is None:
        return b""
    if isinstance(value, bytes):
        return value
    return json.dumps(value).encode("utf-8")


def decode(raw: bytes) -> Any:
    """Decode a payload; an empty body becomes `None`."""
    if not raw:
        return None
    text = raw.decode("utf-8", errors="replace")
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text
