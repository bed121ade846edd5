"""OpenTelemetry-compatible trace and span identifiers.

Trace ids are 128-bit values rendered as 32 lowercase hex characters, span ids are
64-bit values rendered as 16. Both come from ``secrets`` so they are safe to use
as unguessable correlation keys.
"""

from __future__ import annotations

import re
import secrets
from typing import Any

TRACE_ID_BYTES = 16
SPAN_ID_BYTES = 8

_TRACE_ID_RE = re.compile(r'^[0-9a-f]{32}$', re.IGNORECASE)
_SPAN_ID_RE = re.compile(r'^[0-9a-f]{16}$', re.IGNORECASE)


def generate_trace_id() -> str:
    return secrets.token_bytes(TRACE_ID_BYTES).hex()


def generate_span_id() -> str:
    return secrets.token_bytes(SPAN_ID_BYTES).hex()


def is_valid_trace_id(value: Any) -> bool:
    return isinstance(value, str) and _TRACE_ID_RE.fullmatch(value) is not None


def is_valid_span_id(value: Any) -> bool:
    return isinstance(value, str) and _SPAN_ID_RE.fullmatch(value) is not None


def decode_id(hex_id: str) -> int:
    """Return the integer value of a hex trace or span id.

    Raises:
        ValueError: If ``hex_id`` is not a hex string.
    """
    return int(hex_id, 16)
