# ---------------------------------
# TYPED EXCEPTIONS
# ---------------------------------
from __future__ import annotations

from typing import Any


class TracewireError(Exception):
    """Base class for every error raised by tracewire."""


class TraceSerializationError(TracewireError):
    """Raised when a trace cannot be encoded to JSON (non-serializable payloads)."""


class TraceDecodeError(TracewireError, ValueError):
    """Raised by strict decoding when a wire payload violates the trace-store schema."""

    def __init__(self, kind: str, errors: list[dict[str, Any]]) -> None:
        self.kind = kind
        self.errors = errors
        fields = ', '.join('.'.join(str(p) for p in e.get('loc', ())) or '<root>' for e in errors)
        super().__init__(f'Invalid {kind} payload: {fields}')


class SpanAlreadyEndedError(TracewireError, RuntimeError):
    """Raised when a span builder is used after end()."""


class TraceAlreadyBuiltError(TracewireError, RuntimeError):
    """Raised when a trace builder is used after build()."""


class InvalidTraceTreeError(TracewireError):
    """Raised by strict tree validation when the span tree is malformed."""

    def __init__(self, trace_id: str, problems: list[str]) -> None:
        self.trace_id = trace_id
        self.problems = problems
        super().__init__(f'Trace {trace_id} has an invalid span tree: {"; ".join(problems)}')


class TraceStoreError(TracewireError):
    """Raised when the remote trace store rejects a request."""

    def __init__(self, message: str, *, status_code: int | None = None, body: Any = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)

    @classmethod
    def from_http_error(cls, status_code: int, reason: str, body: Any = None) -> 'TraceStoreError':
        message = reason
        if isinstance(body, dict) and isinstance(body.get('message'), str):
            message = body['message']
        return cls(f'HTTP {status_code}: {message}', status_code=status_code, body=body)


class TraceStoreConnectionError(TraceStoreError):
    """Raised when the trace store cannot be reached."""
