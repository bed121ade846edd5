from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from typing import Any, Mapping

from tracewire.entities._compat import as_dict, as_int, as_str, freeze
from tracewire.schemas import SpanEventPayload, validate_payload


@dataclass(frozen=True)
class SpanEvent:
    """A point-in-time annotation attached to a span.

    ``attributes`` is held as a read-only copy. Events hash by name and timestamp.

    Attributes:
        name: Event name, e.g. ``"exception"``.
        timestamp_ns: Epoch nanoseconds.
        attributes: Free-form event attributes.
    """

    name: str
    timestamp_ns: int
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, 'attributes', freeze(self.attributes))

    def __hash__(self) -> int:
        return hash((self.name, self.timestamp_ns))

    @classmethod
    def exception(cls, err: BaseException, timestamp_ns: int) -> 'SpanEvent':
        """Record an exception the way OpenTelemetry does (type, message, stacktrace)."""
        err_type = type(err)
        if err.__traceback__ is not None:
            stacktrace = ''.join(traceback.format_exception(err_type, err, err.__traceback__))
        else:
            stacktrace = ''.join(traceback.format_exception_only(err_type, err))
        return cls(
            name='exception',
            timestamp_ns=timestamp_ns,
            attributes={
                'exception.type': f'{err_type.__module__}.{err_type.__qualname__}',
                'exception.message': str(err),
                'exception.stacktrace': stacktrace,
            },
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, strict: bool = False) -> 'SpanEvent':
        if strict:
            validate_payload(SpanEventPayload, data, 'span event')
        return cls(
            name=as_str(data.get('name')),
            timestamp_ns=as_int(data.get('timestamp_ns'), 0),
            attributes=as_dict(data.get('attributes')),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            'name': self.name,
            'timestamp_ns': self.timestamp_ns,
            'attributes': dict(self.attributes),
        }
