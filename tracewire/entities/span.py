from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from tracewire.entities._compat import (
    as_dict,
    as_enum,
    as_int,
    as_optional_str,
    as_str,
    freeze,
    resolve_field,
    thaw,
)
from tracewire.enums import SpanStatusCode
from tracewire.entities.span_event import SpanEvent
from tracewire.schemas import SpanPayload, validate_payload
from tracewire.utils.timestamps import NS_PER_MS


@dataclass(frozen=True)
class Span:
    """One timed operation inside a trace.

    Spans are produced by ``SpanBuilder.end()`` or decoded from the wire and never
    change afterwards: mapping fields (attributes, and inputs/outputs when they are
    mappings) are stored as read-only copies. Spans hash by trace and span id.

    Attributes:
        trace_id: 32-hex id of the owning trace.
        span_id: 16-hex id of this span.
        name: Human-readable operation name.
        start_time_ns: Start in epoch nanoseconds.
        end_time_ns: End in epoch nanoseconds; ``None`` only for spans decoded while still open.
        parent_id: 16-hex id of the parent span, ``None`` for the root.
        status: Span outcome.
        span_type: Open span type string, see ``SpanType`` for the well-known values.
        inputs: JSON-serializable input payload.
        outputs: JSON-serializable output payload.
        attributes: Free-form span attributes.
        events: Span events in the order they were recorded.
    """

    trace_id: str
    span_id: str
    name: str
    start_time_ns: int
    end_time_ns: int | None = None
    parent_id: str | None = None
    status: SpanStatusCode = SpanStatusCode.UNSET
    span_type: str = ''
    inputs: Any = None
    outputs: Any = None
    attributes: Mapping[str, Any] = field(default_factory=dict)
    events: tuple[SpanEvent, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, 'inputs', freeze(self.inputs))
        object.__setattr__(self, 'outputs', freeze(self.outputs))
        object.__setattr__(self, 'attributes', freeze(self.attributes))
        object.__setattr__(self, 'events', tuple(self.events))

    def __hash__(self) -> int:
        return hash((self.trace_id, self.span_id))

    @property
    def request_id(self) -> str:
        """Deprecated alias of ``trace_id``."""
        return self.trace_id

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    @property
    def duration_ns(self) -> int | None:
        if self.end_time_ns is None:
            return None
        return self.end_time_ns - self.start_time_ns

    @property
    def duration_ms(self) -> float | None:
        duration = self.duration_ns
        if duration is None:
            return None
        return duration / NS_PER_MS

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, strict: bool = False) -> 'Span':
        """Decode a wire span.

        Args:
            data: JSON object as sent by the trace store.
            strict: Validate against ``SpanPayload`` first instead of defaulting bad fields.

        Raises:
            TraceDecodeError: In strict mode, if required fields are missing or mistyped.
        """
        if strict:
            validate_payload(SpanPayload, data, 'span')

        raw_events = data.get('events')
        events = tuple(
            SpanEvent.from_dict(e, strict=strict)
            for e in (raw_events if isinstance(raw_events, list) else [])
            if isinstance(e, Mapping)
        )

        return cls(
            trace_id=as_str(resolve_field(data, 'trace_id', 'request_id')),
            span_id=as_str(data.get('span_id')),
            name=as_str(data.get('name')),
            start_time_ns=as_int(data.get('start_time_ns'), 0),
            end_time_ns=as_int(data.get('end_time_ns'), None),
            parent_id=as_optional_str(data.get('parent_id')),
            status=as_enum(SpanStatusCode, data.get('status'), SpanStatusCode.UNSET),
            span_type=as_str(data.get('span_type')),
            inputs=data.get('inputs'),
            outputs=data.get('outputs'),
            attributes=as_dict(data.get('attributes')),
            events=events,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            'trace_id': self.trace_id,
            'span_id': self.span_id,
            'name': self.name,
            'start_time_ns': self.start_time_ns,
            'status': self.status.value,
            'span_type': self.span_type,
            'attributes': dict(self.attributes),
            'events': [e.to_dict() for e in self.events],
        }
        if self.end_time_ns is not None:
            data['end_time_ns'] = self.end_time_ns
        if self.parent_id is not None:
            data['parent_id'] = self.parent_id
        if self.inputs is not None:
            data['inputs'] = thaw(self.inputs)
        if self.outputs is not None:
            data['outputs'] = thaw(self.outputs)
        return data
