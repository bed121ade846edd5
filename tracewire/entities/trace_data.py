from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from tracewire.entities.span import Span
from tracewire.schemas import TraceDataPayload, validate_payload


@dataclass(frozen=True)
class TraceData:
    """The spans of a trace, in the order they were closed."""

    spans: tuple[Span, ...] = ()

    def get_root_span(self) -> Span | None:
        for span in self.spans:
            if span.is_root:
                return span
        return None

    def get_span_by_id(self, span_id: str) -> Span | None:
        for span in self.spans:
            if span.span_id == span_id:
                return span
        return None

    def get_children(self, span_id: str) -> list[Span]:
        return [span for span in self.spans if span.parent_id == span_id]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, strict: bool = False) -> 'TraceData':
        if strict:
            validate_payload(TraceDataPayload, data, 'trace data')
        raw_spans = data.get('spans')
        if not isinstance(raw_spans, list):
            return cls()
        return cls(spans=tuple(Span.from_dict(s, strict=strict) for s in raw_spans if isinstance(s, Mapping)))

    def to_dict(self) -> dict[str, Any]:
        return {'spans': [span.to_dict() for span in self.spans]}
