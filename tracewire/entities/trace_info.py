from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from tracewire.entities._compat import as_dict, as_enum, as_int, as_optional_str, as_str, freeze, resolve_field
from tracewire.enums import TraceState
from tracewire.entities.trace_location import MlflowExperimentLocation, TraceLocation
from tracewire.schemas import TraceInfoPayload, validate_payload


@dataclass(frozen=True)
class TraceInfo:
    """Trace-level metadata envelope.

    Note the units: ``request_time`` and ``execution_duration`` are milliseconds,
    unlike span timestamps which are nanoseconds. ``request_time`` is stamped when
    the trace is built, so it is not the root span's start time. ``trace_metadata``
    and ``tags`` are held as read-only copies; trace infos hash by trace id.

    Attributes:
        trace_id: 32-hex trace id.
        trace_location: Experiment or inference table holding the trace.
        request_time: Epoch milliseconds.
        state: Summary of the span statuses.
        request_preview: Short rendering of the request.
        response_preview: Short rendering of the response.
        client_request_id: Caller-supplied correlation id.
        execution_duration: Milliseconds from trace start to build.
        trace_metadata: Immutable key/value metadata.
        tags: Mutable (server-side) key/value tags.
    """

    trace_id: str
    trace_location: TraceLocation
    request_time: int
    state: TraceState
    request_preview: str | None = None
    response_preview: str | None = None
    client_request_id: str | None = None
    execution_duration: int | None = None
    trace_metadata: Mapping[str, str] = field(default_factory=dict)
    tags: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, 'trace_metadata', freeze(self.trace_metadata))
        object.__setattr__(self, 'tags', freeze(self.tags))

    def __hash__(self) -> int:
        return hash(self.trace_id)

    @property
    def request_id(self) -> str:
        """Deprecated alias of ``trace_id``."""
        return self.trace_id

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, strict: bool = False) -> 'TraceInfo':
        if strict:
            validate_payload(TraceInfoPayload, data, 'trace info')

        location_data = resolve_field(data, 'trace_location', 'location', {})
        if not isinstance(location_data, Mapping):
            location_data = {}

        return cls(
            trace_id=as_str(resolve_field(data, 'trace_id', 'request_id')),
            trace_location=TraceLocation.from_dict(location_data, strict=strict),
            request_time=as_int(data.get('request_time'), 0),
            state=as_enum(TraceState, resolve_field(data, 'state', 'status'), TraceState.OK),
            request_preview=as_optional_str(data.get('request_preview')),
            response_preview=as_optional_str(data.get('response_preview')),
            client_request_id=as_optional_str(data.get('client_request_id')),
            execution_duration=as_int(data.get('execution_duration'), None),
            trace_metadata=as_dict(data.get('trace_metadata')),
            tags=as_dict(data.get('tags')),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            'trace_id': self.trace_id,
            'trace_location': self.trace_location.to_dict(),
            'request_time': self.request_time,
            'state': self.state.value,
            'trace_metadata': dict(self.trace_metadata),
            'tags': dict(self.tags),
        }
        if self.request_preview is not None:
            data['request_preview'] = self.request_preview
        if self.response_preview is not None:
            data['response_preview'] = self.response_preview
        if self.client_request_id is not None:
            data['client_request_id'] = self.client_request_id
        if self.execution_duration is not None:
            data['execution_duration'] = self.execution_duration
        return data

    @property
    def experiment_id(self) -> str | None:
        if isinstance(self.trace_location, MlflowExperimentLocation):
            return self.trace_location.experiment_id
        return None
