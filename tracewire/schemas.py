"""Pydantic models of the trace-store wire format.

The entity ``from_dict`` decoders are lenient by default. When strict decoding is
requested the raw payload is validated against these models first, so contract
violations from the store surface as ``TraceDecodeError`` instead of being
defaulted away.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, model_validator

from tracewire.enums import SpanStatusCode, SpanType, TraceState
from tracewire.errors import TraceDecodeError


class _WireModel(BaseModel):
    model_config = ConfigDict(extra='allow', populate_by_name=True)


class SpanEventPayload(_WireModel):
    """A span event as sent by the trace store."""

    name: str
    timestamp_ns: int
    attributes: dict[str, Any] = Field(default_factory=dict)


class SpanPayload(_WireModel):
    """A span as sent by the trace store.

    Args:
        trace_id: 32-hex trace id (``request_id`` is accepted as a deprecated alias).
        span_id: 16-hex span id.
        start_time_ns: Start in epoch nanoseconds.
        end_time_ns: End in epoch nanoseconds, absent while the span is open.

    Examples:
        >>> SpanPayload.model_validate({"request_id": "ab" * 16, "span_id": "cd" * 8, "name": "llm", "start_time_ns": 1}).trace_id
        'abababababababababababababababab'
    """

    trace_id: str = Field(validation_alias=AliasChoices('trace_id', 'request_id'))
    span_id: str
    name: str
    start_time_ns: int
    end_time_ns: int | None = None
    parent_id: str | None = None
    status: SpanStatusCode = SpanStatusCode.UNSET
    span_type: str = SpanType.UNKNOWN
    inputs: Any = None
    outputs: Any = None
    attributes: dict[str, Any] = Field(default_factory=dict)
    events: list[SpanEventPayload] = Field(default_factory=list)

    @model_validator(mode='after')
    def check_end_not_before_start(self) -> 'SpanPayload':
        if self.end_time_ns is not None and self.end_time_ns < self.start_time_ns:
            raise ValueError('end_time_ns must not be earlier than start_time_ns')
        return self


class TraceLocationPayload(_WireModel):
    """A trace location. Which fields are required depends on ``type``."""

    type: str = 'MLFLOW_EXPERIMENT'
    experiment_id: str | None = None
    table_name: str | None = None
    database: str | None = None
    catalog: str | None = None

    @model_validator(mode='after')
    def check_required_for_type(self) -> 'TraceLocationPayload':
        if self.type == 'MLFLOW_EXPERIMENT' and self.experiment_id is None:
            raise ValueError('experiment_id is required for MLFLOW_EXPERIMENT locations')
        if self.type == 'INFERENCE_TABLE' and self.table_name is None:
            raise ValueError('table_name is required for INFERENCE_TABLE locations')
        return self


class TraceInfoPayload(_WireModel):
    """Trace-level metadata (``status`` is accepted as a deprecated alias of ``state``)."""

    trace_id: str = Field(validation_alias=AliasChoices('trace_id', 'request_id'))
    trace_location: TraceLocationPayload = Field(validation_alias=AliasChoices('trace_location', 'location'))
    request_time: int
    state: TraceState = Field(default=TraceState.OK, validation_alias=AliasChoices('state', 'status'))
    request_preview: str | None = None
    response_preview: str | None = None
    client_request_id: str | None = None
    execution_duration: int | None = None
    trace_metadata: dict[str, str] = Field(default_factory=dict)
    tags: dict[str, str] = Field(default_factory=dict)


class TraceDataPayload(_WireModel):
    spans: list[SpanPayload] = Field(default_factory=list)


def validate_payload(model: type[BaseModel], payload: Any, kind: str) -> BaseModel:
    """Validate a raw wire payload against one of the models above.

    Args:
        model: Wire model class.
        payload: Raw JSON-decoded value.
        kind: Human-readable name used in the error message.

    Returns:
        The validated model instance.

    Raises:
        TraceDecodeError: If the payload does not match the model.
    """
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise TraceDecodeError(kind, exc.errors(include_url=False)) from exc
