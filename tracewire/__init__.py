"""In-memory assembly and wire encoding of MLflow-compatible execution traces."""

from tracewire.entities import (
    InferenceTableLocation,
    MlflowExperimentLocation,
    Span,
    SpanEvent,
    SpanStatusCode,
    SpanType,
    Trace,
    TraceData,
    TraceInfo,
    TraceLocation,
    TraceState,
)
from tracewire.builders import SpanBuilder, TraceBuilder
from tracewire.errors import (
    InvalidTraceTreeError,
    SpanAlreadyEndedError,
    TraceAlreadyBuiltError,
    TraceDecodeError,
    TraceSerializationError,
    TraceStoreConnectionError,
    TraceStoreError,
    TracewireError,
)

__all__ = [
    'InferenceTableLocation',
    'InvalidTraceTreeError',
    'MlflowExperimentLocation',
    'Span',
    'SpanAlreadyEndedError',
    'SpanBuilder',
    'SpanEvent',
    'SpanStatusCode',
    'SpanType',
    'Trace',
    'TraceAlreadyBuiltError',
    'TraceBuilder',
    'TraceData',
    'TraceDecodeError',
    'TraceInfo',
    'TraceLocation',
    'TraceSerializationError',
    'TraceState',
    'TraceStoreConnectionError',
    'TraceStoreError',
    'TracewireError',
]
