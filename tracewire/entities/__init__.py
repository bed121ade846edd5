from tracewire.enums import SpanStatusCode, SpanType, TraceState
from .span_event import SpanEvent
from .span import Span
from .trace_location import InferenceTableLocation, MlflowExperimentLocation, TraceLocation
from .trace_data import TraceData
from .trace_info import TraceInfo
from .trace import Trace

__all__ = [
    'InferenceTableLocation',
    'MlflowExperimentLocation',
    'Span',
    'SpanEvent',
    'SpanStatusCode',
    'SpanType',
    'Trace',
    'TraceData',
    'TraceInfo',
    'TraceLocation',
    'TraceState',
]
