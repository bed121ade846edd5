from .span_builder import SpanBuilder
from .trace_builder import TraceBuilder

__all__ = ['SpanBuilder', 'TraceBuilder']
