"""Mutable construction of a single span.

A ``SpanBuilder`` is Open until ``end()`` and Ended afterwards. Ending freezes the
accumulated state into an immutable ``Span`` and hands it to the owning
``TraceBuilder``; the builder can't be touched again after that.

Builders are single-owner and single-threaded: start/end timestamps only mean
something if the calls follow the real call stack of one thread.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from tracewire.entities.span import Span
from tracewire.entities.span_event import SpanEvent
from tracewire.enums import SpanStatusCode, SpanType
from tracewire.errors import SpanAlreadyEndedError
from tracewire.observability.events import log_event
from tracewire.utils.ids import generate_span_id
from tracewire.utils.timestamps import now_ns

if TYPE_CHECKING:
    from tracewire.builders.trace_builder import TraceBuilder


class SpanBuilder:
    """Accumulates the fields of one span until it is ended."""

    def __init__(
        self,
        trace_builder: TraceBuilder,
        name: str,
        span_type: str = SpanType.UNKNOWN,
        inputs: dict[str, Any] | None = None,
        attributes: dict[str, Any] | None = None,
    ) -> None:
        self._trace_builder = trace_builder
        self._span_id = generate_span_id()
        self._name = name
        self._span_type = span_type
        self._start_time_ns = now_ns()
        self._parent_id: str | None = None
        self._inputs: Any = dict(inputs) if inputs is not None else None
        self._outputs: Any = None
        self._attributes: dict[str, Any] = dict(attributes or {})
        self._events: list[SpanEvent] = []
        self._status = SpanStatusCode.UNSET
        self._ended = False

    @property
    def span_id(self) -> str:
        return self._span_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def status(self) -> SpanStatusCode:
        return self._status

    @property
    def ended(self) -> bool:
        return self._ended

    def with_parent(self, parent_span_id: str) -> 'SpanBuilder':
        self._check_open()
        self._parent_id = parent_span_id
        return self

    def with_input(self, key: str, value: Any) -> 'SpanBuilder':
        self._check_open()
        if not isinstance(self._inputs, dict):
            self._inputs = {}
        self._inputs[key] = value
        return self

    def with_output(self, key: str, value: Any) -> 'SpanBuilder':
        self._check_open()
        if not isinstance(self._outputs, dict):
            self._outputs = {}
        self._outputs[key] = value
        return self

    def with_attribute(self, key: str, value: Any) -> 'SpanBuilder':
        self._check_open()
        self._attributes[key] = value
        return self

    def with_event(self, name: str, attributes: dict[str, Any] | None = None) -> 'SpanBuilder':
        self._check_open()
        self._events.append(SpanEvent(name=name, timestamp_ns=now_ns(), attributes=dict(attributes or {})))
        return self

    def with_error(self, exception: BaseException) -> 'SpanBuilder':
        """Mark the span as failed and record the exception. Does not end the span."""
        self._check_open()
        self._status = SpanStatusCode.ERROR
        self._events.append(SpanEvent.exception(exception, now_ns()))
        return self

    def end(self, status: SpanStatusCode | None = None) -> TraceBuilder:
        """Seal the span and append it to the owning trace.

        Args:
            status: Explicit final status. Without one, an UNSET span becomes OK.

        Returns:
            The owning ``TraceBuilder``, for chaining.

        Raises:
            SpanAlreadyEndedError: If the span was already ended.
            TraceAlreadyBuiltError: If the owning trace was already built; the span stays open.
        """
        self._check_open()
        end_time_ns = now_ns()

        final_status = status
        if final_status is None:
            final_status = SpanStatusCode.OK if self._status is SpanStatusCode.UNSET else self._status

        span = Span(
            trace_id=self._trace_builder.trace_id,
            span_id=self._span_id,
            name=self._name,
            start_time_ns=self._start_time_ns,
            end_time_ns=end_time_ns,
            parent_id=self._parent_id,
            status=final_status,
            span_type=self._span_type,
            inputs=self._inputs,
            outputs=self._outputs,
            attributes=dict(self._attributes),
            events=tuple(self._events),
        )
        # Builder state only changes once the trace has accepted the span.
        self._trace_builder.add_span(span)
        self._status = final_status
        self._ended = True
        log_event('span.end', trace_id=span.trace_id, span=span, level=logging.DEBUG)
        return self._trace_builder

    def _check_open(self) -> None:
        if self._ended:
            raise SpanAlreadyEndedError(f'Span {self._name!r} ({self._span_id}) has already ended')
