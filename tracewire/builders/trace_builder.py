"""Mutable construction of a whole trace.

Spans only become part of the trace once their ``SpanBuilder`` is ended, so a
half-built span never leaks into the result. ``build()`` derives the trace
state from the closed spans and returns an immutable ``Trace``.
"""

from __future__ import annotations

import logging
from typing import Any

from tracewire.builders.span_builder import SpanBuilder
from tracewire.config import Settings, get_settings
from tracewire.entities.span import Span
from tracewire.entities.trace import Trace
from tracewire.entities.trace_data import TraceData
from tracewire.entities.trace_info import TraceInfo
from tracewire.entities.trace_location import MlflowExperimentLocation
from tracewire.enums import SpanType, TraceState
from tracewire.errors import InvalidTraceTreeError, TraceAlreadyBuiltError
from tracewire.observability.events import log_event
from tracewire.utils.ids import generate_trace_id
from tracewire.utils.timestamps import now_ms, now_ns, ns_to_ms
from tracewire.validation import find_tree_problems

TRACE_NAME_METADATA_KEY = 'mlflow.traceName'


class TraceBuilder:
    """Builds one trace for an experiment.

    Examples:
        >>> builder = TraceBuilder(experiment_id='1', name='rag-pipeline')
        >>> root = builder.start_span('retrieval', SpanType.RETRIEVER, inputs={'query': 'x'})
        >>> trace = root.end().build()
        >>> trace.info.state
        <TraceState.OK: 'OK'>
    """

    def __init__(self, experiment_id: str, name: str, *, validate_tree: bool = False) -> None:
        self._trace_id = generate_trace_id()
        self._experiment_id = experiment_id
        self._name = name
        self._validate_tree = validate_tree
        self._start_time_ns = now_ns()
        self._spans: list[Span] = []
        self._tags: dict[str, str] = {}
        self._metadata: dict[str, str] = {}
        self._request_preview: str | None = None
        self._response_preview: str | None = None
        self._client_request_id: str | None = None
        self._built = False

    @classmethod
    def from_settings(cls, name: str, settings: Settings | None = None) -> 'TraceBuilder':
        settings = settings or get_settings()
        return cls(settings.experiment_id, name, validate_tree=settings.validate_trace_tree)

    @property
    def trace_id(self) -> str:
        return self._trace_id

    @property
    def experiment_id(self) -> str:
        return self._experiment_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def spans(self) -> tuple[Span, ...]:
        return tuple(self._spans)

    def with_tag(self, key: str, value: str) -> 'TraceBuilder':
        self._check_open()
        self._tags[key] = value
        return self

    def with_metadata(self, key: str, value: str) -> 'TraceBuilder':
        self._check_open()
        self._metadata[key] = value
        return self

    def with_request_preview(self, preview: str) -> 'TraceBuilder':
        self._check_open()
        self._request_preview = preview
        return self

    def with_response_preview(self, preview: str) -> 'TraceBuilder':
        self._check_open()
        self._response_preview = preview
        return self

    def with_client_request_id(self, client_request_id: str) -> 'TraceBuilder':
        self._check_open()
        self._client_request_id = client_request_id
        return self

    def start_span(
        self,
        name: str,
        span_type: str = SpanType.UNKNOWN,
        inputs: dict[str, Any] | None = None,
        attributes: dict[str, Any] | None = None,
    ) -> SpanBuilder:
        """Open a span. It joins the trace only when its builder's ``end()`` is called."""
        self._check_open()
        return SpanBuilder(self, name, span_type, inputs, attributes)

    def add_span(self, span: Span) -> None:
        """Append a closed span. Called by ``SpanBuilder.end()``."""
        self._check_open()
        self._spans.append(span)

    def build(self) -> Trace:
        """Finish the trace.

        ``request_time`` is stamped now, not at the first span's start. The state is
        ERROR if any closed span failed, otherwise OK.

        Raises:
            TraceAlreadyBuiltError: If ``build()`` was already called.
            InvalidTraceTreeError: If tree validation is on and the span tree is malformed.
        """
        self._check_open()
        execution_duration_ms = ns_to_ms(now_ns() - self._start_time_ns)

        state = TraceState.OK
        for span in self._spans:
            if span.status.is_error:
                state = TraceState.ERROR
                break

        problems = find_tree_problems(self._trace_id, self._spans)
        if problems:
            if self._validate_tree:
                raise InvalidTraceTreeError(self._trace_id, problems)
            log_event('trace.validation.warning', trace_id=self._trace_id, problems=problems, level=logging.WARNING)

        info = TraceInfo(
            trace_id=self._trace_id,
            trace_location=MlflowExperimentLocation(self._experiment_id),
            request_time=now_ms(),
            state=state,
            request_preview=self._request_preview,
            response_preview=self._response_preview,
            client_request_id=self._client_request_id,
            execution_duration=execution_duration_ms,
            trace_metadata={TRACE_NAME_METADATA_KEY: self._name, **self._metadata},
            tags=dict(self._tags),
        )
        self._built = True
        log_event(
            'trace.build',
            trace_id=self._trace_id,
            name=self._name,
            state=state.value,
            span_count=len(self._spans),
            execution_duration_ms=execution_duration_ms,
        )
        return Trace(info=info, data=TraceData(spans=tuple(self._spans)))

    def _check_open(self) -> None:
        if self._built:
            raise TraceAlreadyBuiltError(f'Trace {self._name!r} ({self._trace_id}) has already been built')
