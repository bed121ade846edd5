from __future__ import annotations

import json
import logging

import pytest

from tracewire.builders import TraceBuilder
from tracewire.config import Settings
from tracewire.entities import MlflowExperimentLocation, Trace
from tracewire.enums import SpanStatusCode, SpanType, TraceState
from tracewire.errors import InvalidTraceTreeError, TraceAlreadyBuiltError
from tracewire.utils.ids import is_valid_trace_id
from tracewire.utils.timestamps import now_ms


def test_rag_pipeline_end_to_end() -> None:
    # Arrange
    builder = TraceBuilder(experiment_id='12', name='rag-pipeline').with_tag('user_id', 'u1')

    retrieval = builder.start_span('retrieval', SpanType.RETRIEVER, inputs={'query': 'x'})
    retrieval_span_id = retrieval.span_id
    retrieval.end(SpanStatusCode.OK)

    rerank = builder.start_span('rerank').with_parent(retrieval_span_id)
    rerank.with_error(Exception('boom'))

    # Act
    trace = rerank.end().build()

    # Assert
    root, child = trace.data.spans
    assert len(trace.data.spans) == 2
    assert trace.info.state is TraceState.ERROR
    assert child.events[-1].name == 'exception'
    assert root.is_root is True
    assert root.inputs == {'query': 'x'}
    assert child.parent_id == retrieval_span_id
    assert trace.data.get_root_span() == root
    assert trace.info.tags == {'user_id': 'u1'}
    assert trace.info.trace_location == MlflowExperimentLocation('12')
    assert trace.info.trace_metadata['mlflow.traceName'] == 'rag-pipeline'
    assert {s.trace_id for s in trace.data.spans} == {trace.info.trace_id}
    assert is_valid_trace_id(trace.info.trace_id)


@pytest.mark.parametrize(
    ('statuses', 'expected'),
    [
        ([SpanStatusCode.OK, SpanStatusCode.OK], TraceState.OK),
        ([SpanStatusCode.OK, SpanStatusCode.ERROR], TraceState.ERROR),
        ([SpanStatusCode.ERROR, SpanStatusCode.OK], TraceState.ERROR),
        ([], TraceState.OK),
    ],
)
def test_state_is_derived_from_span_statuses(statuses, expected) -> None:
    builder = TraceBuilder(experiment_id='1', name='t')
    parent_id = None
    for i, status in enumerate(statuses):
        span = builder.start_span(f'step-{i}')
        if parent_id is not None:
            span.with_parent(parent_id)
        parent_id = parent_id or span.span_id
        span.end(status)

    assert builder.build().info.state is expected


def test_request_time_is_stamped_at_build_in_milliseconds() -> None:
    # Arrange
    builder = TraceBuilder(experiment_id='1', name='t')
    builder.start_span('root').end()
    before = now_ms()

    # Act
    trace = builder.build()

    # Assert
    after = now_ms()
    assert before <= trace.info.request_time <= after
    root = trace.data.get_root_span()
    assert trace.info.request_time >= root.start_time_ns // 1_000_000
    assert trace.info.execution_duration is not None
    assert trace.info.execution_duration >= 0


def test_info_fields_from_builder() -> None:
    builder = (
        TraceBuilder(experiment_id='1', name='t')
        .with_metadata('prompt_version', 'v1')
        .with_request_preview('hello?')
        .with_response_preview('hi!')
        .with_client_request_id('req-7')
    )
    builder.start_span('root').end()
    info = builder.build().info

    assert info.request_preview == 'hello?'
    assert info.response_preview == 'hi!'
    assert info.client_request_id == 'req-7'
    assert info.trace_metadata == {'mlflow.traceName': 't', 'prompt_version': 'v1'}


def test_built_trace_survives_wire_round_trip() -> None:
    builder = TraceBuilder(experiment_id='1', name='t')
    root = builder.start_span('root', SpanType.AGENT, inputs={'q': 'x'})
    root_id = root.span_id
    root.with_output('answer', 42).end()
    builder.start_span('child', SpanType.TOOL).with_parent(root_id).end()
    trace = builder.build()

    assert Trace.from_dict(json.loads(trace.to_json()), strict=True) == trace


def test_build_twice_raises() -> None:
    builder = TraceBuilder(experiment_id='1', name='t')
    builder.build()
    with pytest.raises(TraceAlreadyBuiltError):
        builder.build()
    with pytest.raises(TraceAlreadyBuiltError):
        builder.with_tag('late', 'x')
    with pytest.raises(TraceAlreadyBuiltError):
        builder.start_span('late')


def test_span_ended_after_build_is_rejected() -> None:
    builder = TraceBuilder(experiment_id='1', name='t')
    dangling = builder.start_span('never-closed-in-time')
    builder.build()
    with pytest.raises(TraceAlreadyBuiltError):
        dangling.end()
    assert dangling.ended is False
    assert dangling.status is SpanStatusCode.UNSET


def test_explicit_status_is_not_applied_when_trace_rejects_span() -> None:
    builder = TraceBuilder(experiment_id='1', name='t')
    dangling = builder.start_span('late')
    builder.build()

    with pytest.raises(TraceAlreadyBuiltError):
        dangling.end(SpanStatusCode.ERROR)

    assert dangling.status is SpanStatusCode.UNSET
    assert dangling.ended is False


def test_permissive_build_logs_tree_problems(caplog) -> None:
    # Arrange: two roots and a dangling parent
    builder = TraceBuilder(experiment_id='1', name='t')
    builder.start_span('a').end()
    builder.start_span('b').end()
    builder.start_span('c').with_parent('ffffffffffffffff').end()

    # Act
    with caplog.at_level(logging.WARNING, logger='tracewire'):
        trace = builder.build()

    # Assert
    assert len(trace.data.spans) == 3
    warnings = [json.loads(r.getMessage()) for r in caplog.records if r.levelno == logging.WARNING]
    assert warnings[0]['event'] == 'trace.validation.warning'
    assert any('exactly one root' in p for p in warnings[0]['problems'])
    assert any('unknown parent ffffffffffffffff' in p for p in warnings[0]['problems'])


def test_strict_build_rejects_two_roots() -> None:
    builder = TraceBuilder(experiment_id='1', name='t', validate_tree=True)
    builder.start_span('a').end()
    builder.start_span('b').end()

    with pytest.raises(InvalidTraceTreeError) as exc_info:
        builder.build()
    assert exc_info.value.trace_id == builder.trace_id
    assert exc_info.value.problems == ['expected exactly one root span, found 2']


def test_strict_build_rejects_dangling_parent() -> None:
    builder = TraceBuilder(experiment_id='1', name='t', validate_tree=True)
    root = builder.start_span('root')
    root_id = root.span_id
    root.end()
    builder.start_span('orphan').with_parent('0000000000000001').end()

    with pytest.raises(InvalidTraceTreeError):
        builder.build()

    # Failed validation leaves the builder open.
    builder.start_span('fixed').with_parent(root_id).end()
    assert builder.spans[-1].parent_id == root_id


def test_strict_build_accepts_well_formed_tree() -> None:
    builder = TraceBuilder(experiment_id='1', name='t', validate_tree=True)
    root = builder.start_span('root')
    builder.start_span('child').with_parent(root.span_id).end()
    root.end()
    assert len(builder.build().data.spans) == 2


def test_from_settings_uses_configured_experiment_and_policy() -> None:
    settings = Settings(experiment_id='99', validate_trace_tree=True)
    builder = TraceBuilder.from_settings('t', settings)
    assert builder.experiment_id == '99'
    with pytest.raises(InvalidTraceTreeError):
        builder.build()


def test_built_trace_cannot_be_changed_through_its_mappings() -> None:
    # Arrange
    builder = TraceBuilder(experiment_id='1', name='t').with_tag('user_id', 'u1')
    builder.start_span('root', inputs={'q': 'x'}, attributes={'a': 1}).with_output('answer', 42).end()
    trace = builder.build()
    span = trace.data.spans[0]

    # Act / Assert
    with pytest.raises(TypeError):
        span.attributes['a'] = 'tampered'
    with pytest.raises(TypeError):
        span.inputs['q'] = 'tampered'
    with pytest.raises(TypeError):
        span.outputs['answer'] = 0
    with pytest.raises(TypeError):
        trace.info.tags['injected'] = 'y'
    with pytest.raises(TypeError):
        trace.info.trace_metadata['mlflow.traceName'] = 'other'

    data = trace.to_dict()
    assert data['data']['spans'][0]['attributes'] == {'a': 1}
    assert data['data']['spans'][0]['inputs'] == {'q': 'x'}
    assert data['info']['tags'] == {'user_id': 'u1'}
    assert type(data['data']['spans'][0]['inputs']) is dict


def test_built_trace_is_hashable() -> None:
    builder = TraceBuilder(experiment_id='1', name='t')
    builder.start_span('root', attributes={'a': 1}).with_event('tick', {'n': 1}).end()
    trace = builder.build()

    assert hash(trace) == hash(Trace.from_dict(trace.to_dict()))
    assert len({trace.data.spans[0], trace.data.spans[0]}) == 1
