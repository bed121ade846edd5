from __future__ import annotations

from enum import Enum


class SpanStatusCode(str, Enum):
    """Outcome of a single span."""

    UNSET = 'UNSET'
    OK = 'OK'
    ERROR = 'ERROR'

    @property
    def is_error(self) -> bool:
        return self is SpanStatusCode.ERROR

    @property
    def is_ok(self) -> bool:
        return self is SpanStatusCode.OK

    @property
    def is_unset(self) -> bool:
        return self is SpanStatusCode.UNSET


class TraceState(str, Enum):
    """Trace-level summary derived from the statuses of its spans."""

    IN_PROGRESS = 'IN_PROGRESS'
    OK = 'OK'
    ERROR = 'ERROR'

    @property
    def is_terminal(self) -> bool:
        return self is not TraceState.IN_PROGRESS

    @property
    def is_error(self) -> bool:
        return self is TraceState.ERROR

    @property
    def is_ok(self) -> bool:
        return self is TraceState.OK

    @property
    def is_in_progress(self) -> bool:
        return self is TraceState.IN_PROGRESS


class SpanType:
    """Well-known span types.

    Span types are plain strings on the wire, not a closed set: these constants
    cover what tooling recognises, and any other string is still a valid type.
    """

    UNKNOWN = 'UNKNOWN'
    AGENT = 'AGENT'
    CHAIN = 'CHAIN'
    LLM = 'LLM'
    TOOL = 'TOOL'
    RETRIEVER = 'RETRIEVER'
    EMBEDDING = 'EMBEDDING'
    PARSER = 'PARSER'
    RERANKER = 'RERANKER'
    CHAT_MODEL = 'CHAT_MODEL'
    MEMORY = 'MEMORY'
    WORKFLOW = 'WORKFLOW'
    TASK = 'TASK'
    GUARDRAIL = 'GUARDRAIL'
    EVALUATOR = 'EVALUATOR'

    _ALL = (
        UNKNOWN, AGENT, CHAIN, LLM, TOOL, RETRIEVER, EMBEDDING, PARSER,
        RERANKER, CHAT_MODEL, MEMORY, WORKFLOW, TASK, GUARDRAIL, EVALUATOR,
    )
    _WELL_KNOWN = frozenset(_ALL)
    _LLM_RELATED = frozenset({LLM, CHAT_MODEL, EMBEDDING})

    @classmethod
    def all(cls) -> tuple[str, ...]:
        return cls._ALL

    @classmethod
    def is_valid(cls, value: str) -> bool:
        return value in cls._WELL_KNOWN

    @classmethod
    def is_llm_related(cls, value: str) -> bool:
        return value in cls._LLM_RELATED
