"""Structural checks for a finished span tree.

``find_tree_problems`` never raises; it returns human-readable descriptions of
everything wrong with the tree so the caller can log or reject.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from tracewire.entities.span import Span


def find_tree_problems(trace_id: str, spans: Iterable[Span]) -> list[str]:
    spans = list(spans)
    problems: list[str] = []

    roots = [s for s in spans if s.is_root]
    if len(roots) != 1:
        problems.append(f'expected exactly one root span, found {len(roots)}')

    counts = Counter(s.span_id for s in spans)
    for span_id, count in counts.items():
        if count > 1:
            problems.append(f'span id {span_id} is used by {count} spans')

    for span in spans:
        if span.trace_id != trace_id:
            problems.append(f'span {span.span_id} belongs to trace {span.trace_id}')
        if span.parent_id is not None and span.parent_id not in counts:
            problems.append(f'span {span.span_id} references unknown parent {span.parent_id}')
        if span.parent_id is not None and span.parent_id == span.span_id:
            problems.append(f'span {span.span_id} is its own parent')
        if span.end_time_ns is None:
            problems.append(f'span {span.span_id} was never ended')
        elif span.end_time_ns < span.start_time_ns:
            problems.append(f'span {span.span_id} ends before it starts')

    return problems
