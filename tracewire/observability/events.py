"""Structured event logging.

Every event is a single JSON object (``event``, ``trace_id`` and free-form fields)
written through the ``tracewire`` logger. The library installs no handlers; the
host application decides where the lines go.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tracewire.entities.span import Span

logger = logging.getLogger('tracewire')


def log_event(
    event: str,
    *,
    trace_id: str,
    span: Span | None = None,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    if not logger.isEnabledFor(level):
        return
    payload: dict[str, Any] = {'event': event, 'trace_id': trace_id, **fields}
    if span is not None:
        payload['span'] = {
            'name': span.name,
            'span_id': span.span_id,
            'parent_id': span.parent_id,
            'status': span.status.value,
            'duration_ms': span.duration_ms,
        }
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))
