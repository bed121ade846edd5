from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping

from tracewire.entities.trace_data import TraceData
from tracewire.entities.trace_info import TraceInfo
from tracewire.errors import TraceSerializationError


@dataclass(frozen=True)
class Trace:
    """A finished trace: metadata plus spans. This is what the trace store exchanges."""

    info: TraceInfo
    data: TraceData

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, strict: bool = False) -> 'Trace':
        # Some endpoints return info and data keys side by side instead of nested.
        info = data.get('info')
        spans = data.get('data')
        return cls(
            info=TraceInfo.from_dict(info if isinstance(info, Mapping) else data, strict=strict),
            data=TraceData.from_dict(spans if isinstance(spans, Mapping) else data, strict=strict),
        )

    def to_dict(self) -> dict[str, Any]:
        return {'info': self.info.to_dict(), 'data': self.data.to_dict()}

    def to_json(self, indent: int | None = None, *, envelope: str | None = None) -> str:
        """Encode the trace as JSON.

        Args:
            indent: Passed through to ``json.dumps``.
            envelope: Wrap the trace in ``{envelope: trace}``, as the trace store expects on submit.

        Raises:
            TraceSerializationError: If a span's inputs, outputs or attributes are not JSON-serializable.
        """
        try:
            payload: dict[str, Any] = self.to_dict()
            if envelope is not None:
                payload = {envelope: payload}
            return json.dumps(payload, indent=indent, ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise TraceSerializationError(f'Trace {self.info.trace_id} is not JSON-serializable: {exc}') from exc
