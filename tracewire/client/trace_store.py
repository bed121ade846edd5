"""Trace-store client (MLflow 3 trace endpoints, HTTP-based).

This module only builds requests and decodes the response envelopes. Encoding a
trace goes through ``Trace.to_json`` so a non-serializable payload fails here,
before anything is sent.

Endpoints live under ``{tracking_uri}/api/3.0/mlflow/``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from tracewire.config import Settings, get_settings
from tracewire.entities.trace import Trace
from tracewire.entities.trace_info import TraceInfo
from tracewire.errors import TraceStoreConnectionError, TraceStoreError
from tracewire.observability.events import log_event

API_PREFIX = '/api/3.0/mlflow'


@dataclass(frozen=True)
class TraceStoreConfig:
    """Configuration for the trace-store client."""

    tracking_uri: str
    token: str | None = None
    timeout: float = 30.0
    strict_decoding: bool = False


@dataclass(frozen=True)
class TraceSearchPage:
    """One page of ``search_traces`` results."""

    traces: list[Trace] = field(default_factory=list)
    next_page_token: str | None = None


class TraceStoreClient:
    """Submits built traces to a remote trace store and reads them back."""

    def __init__(self, config: TraceStoreConfig, client: httpx.AsyncClient | None = None) -> None:
        self._cfg = config
        self._client = client

    @staticmethod
    def from_env(settings: Settings | None = None) -> 'TraceStoreClient':
        settings = settings or get_settings()
        cfg = TraceStoreConfig(
            tracking_uri=settings.tracking_uri,
            token=settings.token,
            timeout=settings.request_timeout,
            strict_decoding=settings.strict_decoding,
        )
        return TraceStoreClient(cfg)

    async def log_trace(self, trace: Trace) -> TraceInfo:
        """Submit a finished trace.

        Returns:
            The ``TraceInfo`` the store recorded.

        Raises:
            TraceSerializationError: If the trace can't be encoded.
            TraceStoreError: If the store rejects the request.
        """
        body = trace.to_json(envelope='trace')
        data = await self._request('POST', 'traces', content=body, trace_id=trace.info.trace_id)
        info = data.get('trace_info', data)
        if not isinstance(info, dict):
            raise TraceStoreError('Invalid trace_info data in response', body=data)
        return TraceInfo.from_dict(info, strict=self._cfg.strict_decoding)

    async def get_trace(self, trace_id: str) -> Trace:
        data = await self._request('POST', 'traces/get', payload={'trace_id': trace_id}, trace_id=trace_id)
        trace = data.get('trace', data)
        if not isinstance(trace, dict):
            raise TraceStoreError('Invalid trace data in response', body=data)
        return Trace.from_dict(trace, strict=self._cfg.strict_decoding)

    async def search_traces(
        self,
        experiment_ids: list[str],
        *,
        filter_string: str | None = None,
        max_results: int = 1000,
        order_by: list[str] | None = None,
        page_token: str | None = None,
        run_id: str | None = None,
        model_id: str | None = None,
    ) -> TraceSearchPage:
        params: dict[str, Any] = {
            'experiment_ids': experiment_ids,
            'max_results': max_results,
        }
        if filter_string:
            params['filter'] = filter_string
        if order_by:
            params['order_by'] = order_by
        if page_token:
            params['page_token'] = page_token
        if run_id:
            params['run_id'] = run_id
        if model_id:
            params['model_id'] = model_id

        data = await self._request('POST', 'traces/search', payload=params)
        raw_traces = data.get('traces')
        traces = [
            Trace.from_dict(t, strict=self._cfg.strict_decoding)
            for t in (raw_traces if isinstance(raw_traces, list) else [])
            if isinstance(t, dict)
        ]
        next_page_token = data.get('next_page_token')
        return TraceSearchPage(
            traces=traces,
            next_page_token=next_page_token if isinstance(next_page_token, str) and next_page_token else None,
        )

    async def delete_traces(self, trace_ids: list[str], experiment_id: str, max_traces: int = 100) -> int:
        """Delete traces and return how many the store removed."""
        data = await self._request(
            'DELETE',
            'traces',
            payload={'experiment_id': experiment_id, 'trace_ids': trace_ids, 'max_traces': max_traces},
        )
        deleted = data.get('traces_deleted')
        if isinstance(deleted, bool) or not isinstance(deleted, int):
            raise TraceStoreError('Missing integer field traces_deleted in response', body=data)
        return deleted

    async def set_trace_tag(self, trace_id: str, key: str, value: str) -> None:
        await self._request(
            'POST',
            'traces/set-tag',
            payload={'trace_id': trace_id, 'key': key, 'value': value},
            trace_id=trace_id,
        )

    async def delete_trace_tag(self, trace_id: str, key: str) -> None:
        await self._request('DELETE', 'traces/delete-tag', payload={'trace_id': trace_id, 'key': key}, trace_id=trace_id)

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        payload: dict[str, Any] | None = None,
        content: str | None = None,
        trace_id: str = '',
    ) -> dict[str, Any]:
        url = f'{self._cfg.tracking_uri.rstrip("/")}{API_PREFIX}/{endpoint}'
        if content is None:
            content = json.dumps(payload or {})
        log_event('trace_store.request', trace_id=trace_id, method=method, endpoint=endpoint, level=logging.DEBUG)

        try:
            if self._client is not None:
                resp = await self._send(self._client, method, url, content)
            else:
                async with httpx.AsyncClient() as client:
                    resp = await self._send(client, method, url, content)
        except httpx.TransportError as exc:
            log_event('trace_store.error', trace_id=trace_id, endpoint=endpoint, error=str(exc), level=logging.ERROR)
            raise TraceStoreConnectionError(f'Could not reach trace store at {url}: {exc}') from exc

        body = _decode_body(resp)
        if resp.is_error:
            log_event(
                'trace_store.error',
                trace_id=trace_id,
                endpoint=endpoint,
                status_code=resp.status_code,
                level=logging.ERROR,
            )
            raise TraceStoreError.from_http_error(resp.status_code, resp.reason_phrase, body)
        if not isinstance(body, dict):
            raise TraceStoreError(f'Expected a JSON object from {endpoint}', status_code=resp.status_code, body=body)
        return body

    async def _send(self, client: httpx.AsyncClient, method: str, url: str, content: str) -> httpx.Response:
        return await client.request(
            method,
            url,
            content=content.encode('utf-8'),
            headers=self._headers(),
            timeout=self._cfg.timeout,
        )

    def _headers(self) -> dict[str, str]:
        headers = {'Content-Type': 'application/json'}
        if self._cfg.token:
            headers['Authorization'] = f'Bearer {self._cfg.token}'
        return headers


def _decode_body(resp: httpx.Response) -> Any:
    if not resp.content:
        return {}
    try:
        return resp.json()
    except ValueError:
        return resp.text
