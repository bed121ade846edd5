# ------------------------------------------------------------------------------
# Stub transport for the remote trace store
# ------------------------------------------------------------------------------
from httpx import Response, Request
import json


class TraceStoreStub:
    """
    In-memory stand-in for the trace store's HTTP API.

    Records every request it sees so tests can assert on the exact wire body.
    """

    def __init__(self) -> None:
        self.requests: list[Request] = []
        self.traces: dict[str, dict] = {}
        self.tags: dict[str, dict[str, str]] = {}

    def body_of(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content.decode("utf-8"))

    def __call__(self, request: Request) -> Response:
        self.requests.append(request)
        path = request.url.path
        payload = json.loads(request.content.decode("utf-8")) if request.content else {}

        if path == "/api/3.0/mlflow/traces" and request.method == "POST":
            trace = payload["trace"]
            trace_id = trace["info"]["trace_id"]
            self.traces[trace_id] = trace
            return Response(status_code=200, json={"trace_info": trace["info"]})

        if path == "/api/3.0/mlflow/traces" and request.method == "DELETE":
            deleted = [t for t in payload["trace_ids"] if self.traces.pop(t, None) is not None]
            return Response(status_code=200, json={"traces_deleted": len(deleted)})

        if path == "/api/3.0/mlflow/traces/get":
            trace = self.traces.get(payload["trace_id"])
            if trace is None:
                return Response(
                    status_code=404,
                    json={"error_code": "RESOURCE_DOES_NOT_EXIST", "message": "Trace not found"},
                )
            return Response(status_code=200, json={"trace": trace})

        if path == "/api/3.0/mlflow/traces/search":
            traces = [
                t for t in self.traces.values()
                if t["info"]["trace_location"].get("experiment_id") in payload["experiment_ids"]
            ]
            return Response(status_code=200, json={"traces": traces, "next_page_token": ""})

        if path == "/api/3.0/mlflow/traces/set-tag":
            self.tags.setdefault(payload["trace_id"], {})[payload["key"]] = payload["value"]
            return Response(status_code=200, json={})

        if path == "/api/3.0/mlflow/traces/delete-tag":
            self.tags.get(payload["trace_id"], {}).pop(payload["key"], None)
            return Response(status_code=200, json={})

        return Response(status_code=404, json={"error": f"Unhandled path {path}"})
