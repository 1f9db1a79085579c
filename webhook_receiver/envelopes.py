"""
Response envelopes.

Every response body is a JSON object with a ``status`` discriminator and a
``timestamp`` taken when the envelope is built.
"""
import json
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi.responses import JSONResponse

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

ENDPOINTS = [
    "POST /webhook - Receive webhooks",
    "GET /health - Health check",
    "GET / - This info",
]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


class PrettyJSONResponse(JSONResponse):
    """JSONResponse rendered with a two-space indent."""

    def render(self, content: Any) -> bytes:
        return json.dumps(
            content,
            ensure_ascii=False,
            allow_nan=False,
            indent=2,
        ).encode("utf-8")


def info(service_name: str) -> Dict[str, Any]:
    return {
        "service": service_name,
        "status": "running",
        "endpoints": list(ENDPOINTS),
        "timestamp": utc_now_iso(),
    }


def health() -> Dict[str, Any]:
    return {
        "status": "OK",
        "service": "webhook-receiver",
        "timestamp": utc_now_iso(),
    }


def received(data: Any) -> Dict[str, Any]:
    return {
        "status": "received",
        "timestamp": utc_now_iso(),
        "data": data,
    }


def error(message: str, **extra: Any) -> Dict[str, Any]:
    envelope: Dict[str, Any] = {"status": "error", "message": message}
    envelope.update(extra)
    envelope["timestamp"] = utc_now_iso()
    return envelope


def not_found(path: str, method: str) -> Dict[str, Any]:
    return error("Not Found", path=path, method=method)
