"""
FastAPI application for the webhook receiver.

Routes
- GET  /         service info
- GET  /health   health check
- POST /webhook  parse the JSON body, log it, echo it back
- anything else  404 envelope; OPTIONS on any path is a bare CORS preflight
"""
import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from webhook_receiver import envelopes
from webhook_receiver.config import Settings
from webhook_receiver.envelopes import CORS_HEADERS, PrettyJSONResponse

LOG = logging.getLogger("webhook_receiver")


class WebhookError(Exception):
    status_code = 400
    message = "Bad Request"

    def envelope(self) -> Dict[str, Any]:
        return envelopes.error(self.message)


class MalformedPayload(WebhookError):
    status_code = 400
    message = "Invalid JSON"


class PayloadTooLarge(WebhookError):
    status_code = 413
    message = "Payload Too Large"

    def __init__(self, limit: int):
        super().__init__(f"body exceeds {limit} bytes")
        self.limit = limit

    def envelope(self) -> Dict[str, Any]:
        return envelopes.error(self.message, limit=self.limit)


class PayloadTooDeep(WebhookError):
    status_code = 413
    message = "Payload Too Deep"


class BodyReadTimeout(WebhookError):
    status_code = 408
    message = "Request Timeout"

    def __init__(self, timeout: float):
        super().__init__(f"no body data for {timeout:g}s")
        self.timeout = timeout


async def read_body(request: Request, limit: int, timeout: float) -> bytes:
    """Accumulate the request body chunk by chunk, bounded in size and idle time."""
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        raise PayloadTooLarge(limit)

    body = bytearray()
    chunks = request.stream().__aiter__()
    while True:
        try:
            chunk = await asyncio.wait_for(chunks.__anext__(), timeout)
        except StopAsyncIteration:
            break
        except asyncio.TimeoutError:
            raise BodyReadTimeout(timeout) from None
        body.extend(chunk)
        if len(body) > limit:
            raise PayloadTooLarge(limit)
    return bytes(body)


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def parse_json(raw: bytes) -> Any:
    """Parse any JSON value; NaN and Infinity literals are refused.

    Nesting deeper than the interpreter can recurse is PayloadTooDeep, not
    a syntax error.
    """
    try:
        return json.loads(raw.decode("utf-8"), parse_constant=_reject_constant)
    except RecursionError:
        raise PayloadTooDeep("nesting exceeds the parser recursion limit") from None
    except ValueError as e:
        raise MalformedPayload(str(e)) from e


def _request_line(request: Request) -> str:
    target = request.url.path
    if request.url.query:
        target += "?" + request.url.query
    return f"{request.method} {target}"


def create_app(settings: Optional[Settings] = None, logger: Optional[logging.Logger] = None) -> FastAPI:
    settings = settings or Settings()
    log = logger or LOG

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("Webhook receiver ready (max body %d bytes)", settings.max_body_bytes)
        yield
        log.info("Shutting down")

    app = FastAPI(
        title=settings.service_name,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        redirect_slashes=False,
        default_response_class=PrettyJSONResponse,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.log = log

    @app.middleware("http")
    async def cors(request: Request, call_next):
        # Preflight answers before routing.
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS, media_type="application/json")
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            log.debug("No route for %s", _request_line(request))
            return PrettyJSONResponse(
                envelopes.not_found(request.url.path, request.method), status_code=404
            )
        return PrettyJSONResponse(envelopes.error(str(exc.detail)), status_code=exc.status_code)

    @app.exception_handler(WebhookError)
    async def webhook_error(request: Request, exc: WebhookError):
        return PrettyJSONResponse(exc.envelope(), status_code=exc.status_code)

    @app.get("/")
    async def info():
        return envelopes.info(settings.service_name)

    @app.get("/health")
    async def health():
        return envelopes.health()

    @app.post("/webhook")
    async def webhook(request: Request):
        line = _request_line(request)
        headers = json.dumps(dict(request.headers), indent=2)
        try:
            raw = await read_body(request, settings.max_body_bytes, settings.body_read_timeout)
        except (PayloadTooLarge, BodyReadTimeout) as e:
            log.warning("Rejected webhook %s: %s", line, e)
            raise

        try:
            data = parse_json(raw)
        except PayloadTooDeep as e:
            log.warning("Rejected webhook %s: %s", line, e)
            raise
        except MalformedPayload as e:
            log.error("Error parsing JSON at %s: %s (%s)", envelopes.utc_now_iso(), line, e)
            log.error("Headers: %s", headers)
            log.error("Raw body: %s", raw.decode("utf-8", "replace"))
            raise

        response = envelopes.received(data)
        log.info("Webhook received at %s: %s", response["timestamp"], line)
        log.info("Headers: %s", headers)
        log.info("Body: %s", json.dumps(data, indent=2, ensure_ascii=False))
        return response

    return app
