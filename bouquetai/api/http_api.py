"""
HTTP credential relay in front of the AI providers.

Architectural role:
- Accept same-origin requests from the generation pipeline (or a browser client).
- Validate required credential headers before any outbound call.
- Forward bodies to the upstream provider and relay the response.
- Translate upstream and local failures into one JSON error envelope.

Endpoint responsibilities:
- `POST /api/openai/v1/{endpoint}`: generic pass-through to the OpenAI API,
  rewriting only the path suffix and the `Authorization` header.
- `POST /api/yandex/v1/completion`: YandexGPT completion.
- `POST /api/yandex/v1/images/generations`: YandexART async job submission.
- `GET /api/yandex/v1/operations/{operation_id}`: YandexART operation status.
- `GET /health`: liveness probe.

Error envelope:
- Missing header -> 400 `{"error": {"message", "type": "validation_error"}}`.
- Upstream non-2xx -> upstream status, `{"error": {"message", "type": "api_error", "details"}}`.
- Unhandled exception -> 500 with the same envelope.
- Wrong HTTP method -> 405 `{"error": {"message": "Method not allowed"}}`.

Side effects:
- Outbound HTTPS calls via `httpx.AsyncClient`.
- Emits debug logs only when `DEBUG == "true"`; credentials are masked.
"""

import logging
from typing import Any

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from bouquetai import config
from bouquetai.logging_config import configure_logging
from bouquetai.transport import mask_headers

configure_logging()

logger = logging.getLogger(__name__)

app = FastAPI(title="BouquetAI relay")

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]
ERROR_DETAIL_CHARS = 200


# ============================================================
# Envelope helpers
# ============================================================

class ErrorBody(BaseModel):
    message: str
    type: str | None = None
    details: Any = None


class ErrorEnvelope(BaseModel):
    """Relay error schema shared by every failure path."""

    error: ErrorBody


def error_response(status_code: int, message: str, error_type: str | None = None, details: Any = None):
    """Build the relay's JSON error envelope."""
    envelope = ErrorEnvelope(error=ErrorBody(message=message, type=error_type, details=details))
    return JSONResponse(status_code=status_code, content=envelope.model_dump(exclude_none=True))


def method_not_allowed():
    return error_response(405, "Method not allowed")


def validation_error(message: str):
    return error_response(400, message, "validation_error")


def upstream_message(data: Any, default: str) -> str:
    """Pick the most specific error message from an upstream body."""
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if data.get("message"):
            return str(data["message"])
    return default


def _decode(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {"message": response.text[:ERROR_DETAIL_CHARS]}


# ============================================================
# Forwarding
# ============================================================

async def forward(
    method: str,
    url: str,
    headers: dict[str, str],
    body: Any = None,
    default_message: str = "API error",
):
    """Forward one request upstream and relay or translate the response."""
    logger.debug("Relaying %s %s headers=%s", method, url, mask_headers(headers))
    try:
        async with httpx.AsyncClient(timeout=config.RELAY_TIMEOUT_SECONDS) as client:
            upstream = await client.request(method, url, headers=headers, json=body)

        data = _decode(upstream)
        logger.debug("Upstream %s responded %d", url, upstream.status_code)

        if upstream.is_success:
            return JSONResponse(status_code=upstream.status_code, content=data)

        logger.warning("Upstream error %d from %s", upstream.status_code, url)
        return error_response(
            upstream.status_code,
            upstream_message(data, default_message),
            "api_error",
            data,
        )
    except Exception as exc:
        logger.exception("Relay error for %s", url)
        return error_response(500, str(exc) or "Internal server error", "api_error")


async def read_body(request: Request):
    """Return the parsed JSON body or `None` when it is not valid JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


def yandex_headers(request: Request):
    """Return forwarded Yandex headers, or an error response for missing ones."""
    authorization = request.headers.get("authorization", "")
    folder_id = request.headers.get("x-folder-id", "")

    if not authorization:
        return None, validation_error("Missing Authorization header")
    if not folder_id:
        return None, validation_error("Missing x-folder-id header")

    return {
        "Content-Type": "application/json",
        "Authorization": authorization,
        "x-folder-id": folder_id,
    }, None


# ============================================================
# Application-level error handlers
# ============================================================

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        return method_not_allowed()
    return error_response(exc.status_code, str(exc.detail), "api_error")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled relay error on %s %s", request.method, request.url.path)
    return error_response(500, str(exc) or "Internal server error", "api_error")


# ============================================================
# Routes
# ============================================================

@app.get("/health")
def health():
    return {"status": "ok"}


@app.api_route("/api/openai/v1/{endpoint:path}", methods=ALL_METHODS)
async def openai_proxy(endpoint: str, request: Request):
    """Pass-through for any OpenAI v1 POST endpoint."""
    if request.method != "POST":
        return method_not_allowed()

    authorization = request.headers.get("authorization", "")
    if not authorization:
        return validation_error("Missing Authorization header")

    body = await read_body(request)
    if body is None:
        return validation_error("Request body must be valid JSON")

    headers = {
        "Content-Type": "application/json",
        "Authorization": authorization,
        "Accept": "application/json",
    }
    return await forward(
        "POST",
        f"{config.OPENAI_API_URL}/{endpoint}",
        headers,
        body,
        default_message="OpenAI API error",
    )


@app.api_route("/api/yandex/v1/completion", methods=ALL_METHODS)
async def yandex_completion(request: Request):
    if request.method != "POST":
        return method_not_allowed()

    headers, error = yandex_headers(request)
    if error is not None:
        return error

    body = await read_body(request)
    if body is None:
        return validation_error("Request body must be valid JSON")

    return await forward(
        "POST",
        config.YANDEX_COMPLETION_URL,
        headers,
        body,
        default_message="YandexGPT API error",
    )


@app.api_route("/api/yandex/v1/images/generations", methods=ALL_METHODS)
async def yandex_image_generation(request: Request):
    """Submit a YandexART job; the caller polls the returned operation."""
    if request.method != "POST":
        return method_not_allowed()

    headers, error = yandex_headers(request)
    if error is not None:
        return error

    body = await read_body(request)
    if body is None:
        return validation_error("Request body must be valid JSON")

    return await forward(
        "POST",
        config.YANDEX_IMAGE_URL,
        headers,
        body,
        default_message="YandexART API error",
    )


@app.api_route("/api/yandex/v1/operations/{operation_id}", methods=ALL_METHODS)
async def yandex_operation(operation_id: str, request: Request):
    if request.method != "GET":
        return method_not_allowed()

    headers, error = yandex_headers(request)
    if error is not None:
        return error
    headers.pop("Content-Type", None)

    return await forward(
        "GET",
        f"{config.YANDEX_OPERATIONS_URL}{operation_id}",
        headers,
        default_message="YandexART operation error",
    )
