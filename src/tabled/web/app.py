"""FastAPI web server exposing the table formatter over HTTP.

Endpoints:
    GET  /health  -- liveness check
    POST /format  -- plain-text or JSON ({"data": ...} / {"text": ...}) body in,
                     markdown table(s) out as text/plain; optional ?maxWidth=N

Every request passes through a per-client fixed-window rate limiter.

Usage:
    python -m tabled.web.app
    # => Uvicorn running on http://0.0.0.0:3000
"""

import json
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tabled.config import HOST, MAX_BODY_BYTES, MIN_REQUEST_WIDTH, PORT, RATE_LIMIT_MAX, RATE_LIMIT_WINDOW_SECONDS
from tabled.formatter import format_table
from tabled.parsers import parse
from tabled.patterns import BYTE_ORDER_MARK, MAX_TABLE_WIDTH
from tabled.schema import ErrorBody, FormatRequest
from tabled.web.rate_limit import FixedWindowRateLimiter

logger = logging.getLogger(__name__)

SERVICE_NAME = "tabled"

AVAILABLE_ENDPOINTS = {
    "GET /health": "Health check",
    "POST /format": "Format tabular data as markdown table",
}

# ---------------------------------------------------------------------------
# In-memory state (ephemeral, lost on server restart)
# ---------------------------------------------------------------------------

_RATE_LIMITER = FixedWindowRateLimiter(RATE_LIMIT_MAX, RATE_LIMIT_WINDOW_SECONDS)


def reset_rate_limits() -> None:
    """Clear all per-client request counts."""
    _RATE_LIMITER.reset()


# ---------------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------------


class RequestError(Exception):
    """A client error that maps directly to a JSON error response (400 unless stated)."""

    def __init__(self, error: str, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code
        self.body = ErrorBody(error=error, message=message)


def _payload_too_large() -> RequestError:
    """413 error for bodies over MAX_BODY_BYTES."""
    return RequestError("Payload too large", f"Request body must not exceed {MAX_BODY_BYTES} bytes", status_code=413)


async def _read_body(request: Request) -> bytes:
    """Read the request body, refusing anything over MAX_BODY_BYTES.

    The declared Content-Length is checked first; the bytes actually received
    are counted as well, since chunked requests carry no length.
    """
    declared = request.headers.get("content-length", "").strip()
    if declared.isdigit() and int(declared) > MAX_BODY_BYTES:
        raise _payload_too_large()

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > MAX_BODY_BYTES:
            raise _payload_too_large()
    return bytes(body)


def _error_response(status_code: int, error: str, message: str, **extra) -> JSONResponse:
    """Build a JSON error response in the service's uniform shape."""
    return JSONResponse(status_code=status_code, content={**ErrorBody(error=error, message=message).model_dump(), **extra})


async def _read_input(request: Request) -> str:
    """Extract the table text from a text/* body or a JSON body with a ``data``/``text`` string."""
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    body = await _read_body(request)

    if content_type.startswith("text/"):
        return body.decode("utf-8-sig", errors="replace")

    if content_type == "application/json":
        try:
            text = FormatRequest.model_validate(json.loads(body)).input_text()
        except ValueError:  # malformed JSON, bad encoding, or a non-object body
            text = None
        if text is not None:
            return text

    raise RequestError("Invalid request", 'Request body must be plain text or JSON with "data" or "text" field')


def _read_max_width(request: Request) -> int:
    """Return the ``maxWidth`` query parameter, or the default when absent or empty."""
    raw = request.query_params.get("maxWidth", "").strip()
    if not raw:
        return MAX_TABLE_WIDTH
    try:
        max_width = int(raw)
    except ValueError:
        max_width = None
    if max_width is None or max_width < MIN_REQUEST_WIDTH:
        raise RequestError("Invalid parameter", f"maxWidth must be a number >= {MIN_REQUEST_WIDTH}")
    return max_width


# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Log the available endpoints and rate limit on startup."""
    logger.info("Tabled API server ready, endpoints: %s", ", ".join(AVAILABLE_ENDPOINTS))
    logger.info("Rate limit: %d requests per %d seconds per client", _RATE_LIMITER.max_requests, _RATE_LIMITER.window_seconds)
    yield


app = FastAPI(title="Tabled", lifespan=lifespan)


@app.middleware("http")
async def rate_limit(request: Request, call_next):
    """Reject clients that exceeded their request budget; tag every response with RateLimit-* headers."""
    client = request.client.host if request.client else "unknown"
    state = _RATE_LIMITER.hit(client)
    if not state.allowed:
        logger.warning("Rate limit exceeded for %s", client)
        response = _error_response(429, "Too many requests", "You have exceeded the rate limit. Please try again later.")
    else:
        response = await call_next(request)
    response.headers.update(state.headers())
    return response


@app.exception_handler(StarletteHTTPException)
async def not_found(request: Request, exc: StarletteHTTPException):
    """Answer unknown routes (and wrong methods) with a JSON 404 listing the real endpoints."""
    if exc.status_code not in (404, 405):
        return _error_response(exc.status_code, "HTTP error", str(exc.detail))
    return _error_response(
        404,
        "Not found",
        f"Endpoint {request.method} {request.url.path} not found",
        availableEndpoints=AVAILABLE_ENDPOINTS,
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/health")
async def health():
    """Report that the service is up."""
    return {"status": "ok", "service": SERVICE_NAME}


@app.post("/format")
async def format_endpoint(request: Request):
    """Parse the request body as a table and return it as aligned markdown."""
    try:
        text = await _read_input(request)
        if not text.removeprefix(BYTE_ORDER_MARK).strip():
            raise RequestError("Invalid request", "Input data cannot be empty")
        grid = parse(text)
        if not grid:
            raise RequestError("Parse error", "Could not parse input data as a table")
        max_width = _read_max_width(request)
        output = format_table(grid, max_width=max_width)

    except RequestError as exc:
        logger.info("Rejected request (%d): %s", exc.status_code, exc.body.message)
        return JSONResponse(status_code=exc.status_code, content=exc.body.model_dump())
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logger.exception("Error processing request")
        return _error_response(500, "Internal server error", str(exc))

    return PlainTextResponse(output)


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main():
    """Start the web server via uvicorn."""
    import uvicorn  # pylint: disable=import-outside-toplevel

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host=HOST, port=PORT)


if __name__ == "__main__":
    main()
