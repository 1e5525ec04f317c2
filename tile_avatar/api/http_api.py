"""
HTTP API adapter for the avatar renderer.

Architectural role:
- Expose the avatar endpoint over HTTP.
- Enforce adapter-level input validation.
- Delegate rendering to `tile_avatar.render.compositor.render_avatar`.
- Translate failures into structured JSON error responses.

Endpoint responsibilities:
- `GET /api` (alias `GET /`): render one avatar PNG from query parameters.
- `GET /health`: liveness probe.

API request lifecycle (`GET /api`):
1. Read `address` (required) and `data` (optional) query parameters.
2. Reject a missing/blank `address` before any rendering work starts.
3. Await `render_avatar(address, data)`.
4. Return the PNG body with `Content-Type: image/png`.

Input validation behavior:
- Missing or blank `address` -> HTTP 400.
- `address` shape is not validated beyond presence and is seeded exactly
  as received (surrounding whitespace included).
- Empty `data` is treated as absent.

Error handling strategy:
- Validation failures return `{"error": ...}` with HTTP 400.
- Watermark failures and any other exception are logged with traceback and
  returned as a generic HTTP 500 `{"error": "Internal server error"}`.
- No partial image is ever returned.

Side effects:
- Network fetch of the watermark on first use (or on every request when the
  watermark cache is disabled).
- Loads environment variables at import time via `tile_avatar.config`.

Determinism considerations:
- The response body is a pure function of `(address, data)` and the
  watermark resource, so successful responses carry a `Cache-Control` header.
"""

import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from tile_avatar.config import CACHE_MAX_AGE_SECONDS, DEBUG
from tile_avatar.image.watermark import WatermarkError
from tile_avatar.render.compositor import render_avatar

logger = logging.getLogger(__name__)

app = FastAPI(title="Tile Avatar API", version="1.0.0")

MISSING_ADDRESS_ERROR = "Valid Ethereum address is required"
INTERNAL_ERROR = "Internal server error"


# ============================================================
# Response Schema
# ============================================================

class ErrorPayload(BaseModel):
    """Structured error body returned for 4xx/5xx responses."""

    error: str


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorPayload(error=message).model_dump(),
    )


# ============================================================
# Health
# ============================================================

@app.get("/health")
async def health():
    return {"status": "ok"}


# ============================================================
# Avatar Rendering
# ============================================================

@app.get(
    "/api",
    response_class=Response,
    responses={
        200: {"content": {"image/png": {}}},
        400: {"model": ErrorPayload},
        500: {"model": ErrorPayload},
    },
)
@app.get("/", response_class=Response, include_in_schema=False)
async def avatar(address: str | None = None, data: str | None = None):
    """
    Render the avatar PNG for `address` (and optional `data`).

    Input validation behavior:
    - Returns HTTP 400 when `address` is missing or blank; the renderer is
      not invoked in that case.

    Error handling strategy:
    - `WatermarkError` -> logged, HTTP 500.
    - Any other exception -> logged, HTTP 500.
    """
    if not address or not address.strip():
        return error_response(400, MISSING_ADDRESS_ERROR)

    if DEBUG:
        logger.debug("Avatar request address=%r data=%r", address, data)

    try:
        png = await render_avatar(address, data or None)
    except WatermarkError:
        logger.exception("Watermark unavailable for address=%r", address)
        return error_response(500, INTERNAL_ERROR)
    except Exception:
        logger.exception("Error processing avatar request for address=%r", address)
        return error_response(500, INTERNAL_ERROR)

    return Response(
        content=png,
        media_type="image/png",
        headers={"Cache-Control": f"public, max-age={CACHE_MAX_AGE_SECONDS}"},
    )
