"""API Gateway response builders for the public contact endpoints."""

import json
import os
from datetime import datetime
from typing import Any

from pydantic import BaseModel as PydanticBaseModel

# Site allowed to call the public API; localhost is also allowed in dev
_ALLOWED_ORIGIN = os.environ.get("CORS_ALLOWED_ORIGIN", "https://dev.example.com")
_STAGE = os.environ.get("STAGE", "dev")


def get_cors_headers(request_origin: str | None = None) -> dict[str, str]:
    """Get CORS headers for a response to the given origin."""
    origin = _ALLOWED_ORIGIN
    if _STAGE == "dev" and request_origin and request_origin.startswith("http://localhost:"):
        origin = request_origin

    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,X-Api-Key,X-Amz-Security-Token",
        "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
        "Content-Type": "application/json",
    }


CORS_HEADERS = get_cors_headers()


def _default(obj: Any) -> Any:
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, PydanticBaseModel):
        return obj.model_dump(mode="json", by_alias=True)
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def build_response(
    status_code: int,
    body: Any,
    request_origin: str | None = None,
    headers: dict[str, str] | None = None,
) -> dict:
    """Build an API Gateway proxy response with a JSON body.

    Args:
        status_code: HTTP status code.
        body: Dict, list or Pydantic model (dumped with camelCase aliases).
        request_origin: Origin header of the request, for CORS.
        headers: Extra headers, e.g. Retry-After.
    """
    return {
        "statusCode": status_code,
        "headers": {**get_cors_headers(request_origin), **(headers or {})},
        "body": json.dumps(body, default=_default),
    }


def success(data: Any, status_code: int = 200, request_origin: str | None = None) -> dict:
    """Create a response carrying a result body."""
    return build_response(status_code, data, request_origin)


def error(
    message: str,
    status_code: int = 500,
    error_code: str | None = None,
    details: dict | None = None,
    request_origin: str | None = None,
) -> dict:
    """Create an error response.

    Body is ``{"error": true, "message": ..., "error_code"?, "details"?}``.
    """
    body: dict[str, Any] = {"error": True, "message": message}
    if error_code:
        body["error_code"] = error_code
    if details:
        body["details"] = details

    return build_response(status_code, body, request_origin)
