"""Public contact form API handler (no authentication required)."""

import asyncio
import json
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from contactflow.config import ContactSettings
from contactflow.factory import build_engine, build_status_probe
from contactflow.models.health import HealthState
from contactflow.models.outcome import FailureKind, SubmissionResult
from contactflow.utils.rate_limiter import (
    SubmissionRateLimiter,
    get_client_ip,
    rate_limit_response,
)
from contactflow.utils.responses import error, success

logger = structlog.get_logger()

HONEYPOT_FIELDS = ("_honeypot", "honeypot", "website")

FAILURE_STATUS_CODES = {
    FailureKind.VALIDATION: 422,
    FailureKind.DELIVERY: 503,
    FailureKind.UNEXPECTED: 503,
}


def handler(event: dict[str, Any], context: Any) -> dict:
    """Handle public contact API requests.

    Routes:
        POST /public/contact         - Submit the contact form
        GET  /public/contact/status  - Check persistence and notification health
    """
    try:
        http_method = event.get("httpMethod", "").upper()
        path = event.get("path", "")
        origin = _request_origin(event)

        if path.rstrip("/").endswith("/public/contact/status") and http_method == "GET":
            return get_status(origin)
        elif path.rstrip("/").endswith("/public/contact") and http_method == "POST":
            return submit_contact(event, origin)
        else:
            return error("Not found", 404)

    except PydanticValidationError as e:
        logger.error("Invalid contact settings", errors=e.errors())
        return error("Service misconfigured", 500, error_code="CONFIGURATION_ERROR")
    except ValueError as e:
        return error(str(e), 400)
    except Exception as e:
        logger.exception("Contact handler error", error=str(e))
        return error("Internal server error", 500)


def submit_contact(event: dict, origin: str | None = None) -> dict:
    """Run one submission through the reconciliation engine.

    Rate limited per client IP and per submitter email.
    """
    try:
        body = json.loads(event.get("body") or "{}")
    except json.JSONDecodeError:
        return error("Invalid JSON body", 400)

    if not isinstance(body, dict):
        return error("Request body must be a JSON object", 400)

    # Bots fill hidden fields; pretend success so they don't retry
    if any(body.get(field) for field in HONEYPOT_FIELDS):
        logger.info("Honeypot triggered on contact form")
        return success(
            {"success": True, "message": "Thank you for your submission!"},
            request_origin=origin,
        )

    client_ip = get_client_ip(event)
    email = body.get("email") if isinstance(body.get("email"), str) else None
    rate_check = SubmissionRateLimiter().check(client_ip, email=email)
    if not rate_check.allowed:
        return rate_limit_response(rate_check, request_origin=origin)

    fields = {k: v for k, v in body.items() if k not in HONEYPOT_FIELDS}

    settings = ContactSettings.from_env()
    engine = build_engine(settings)

    loop = asyncio.new_event_loop()
    try:
        result = loop.run_until_complete(engine.process(fields))
    finally:
        loop.close()

    logger.info(
        "Contact submission handled",
        success=result.success,
        failure_kind=result.failure_kind.value if result.failure_kind else None,
    )
    return success(result.to_response(), _status_code(result), request_origin=origin)


def get_status(origin: str | None = None) -> dict:
    """Report channel health. 503 only when both channels are down."""
    settings = ContactSettings.from_env()
    probe = build_status_probe(settings)

    loop = asyncio.new_event_loop()
    try:
        health = loop.run_until_complete(probe.check_health())
    finally:
        loop.close()

    status_code = 503 if health.overall == HealthState.DOWN else 200
    return success(health.to_response(), status_code, request_origin=origin)


def _status_code(result: SubmissionResult) -> int:
    if result.success:
        return 200
    return FAILURE_STATUS_CODES.get(result.failure_kind, 503)


def _request_origin(event: dict) -> str | None:
    headers = event.get("headers", {}) or {}
    return headers.get("origin") or headers.get("Origin")
