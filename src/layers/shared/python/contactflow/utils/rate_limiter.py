"""Rate limiting for public contact submissions.

Fixed-window counters stored in DynamoDB with a TTL. Each submission is
counted against per-IP minute and hour windows and a per-email day window.
"""

import hashlib
import os
import time
from typing import NamedTuple

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from contactflow.utils.responses import build_response

logger = structlog.get_logger()


class RateLimitRule(NamedTuple):
    """One counting window."""

    scope: str  # "ip" or "email"
    window_seconds: int
    limit: int


class RateLimitResult(NamedTuple):
    """Result of a rate limit check."""

    allowed: bool
    retry_after: int | None  # Seconds until the blocking window resets
    scope: str | None = None


DEFAULT_RULES = (
    RateLimitRule("ip", 60, 5),
    RateLimitRule("ip", 3600, 30),
    RateLimitRule("email", 86400, 20),
)


class SubmissionRateLimiter:
    """Counts submissions per client IP and per submitter email."""

    def __init__(
        self,
        table_name: str | None = None,
        rules: tuple[RateLimitRule, ...] = DEFAULT_RULES,
    ):
        """Initialize the limiter.

        Args:
            table_name: DynamoDB table name. Defaults to TABLE_NAME env var.
            rules: Windows to enforce, checked in order.
        """
        self.table_name = table_name or os.environ.get("TABLE_NAME", "contactflow-dev")
        self.rules = rules
        self._table = None

    @property
    def table(self):
        """Get DynamoDB table (lazy initialization)."""
        if self._table is None:
            self._table = boto3.resource("dynamodb").Table(self.table_name)
        return self._table

    def check(self, client_ip: str, email: str | None = None) -> RateLimitResult:
        """Count a submission and decide whether it may proceed.

        Fails open: if DynamoDB is unavailable the submission is allowed.

        Args:
            client_ip: Client IP address.
            email: Submitter email, if known.

        Returns:
            RateLimitResult for the first window that is exceeded, or allowed.
        """
        now = int(time.time())
        identifiers = {"ip": client_ip, "email": _hash_email(email) if email else None}

        try:
            for rule in self.rules:
                identifier = identifiers.get(rule.scope)
                if not identifier:
                    continue

                count = self._increment(rule, identifier, now)
                if count > rule.limit:
                    logger.warning(
                        "Submission rate limit exceeded",
                        scope=rule.scope,
                        window_seconds=rule.window_seconds,
                        count=count,
                        limit=rule.limit,
                    )
                    return RateLimitResult(
                        allowed=False,
                        retry_after=rule.window_seconds - (now % rule.window_seconds),
                        scope=rule.scope,
                    )
        except (ClientError, BotoCoreError) as e:
            logger.error("Rate limiter DynamoDB error", error=str(e))
            return RateLimitResult(allowed=True, retry_after=None)

        return RateLimitResult(allowed=True, retry_after=None)

    def _increment(self, rule: RateLimitRule, identifier: str, now: int) -> int:
        window = now // rule.window_seconds
        response = self.table.update_item(
            Key={
                "PK": f"RATELIMIT#contact#{rule.scope}#{rule.window_seconds}#{window}",
                "SK": identifier,
            },
            UpdateExpression="SET #count = if_not_exists(#count, :zero) + :inc, #ttl = :ttl",
            ExpressionAttributeNames={"#count": "count", "#ttl": "ttl"},
            ExpressionAttributeValues={
                ":zero": 0,
                ":inc": 1,
                ":ttl": now + 2 * rule.window_seconds,
            },
            ReturnValues="ALL_NEW",
        )
        return int(response["Attributes"]["count"])


def _hash_email(email: str) -> str:
    """Hash an email address so counters never store it in clear."""
    return hashlib.sha256(email.strip().lower().encode("utf-8")).hexdigest()[:32]


def get_client_ip(event: dict) -> str:
    """Extract client IP from an API Gateway event.

    Prefers the first X-Forwarded-For address (requests behind CloudFront/ALB).
    """
    headers = event.get("headers", {}) or {}
    request_context = event.get("requestContext", {}) or {}
    identity = request_context.get("identity", {}) or {}

    forwarded_for = headers.get("X-Forwarded-For") or headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    return identity.get("sourceIp", "unknown")


def rate_limit_response(result: RateLimitResult, request_origin: str | None = None) -> dict:
    """Generate a 429 Too Many Requests response."""
    retry_after = result.retry_after or 60
    message = (
        "Too many submissions from this email. Please try again tomorrow."
        if result.scope == "email"
        else "Too many submissions. Please try again later."
    )
    return build_response(
        429,
        {
            "success": False,
            "error": "RATE_LIMITED",
            "message": message,
            "retry_after": retry_after,
        },
        request_origin=request_origin,
        headers={"Retry-After": str(retry_after)},
    )
