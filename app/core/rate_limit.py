"""HTTP helpers for rate limiting: caller identification and response headers.

The limiter itself runs inside the intake pipeline; this module only maps
between the HTTP request/response and the limiter's inputs/outputs.

Caller identification:
- Use the configured proxy header (``CF-Connecting-IP`` by default) when present.
- Otherwise fall back to the first ``X-Forwarded-For`` hop, then the socket peer.
"""

from __future__ import annotations

from fastapi import Request

from app.core.errors import ErrorDetails

UNKNOWN_CLIENT = "unknown"


def get_client_ip(request: Request, header_name: str) -> str:
    """Resolve the caller's network address.

    Args:
        request: FastAPI request.
        header_name: Header set by the trusted edge proxy.

    Returns:
        str: Caller address, or "unknown".
    """

    direct = request.headers.get(header_name)
    if direct and direct.strip():
        return direct.strip()

    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    return request.client.host if request.client else UNKNOWN_CLIENT


def build_rate_limit_headers(details: ErrorDetails | None, *, include_limits: bool) -> dict[str, str]:
    """Build throttling headers for a 429 response.

    ``Retry-After`` is always set; ``X-RateLimit-*`` headers only when enabled.

    Args:
        details: Details of the RateLimitAppError.
        include_limits: Whether to add X-RateLimit-Limit/Remaining.

    Returns:
        dict[str, str]: Response headers.
    """

    details = details or {}
    headers = {"Retry-After": str(details.get("retry_after", 0))}
    if include_limits and "limit" in details:
        headers["X-RateLimit-Limit"] = str(details["limit"])
        headers["X-RateLimit-Remaining"] = "0"
    return headers
