"""
Generic error bodies shared by middleware and exception handlers.

Clients only ever see these strings; why a request was rejected is logged.
"""

import math
from typing import Mapping, Optional

from fastapi import status
from fastapi.responses import JSONResponse

from blogapi.kernel.errors import RateLimitExceeded
from blogapi.kernel.visibility.policy import Decision

NOT_AUTHENTICATED = "Not authenticated"
FORBIDDEN = "Forbidden"
NOT_FOUND = "Not found"
TOO_MANY_REQUESTS = "Too many requests. Please try again later."

_DECISION_STATUS = {
    Decision.DENY_NOT_FOUND: (status.HTTP_404_NOT_FOUND, NOT_FOUND),
    Decision.DENY_FORBIDDEN: (status.HTTP_403_FORBIDDEN, FORBIDDEN),
}


def status_for_decision(decision: Decision) -> tuple[int, str]:
    """HTTP status code and body detail for a denying decision."""
    return _DECISION_STATUS[decision]


def error_response(
    status_code: int,
    detail: str,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    """
    Build a ``{"detail": ...}`` response.

    Middleware has to return responses directly; exceptions raised inside a
    BaseHTTPMiddleware never reach the application's exception handlers.
    """
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail},
        headers=dict(headers) if headers else None,
    )


def rate_limited_response(exc: RateLimitExceeded) -> JSONResponse:
    """429 with a whole-second ``Retry-After``."""
    retry_after = max(1, math.ceil(exc.retry_after)) if math.isfinite(exc.retry_after) else 60
    return error_response(
        status.HTTP_429_TOO_MANY_REQUESTS,
        TOO_MANY_REQUESTS,
        headers={"Retry-After": str(retry_after)},
    )
