"""
Rate limiting for credential endpoints.

Login and registration each get their own token-bucket limiter keyed by
client IP. Other routes pass straight through.
"""

from typing import Callable, Mapping, Tuple

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from blogapi.api.deps import get_client_ip
from blogapi.api.errors import rate_limited_response
from blogapi.kernel.errors import RateLimitExceeded
from blogapi.kernel.ratelimit import RateLimiter
from blogapi.logging_config import get_logger

logger = get_logger(__name__)

RouteKey = Tuple[str, str]  # (method, path)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Apply a limiter per (method, path).

    The limiters are built by the application factory and handed in; this
    middleware owns no counters of its own.
    """

    def __init__(
        self,
        app: ASGIApp,
        limiters: Mapping[RouteKey, RateLimiter],
        trust_forwarded_for: bool = False,
    ):
        super().__init__(app)
        self.limiters = {(method.upper(), path.rstrip("/")): lim for (method, path), lim in limiters.items()}
        self.trust_forwarded_for = trust_forwarded_for

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path.rstrip("/")
        limiter = self.limiters.get((request.method, path))
        if limiter is None:
            return await call_next(request)

        client_ip = get_client_ip(request, self.trust_forwarded_for)
        if limiter.try_consume(client_ip):
            return await call_next(request)

        exc = RateLimitExceeded(limiter.retry_after(client_ip))
        logger.warning(
            "Rate limit exceeded",
            extra={
                "client_ip": client_ip,
                "path": path,
                "retry_after": round(exc.retry_after, 1),
            },
        )
        return rate_limited_response(exc)
