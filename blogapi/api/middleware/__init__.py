"""
Request pipeline stages, outermost first: request id, rate limit, authentication.
"""

from blogapi.api.middleware.authentication import AuthenticationMiddleware, extract_token
from blogapi.api.middleware.rate_limit import RateLimitMiddleware
from blogapi.api.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware

__all__ = [
    "AuthenticationMiddleware",
    "extract_token",
    "RateLimitMiddleware",
    "REQUEST_ID_HEADER",
    "RequestIdMiddleware",
]
