"""
Rate limiting - per-key token buckets.
"""

from blogapi.kernel.ratelimit.token_bucket import Clock, RateLimiter, TokenBucket

__all__ = [
    "Clock",
    "RateLimiter",
    "TokenBucket",
]
