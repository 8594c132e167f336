"""
Access-Control Kernel

The layer every request passes through before it reaches blog content:
- Identity Core (accounts, roles, signed credentials)
- Rate Limiter (per-key token buckets)
- Visibility Policy (hidden flag, ownership, admin override)

Invariants:
- A hidden post or comment is indistinguishable from a missing one for
  everyone but admins
- The principal is passed explicitly; there is no ambient security context
"""

from blogapi.kernel.models import (
    User,
    UserRole,
    Post,
    Comment,
    Subscription,
)
from blogapi.kernel.errors import (
    AuthFailure,
    AccessControlError,
    SecretKeyInvalid,
    AuthError,
    AccountBanned,
    RateLimitExceeded,
    VisibilityDenied,
)

__all__ = [
    # Models
    "User",
    "UserRole",
    "Post",
    "Comment",
    "Subscription",
    # Errors
    "AuthFailure",
    "AccessControlError",
    "SecretKeyInvalid",
    "AuthError",
    "AccountBanned",
    "RateLimitExceeded",
    "VisibilityDenied",
]
