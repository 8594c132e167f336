"""
Access-control error taxonomy.

Each exception is translated to an HTTP status by the exception handlers in
``blogapi.main``. The client only ever sees a generic message; the specific
reason stays in the server log.
"""

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from blogapi.kernel.visibility.policy import Decision


class AuthFailure(str, Enum):
    """Why a credential could not be resolved to a principal."""
    MISSING = "missing"
    MALFORMED = "malformed"
    SIGNATURE_INVALID = "signature_invalid"
    EXPIRED = "expired"
    UNKNOWN_SUBJECT = "unknown_subject"


class AccessControlError(Exception):
    """Base class for errors raised by the access-control core."""


class SecretKeyInvalid(AccessControlError):
    """Signing secret missing, not base64, or shorter than 256 bits. Fatal at boot."""


class AuthError(AccessControlError):
    """Credential rejected. Always surfaces as 401 with a generic body."""

    def __init__(self, reason: AuthFailure):
        super().__init__(reason.value)
        self.reason = reason


class AccountBanned(AccessControlError):
    """A verified credential belongs to a banned account."""


class RateLimitExceeded(AccessControlError):
    """The caller's bucket is empty."""

    def __init__(self, retry_after: float):
        super().__init__(f"retry after {retry_after:.1f}s")
        self.retry_after = retry_after


class VisibilityDenied(AccessControlError):
    """The visibility policy denied access to a post or comment."""

    def __init__(self, decision: "Decision"):
        super().__init__(decision.value)
        self.decision = decision
