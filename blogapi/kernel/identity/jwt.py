"""
Signed credential issuance and verification.

Tokens are compact HS256 JWTs (``header.payload.signature``) carrying only the
subject id, issued-at and expiry. Nothing is stored server-side; expiry is the
only way a token stops being valid.
"""

import base64
import binascii
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError, JWTError
from pydantic import BaseModel, ValidationError

from blogapi.config import Settings
from blogapi.kernel.errors import AuthError, AuthFailure, SecretKeyInvalid

# 256 bits, the floor for HS256
MIN_SECRET_BYTES = 32

SYMMETRIC_ALGORITHMS = frozenset({"HS256", "HS384", "HS512"})


class TokenClaims(BaseModel):
    """Verified token payload."""

    sub: uuid.UUID
    iat: datetime
    exp: datetime


def decode_secret_key(secret_key: Optional[str]) -> bytes:
    """
    Decode and check the base64 signing secret.

    Raises:
        SecretKeyInvalid: if the secret is unset, not base64, or under 256 bits
    """
    if not secret_key or not secret_key.strip():
        raise SecretKeyInvalid(
            "JWT_SECRET_KEY must be set. Generate one with: openssl rand -base64 32"
        )
    try:
        key = base64.b64decode(secret_key.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise SecretKeyInvalid("JWT_SECRET_KEY must be valid base64") from e
    if len(key) < MIN_SECRET_BYTES:
        raise SecretKeyInvalid(
            f"JWT_SECRET_KEY must decode to at least {MIN_SECRET_BYTES} bytes, got {len(key)}"
        )
    return key


class TokenCodec:
    """
    Issues and verifies access tokens.

    Construction validates the secret, so a codec that exists is always safe
    to use. Build one per application and pass it where it is needed.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 1440,
    ):
        if algorithm not in SYMMETRIC_ALGORITHMS:
            raise SecretKeyInvalid(f"Unsupported signing algorithm: {algorithm}")
        self._key = decode_secret_key(secret_key)
        self.algorithm = algorithm
        self.expires_in = timedelta(minutes=access_token_expire_minutes)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenCodec":
        return cls(
            secret_key=settings.jwt_secret_key,
            algorithm=settings.algorithm,
            access_token_expire_minutes=settings.access_token_expire_minutes,
        )

    @property
    def max_age_seconds(self) -> int:
        """Token lifetime, used as the cookie Max-Age."""
        return int(self.expires_in.total_seconds())

    def issue(
        self,
        principal_id: uuid.UUID,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Create a signed token for ``principal_id``.

        Args:
            principal_id: The user's id, stored as the ``sub`` claim
            expires_delta: Override of the configured lifetime

        Returns:
            The encoded token
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(principal_id),
            "iat": now,
            "exp": now + (expires_delta if expires_delta is not None else self.expires_in),
        }
        return jwt.encode(payload, self._key, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> TokenClaims:
        """
        Verify a token's structure, signature and expiry.

        The HMAC comparison is constant-time. A bad signature is reported
        before expiry, so an expired forgery is still a forgery.

        Raises:
            AuthError: with the failure reason; never shown to clients
        """
        if not token:
            raise AuthError(AuthFailure.MISSING)

        try:
            header = jwt.get_unverified_header(token)
            jwt.get_unverified_claims(token)
        except JWTError:
            raise AuthError(AuthFailure.MALFORMED)

        # Rejects "none" and any algorithm switch before touching the key
        if header.get("alg") != self.algorithm:
            raise AuthError(AuthFailure.SIGNATURE_INVALID)

        try:
            payload = jwt.decode(token, self._key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise AuthError(AuthFailure.EXPIRED)
        except JWTClaimsError:
            raise AuthError(AuthFailure.MALFORMED)
        except JWTError:
            raise AuthError(AuthFailure.SIGNATURE_INVALID)

        return self._to_claims(payload)

    @staticmethod
    def _to_claims(payload: dict[str, Any]) -> TokenClaims:
        if "sub" not in payload or "exp" not in payload or "iat" not in payload:
            raise AuthError(AuthFailure.MALFORMED)
        try:
            return TokenClaims(
                sub=payload["sub"],
                iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (ValidationError, TypeError, ValueError, OverflowError):
            raise AuthError(AuthFailure.MALFORMED)
