"""
Authentication middleware.

Resolves the request's credential to a Principal before routing:

- Reads the token from the credential cookie, falling back to
  ``Authorization: Bearer``
- Verifies it and loads the subject from the user store on every request
- Stores the result on ``request.state.principal`` (None when anonymous) and
  the failure reason on ``request.state.auth_failure``
- Rejects banned principals with 403 on every route
- Tags log records emitted downstream with the principal id

Whether a route needs a principal is decided by its dependencies, not here.
"""

import uuid
from typing import Callable, Optional

from fastapi import Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from blogapi.api.errors import FORBIDDEN, error_response
from blogapi.kernel.errors import AuthError, AuthFailure
from blogapi.kernel.identity.identity_service import IdentityService
from blogapi.kernel.identity.jwt import TokenCodec
from blogapi.kernel.identity.principal import Principal
from blogapi.logging_config import get_logger, principal_id_var

logger = get_logger(__name__)


def extract_token(request: Request, cookie_name: str) -> Optional[str]:
    """Cookie first, then Bearer header. None if neither carries a token."""
    token = request.cookies.get(cookie_name)
    if token:
        return token
    auth = request.headers.get("authorization")
    if auth and auth.lower().startswith("bearer "):
        return auth[7:].strip() or None
    return None


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Attach the request's Principal, or None, to ``request.state``."""

    def __init__(
        self,
        app: ASGIApp,
        codec: TokenCodec,
        session_maker: async_sessionmaker[AsyncSession],
        cookie_name: str = "jwt",
    ):
        super().__init__(app)
        self.codec = codec
        self.session_maker = session_maker
        self.cookie_name = cookie_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request.state.principal = None
        request.state.auth_failure = None

        token = extract_token(request, self.cookie_name)
        if token is None:
            request.state.auth_failure = AuthFailure.MISSING
            return await call_next(request)

        try:
            claims = self.codec.verify(token)
        except AuthError as e:
            request.state.auth_failure = e.reason
            logger.info(
                "Credential rejected",
                extra={"reason": e.reason.value, "path": request.url.path},
            )
            return await call_next(request)

        principal = await self._load_principal(claims.sub)
        if principal is None:
            request.state.auth_failure = AuthFailure.UNKNOWN_SUBJECT
            logger.info(
                "Credential rejected",
                extra={
                    "reason": AuthFailure.UNKNOWN_SUBJECT.value,
                    "user_id": str(claims.sub),
                    "path": request.url.path,
                },
            )
            return await call_next(request)

        if principal.banned:
            logger.warning(
                "Banned principal rejected",
                extra={"user_id": str(principal.id), "path": request.url.path},
            )
            return error_response(status.HTTP_403_FORBIDDEN, FORBIDDEN)

        request.state.principal = principal
        ctx_token = principal_id_var.set(str(principal.id))
        try:
            return await call_next(request)
        finally:
            principal_id_var.reset(ctx_token)

    async def _load_principal(self, user_id: uuid.UUID) -> Optional[Principal]:
        # Re-read on every request so bans and role changes apply immediately
        async with self.session_maker() as session:
            user = await IdentityService(session).get_user_by_id(user_id)
            return Principal.from_user(user) if user is not None else None
