"""
FastAPI dependencies for authentication, authorization, and database sessions.
"""

from typing import Annotated, AsyncGenerator, Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from blogapi.api.errors import FORBIDDEN
from blogapi.config import Settings
from blogapi.kernel.errors import AuthError, AuthFailure
from blogapi.kernel.identity.identity_service import IdentityService
from blogapi.kernel.identity.jwt import TokenCodec
from blogapi.kernel.identity.principal import Principal
from blogapi.kernel.models.user import User
from blogapi.kernel.visibility.visibility_service import VisibilityService


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields database sessions."""
    async with request.app.state.session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was built with."""
    return request.app.state.settings


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


AppSettings = Annotated[Settings, Depends(get_app_settings)]
Codec = Annotated[TokenCodec, Depends(get_token_codec)]


def get_optional_principal(request: Request) -> Optional[Principal]:
    """Principal resolved by AuthenticationMiddleware, None if anonymous."""
    return getattr(request.state, "principal", None)


def get_current_principal(request: Request) -> Principal:
    """Principal resolved by AuthenticationMiddleware, or 401."""
    principal = getattr(request.state, "principal", None)
    if principal is None:
        reason = getattr(request.state, "auth_failure", None) or AuthFailure.MISSING
        raise AuthError(reason)
    return principal


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
OptionalPrincipal = Annotated[Optional[Principal], Depends(get_optional_principal)]


async def get_current_user(principal: CurrentPrincipal, db: DbSession) -> User:
    """The principal's User row, loaded into this request's session."""
    user = await IdentityService(db).get_user_by_id(principal.id)
    if user is None:
        raise AuthError(AuthFailure.UNKNOWN_SUBJECT)
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


async def require_admin(principal: CurrentPrincipal) -> Principal:
    """Require the current principal to be an admin."""
    if not principal.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=FORBIDDEN,
        )
    return principal


AdminPrincipal = Annotated[Principal, Depends(require_admin)]


def get_visibility_service(db: DbSession) -> VisibilityService:
    return VisibilityService(db)


Visibility = Annotated[VisibilityService, Depends(get_visibility_service)]


def get_client_ip(request: Request, trust_forwarded_for: bool = False) -> str:
    """
    Extract client IP from request.

    X-Forwarded-For is client-controlled, so it is only read when the app
    sits behind a proxy that overwrites it.
    """
    if trust_forwarded_for:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"
