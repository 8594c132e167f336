"""
Authentication endpoints.

The access token is delivered as an HttpOnly cookie; API clients that cannot
keep cookies may send the same token as ``Authorization: Bearer``.
"""

from fastapi import APIRouter, HTTPException, Response, status

from blogapi.api.deps import AppSettings, Codec, CurrentUser, DbSession
from blogapi.config import Settings
from blogapi.kernel.identity.identity_service import IdentityService
from blogapi.kernel.identity.jwt import TokenCodec
from blogapi.schemas.auth import AuthResponse, UserCreate, UserLogin, UserResponse
from blogapi.schemas.common import SuccessResponse

router = APIRouter()


def _set_auth_cookie(response: Response, settings: Settings, codec: TokenCodec, token: str) -> None:
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=codec.max_age_seconds,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: UserCreate,
    response: Response,
    db: DbSession,
    settings: AppSettings,
    codec: Codec,
):
    """
    Register a new user account.

    Logs the new user in by setting the credential cookie.
    """
    identity_service = IdentityService(db)

    try:
        user = await identity_service.register_user(
            username=data.username,
            email=data.email,
            password=data.password,
            first_name=data.first_name,
            last_name=data.last_name,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    await db.refresh(user)
    _set_auth_cookie(response, settings, codec, codec.issue(user.id))

    return AuthResponse(
        expires_in=codec.max_age_seconds,
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    data: UserLogin,
    response: Response,
    db: DbSession,
    settings: AppSettings,
    codec: Codec,
):
    """
    Authenticate with username or email and set the credential cookie.

    Banned accounts are refused with 403 even when the password is right.
    """
    identity_service = IdentityService(db)

    user = await identity_service.authenticate(data.username_or_email, data.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    _set_auth_cookie(response, settings, codec, codec.issue(user.id))

    return AuthResponse(
        expires_in=codec.max_age_seconds,
        user=UserResponse.model_validate(user),
    )


@router.post("/logout", response_model=SuccessResponse)
async def logout(response: Response, settings: AppSettings):
    """
    Clear the credential cookie.

    Tokens are not revoked server-side; a copied token stays valid until it
    expires.
    """
    response.delete_cookie(
        key=settings.cookie_name,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )
    return SuccessResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(user: CurrentUser):
    """Get current user's profile."""
    return UserResponse.model_validate(user)
