"""
Blog Platform API

FastAPI application factory.

Run with:
    uvicorn blogapi.main:create_app --factory
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from blogapi.api.errors import (
    FORBIDDEN,
    NOT_AUTHENTICATED,
    status_for_decision,
)
from blogapi.api.middleware.authentication import AuthenticationMiddleware
from blogapi.api.middleware.rate_limit import RateLimitMiddleware
from blogapi.api.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware
from blogapi.api.v1 import router as api_v1_router
from blogapi.config import Settings, get_settings
from blogapi.database import build_engine, build_session_maker, close_db, init_db
from blogapi.kernel.errors import (
    AccountBanned,
    AuthError,
    SecretKeyInvalid,
    VisibilityDenied,
)
from blogapi.kernel.identity.jwt import TokenCodec
from blogapi.kernel.ratelimit import RateLimiter
from blogapi.logging_config import configure_logging, get_logger
from blogapi.schemas.common import HealthResponse

logger = get_logger(__name__)


def build_auth_limiters(settings: Settings) -> dict[tuple[str, str], RateLimiter]:
    """One independent limiter per credential endpoint."""

    def limiter() -> RateLimiter:
        return RateLimiter(
            capacity=settings.rate_limit_auth_capacity,
            refill_tokens=settings.rate_limit_auth_refill_tokens,
            refill_interval=settings.rate_limit_auth_refill_seconds,
        )

    prefix = settings.api_v1_prefix
    return {
        ("POST", f"{prefix}/auth/login"): limiter(),
        ("POST", f"{prefix}/auth/register"): limiter(),
    }


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Raises:
        SecretKeyInvalid: if the signing secret is unusable; the process
            must not start without a valid one
    """
    settings = settings or get_settings()

    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    try:
        codec = TokenCodec.from_settings(settings)
    except SecretKeyInvalid as e:
        logger.critical("Refusing to start: %s", e)
        raise

    engine = build_engine(settings.database_url, echo=settings.debug)
    session_maker = build_session_maker(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        logger.info("Starting %s v%s", settings.project_name, settings.version)
        await init_db(engine)
        logger.info("Database initialized")

        yield

        logger.info("Shutting down...")
        await close_db(engine)
        logger.info("Database connections closed")

    app = FastAPI(
        title=settings.project_name,
        description="""
    Blog Platform API

    Posts, comments, likes and subscriptions behind a small access-control core.

    ## Access control

    - **Authentication**: signed token in an HttpOnly cookie (or Bearer header)
    - **Rate limiting**: token bucket per client IP on login and registration
    - **Moderation**: hidden posts and comments answer 404 to everyone but admins
    """,
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.state.settings = settings
    app.state.token_codec = codec
    app.state.engine = engine
    app.state.session_maker = session_maker

    # add_middleware stacks innermost-first, so LAST added = OUTERMOST.
    # Resulting order: CORS -> request id -> rate limit -> authentication.
    app.add_middleware(
        AuthenticationMiddleware,
        codec=codec,
        session_maker=session_maker,
        cookie_name=settings.cookie_name,
    )
    if settings.rate_limit_enabled:
        app.state.rate_limiters = build_auth_limiters(settings)
        app.add_middleware(
            RateLimitMiddleware,
            limiters=app.state.rate_limiters,
            trust_forwarded_for=settings.trust_forwarded_for,
        )
    app.add_middleware(RequestIdMiddleware)

    # CORS last = outermost; the frontend sends the credential cookie cross-origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _install_exception_handlers(app, settings)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Check application health."""
        return HealthResponse(status="ok", version=settings.version)

    app.include_router(api_v1_router, prefix=settings.api_v1_prefix)

    return app


def _install_exception_handlers(app: FastAPI, settings: Settings) -> None:
    cors_origins = settings.cors_origins

    def _cors_headers(request: Request) -> dict:
        """CORS headers for error responses (500s bypass the CORS middleware)."""
        origin = request.headers.get("origin") or ""
        if origin not in cors_origins:
            return {}
        return {
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Credentials": "true",
        }

    def _headers(request: Request) -> dict:
        headers = _cors_headers(request)
        req_id = getattr(request.state, "request_id", None)
        if req_id:
            headers[REQUEST_ID_HEADER] = req_id
        return headers

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        headers = _headers(request)
        if exc.headers:
            headers.update(exc.headers)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        """Every authentication failure looks the same to the client."""
        logger.info(
            "Authentication required",
            extra={"reason": exc.reason.value, "path": request.url.path},
        )
        headers = _headers(request)
        headers["WWW-Authenticate"] = "Bearer"
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": NOT_AUTHENTICATED},
            headers=headers,
        )

    @app.exception_handler(AccountBanned)
    async def account_banned_handler(request: Request, exc: AccountBanned):
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"detail": FORBIDDEN},
            headers=_headers(request),
        )

    @app.exception_handler(VisibilityDenied)
    async def visibility_denied_handler(request: Request, exc: VisibilityDenied):
        """404 for not-found-or-hidden, 403 for ownership; the body never says which rule fired."""
        status_code, detail = status_for_decision(exc.decision)
        return JSONResponse(status_code=status_code, content={"detail": detail}, headers=_headers(request))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors."""
        errors = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            errors.append({
                "field": field,
                "message": error["msg"],
                "type": error["type"],
            })
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": "Validation error", "errors": errors},
            headers=_headers(request),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception("Unhandled exception: %s", exc)
        req_id = getattr(request.state, "request_id", None)
        if settings.debug:
            content = {"detail": str(exc), "type": type(exc).__name__, "request_id": req_id}
        else:
            content = {"detail": "Internal server error", "request_id": req_id}
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=content,
            headers=_headers(request),
        )


# Main entry point for development
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "blogapi.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug,
    )
