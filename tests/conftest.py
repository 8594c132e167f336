"""
Pytest fixtures for blog API tests.

Each test gets its own app built by ``create_app`` over a file-based SQLite
database in ``tmp_path`` (in-memory SQLite is per-connection, and the
authentication middleware opens its own sessions).
"""

import base64
from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from blogapi.config import Settings
from blogapi.database import close_db, init_db
from blogapi.kernel.identity.jwt import TokenCodec, decode_secret_key
from blogapi.kernel.identity.password import hash_password
from blogapi.kernel.models import Comment, Post, User, UserRole

TEST_SECRET = base64.b64encode(b"0123456789abcdef0123456789abcdef").decode()
OTHER_SECRET = base64.b64encode(b"fedcba9876543210fedcba9876543210").decode()
TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture
def test_password() -> str:
    return TEST_PASSWORD


@pytest.fixture(scope="session")
def password_hash() -> str:
    """One bcrypt hash shared by every fixture user."""
    return hash_password(TEST_PASSWORD)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret_key=TEST_SECRET,
        environment="test",
        log_level="WARNING",
        rate_limit_enabled=True,
        trust_forwarded_for=False,
    )


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec(secret_key=TEST_SECRET)


@pytest.fixture
def other_codec() -> TokenCodec:
    """Same algorithm, different secret."""
    return TokenCodec(secret_key=OTHER_SECRET)


@pytest.fixture
def signing_key() -> bytes:
    return decode_secret_key(TEST_SECRET)


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncGenerator[FastAPI, None]:
    """Application with its tables created."""
    # Local import so collecting unit tests never builds an app
    from blogapi.main import create_app

    application = create_app(settings)
    await init_db(application.state.engine)
    yield application
    await close_db(application.state.engine)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def db_session(app: FastAPI) -> AsyncGenerator[AsyncSession, None]:
    """A session on the app's database, separate from request sessions."""
    async with app.state.session_maker() as session:
        yield session


async def _create_user(
    session: AsyncSession,
    username: str,
    password_hash: str,
    role: UserRole = UserRole.USER,
    banned: bool = False,
) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        password_hash=password_hash,
        first_name="Test",
        last_name=username.capitalize(),
        role=role,
        banned=banned,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest_asyncio.fixture
async def alice(db_session: AsyncSession, password_hash: str) -> User:
    """A regular user who writes posts."""
    return await _create_user(db_session, "alice", password_hash)


@pytest_asyncio.fixture
async def bob(db_session: AsyncSession, password_hash: str) -> User:
    """Another regular user."""
    return await _create_user(db_session, "bob", password_hash)


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession, password_hash: str) -> User:
    return await _create_user(db_session, "admin", password_hash, role=UserRole.ADMIN)


@pytest_asyncio.fixture
async def mallory(db_session: AsyncSession, password_hash: str) -> User:
    """A banned user."""
    return await _create_user(db_session, "mallory", password_hash, banned=True)


@pytest.fixture
def headers_for(app: FastAPI) -> Callable[[User], dict]:
    """Bearer headers carrying a fresh token for ``user``."""

    def _headers_for(user: User) -> dict:
        token = app.state.token_codec.issue(user.id)
        return {"Authorization": f"Bearer {token}"}

    return _headers_for


@pytest.fixture
def make_post(db_session: AsyncSession) -> Callable:
    """Insert a post directly, bypassing the API."""

    async def _make_post(author: User, hidden: bool = False, title: str = "A post") -> Post:
        post = Post(
            author_id=author.id,
            title=title,
            content=f"{title} content",
            hidden=hidden,
        )
        db_session.add(post)
        await db_session.commit()
        return post

    return _make_post


@pytest.fixture
def make_comment(db_session: AsyncSession) -> Callable:
    """Insert a comment directly, bypassing the API."""

    async def _make_comment(post: Post, author: User, hidden: bool = False) -> Comment:
        comment = Comment(
            post_id=post.id,
            author_id=author.id,
            content="A comment",
            hidden=hidden,
        )
        db_session.add(comment)
        await db_session.commit()
        return comment

    return _make_comment
