"""
Identity service for user account operations.
"""

import secrets
import uuid
from functools import lru_cache
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from blogapi.kernel.errors import AccountBanned
from blogapi.kernel.identity.password import hash_password, verify_password
from blogapi.kernel.models.user import User, UserRole
from blogapi.logging_config import get_logger

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def _dummy_password_hash() -> str:
    """Hash checked against when the login identifier matches nobody."""
    return hash_password(secrets.token_urlsafe(16))


class IdentityService:
    """
    Service for user identity operations.

    Handles registration, password authentication, principal lookup and
    account moderation (ban, unban, promote).
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def register_user(
        self,
        username: str,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
    ) -> User:
        """
        Register a new user.

        Returns:
            The created User object

        Raises:
            ValueError: If the username or email is already taken
        """
        username = username.strip()
        email = email.lower().strip()

        query = select(User.id).where(
            or_(User.username == username, User.email == email)
        )
        result = await self.session.execute(query)
        if result.first() is not None:
            raise ValueError("Username or email already in use")

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            role=UserRole.USER,
        )
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same name
            await self.session.rollback()
            raise ValueError("Username or email already in use")

        logger.info("User registered", extra={"user_id": str(user.id)})
        return user

    async def authenticate(self, identifier: str, password: str) -> Optional[User]:
        """
        Check a username-or-email and password.

        Returns:
            The user if the credentials match, None otherwise

        Raises:
            AccountBanned: if the credentials match a banned account
        """
        user = await self.get_user_by_email(identifier)
        if user is None:
            user = await self.get_user_by_username(identifier)
        if user is None:
            # Equal timing with a real password check
            verify_password(password, _dummy_password_hash())
            return None

        if not verify_password(password, user.password_hash):
            return None

        if user.banned:
            logger.warning("Login attempt on banned account", extra={"user_id": str(user.id)})
            raise AccountBanned()

        return user

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Get a user by ID."""
        return await self.session.get(User, user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email."""
        query = select(User).where(User.email == email.lower().strip())
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_user_by_username(self, username: str) -> Optional[User]:
        """Get a user by username."""
        query = select(User).where(User.username == username.strip())
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def set_banned(
        self,
        user_id: uuid.UUID,
        banned: bool,
        changed_by: uuid.UUID,
    ) -> Optional[User]:
        """
        Ban or unban a user. Idempotent.

        A banned user's existing tokens stop working on their next request,
        because the authentication middleware re-reads the flag every time.
        """
        user = await self.get_user_by_id(user_id)
        if user is None:
            return None

        if user.banned != banned:
            user.banned = banned
            logger.info(
                "User ban flag changed",
                extra={"user_id": str(user_id), "banned": banned, "changed_by": str(changed_by)},
            )
        return user

    async def change_role(
        self,
        user_id: uuid.UUID,
        new_role: UserRole,
        changed_by: uuid.UUID,
    ) -> Optional[User]:
        """Change a user's role (admin only)."""
        user = await self.get_user_by_id(user_id)
        if user is None:
            return None

        previous = UserRole(user.role)
        user.role = new_role
        logger.info(
            "User role changed",
            extra={
                "user_id": str(user_id),
                "previous_role": previous.value,
                "new_role": new_role.value,
                "changed_by": str(changed_by),
            },
        )
        return user
