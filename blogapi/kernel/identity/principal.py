"""
The authenticated identity attached to one request.
"""

import uuid
from dataclasses import dataclass

from blogapi.kernel.models.user import User, UserRole


@dataclass(frozen=True)
class Principal:
    """
    Who is making the request.

    Built once per request from the user store and passed explicitly to every
    function that needs it. Never cached across requests.
    """

    id: uuid.UUID
    username: str
    role: UserRole
    banned: bool = False

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        # role may come back as a plain str from SQLite
        return cls(
            id=user.id,
            username=user.username,
            role=UserRole(user.role),
            banned=bool(user.banned),
        )
