"""
Authentication schemas.
"""

import uuid
from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator

MIN_PASSWORD_LENGTH = 8


class UserCreate(BaseModel):
    """User registration request."""

    username: str = Field(..., min_length=3, max_length=20)
    email: EmailStr
    password: str = Field(..., max_length=128)
    first_name: str = Field(
        ...,
        min_length=1,
        max_length=30,
        validation_alias=AliasChoices("first_name", "firstname"),
    )
    last_name: str = Field(
        ...,
        min_length=1,
        max_length=30,
        validation_alias=AliasChoices("last_name", "lastname"),
    )

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Username must be between 3 and 20 characters")
        if "@" in v:
            # Login accepts username or email in one field
            raise ValueError("Username cannot contain '@'")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return v


class UserLogin(BaseModel):
    """User login request. The identifier may be a username or an email."""

    username_or_email: str = Field(
        ...,
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("username_or_email", "usernameOrEmail", "username", "email"),
    )
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(BaseModel):
    """User profile response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    email: str
    first_name: str
    last_name: str
    role: str
    banned: bool
    created_at: datetime


class AuthResponse(BaseModel):
    """
    Login/registration response.

    The token itself travels in the HttpOnly cookie; ``expires_in`` tells the
    client when it will have to log in again.
    """

    expires_in: int
    user: UserResponse
