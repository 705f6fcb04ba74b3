"""Pydantic schemas for users: public shape, creation, and explicit update structs."""

import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator

Role = Literal["user", "store_owner", "admin"]

NAME_MIN_LEN = 20
NAME_MAX_LEN = 60
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 16
ADDRESS_MAX_LEN = 400
PASSWORD_SPECIAL_CHARS = "!@#$%^&*"

_PASSWORD_PATTERN = re.compile(r"^(?=.*[A-Z])(?=.*[!@#$%^&*])")


def validate_name(value: str) -> str:
    """Trim and enforce the 20-60 character display name rule."""
    name = value.strip()
    if not NAME_MIN_LEN <= len(name) <= NAME_MAX_LEN:
        raise ValueError(
            f"Name must be between {NAME_MIN_LEN} and {NAME_MAX_LEN} characters"
        )
    return name


def validate_password(value: str) -> str:
    """Enforce length and character-class rules for new passwords."""
    if not PASSWORD_MIN_LEN <= len(value) <= PASSWORD_MAX_LEN:
        raise ValueError(
            f"Password must be between {PASSWORD_MIN_LEN} and {PASSWORD_MAX_LEN} characters"
        )
    if not _PASSWORD_PATTERN.match(value):
        raise ValueError(
            "Password must contain at least one uppercase letter and one special character"
        )
    return value


def normalize_address(value: str | None) -> str | None:
    """Trim an address; blank becomes None."""
    if value is None:
        return None
    address = value.strip()
    if len(address) > ADDRESS_MAX_LEN:
        raise ValueError(f"Address cannot exceed {ADDRESS_MAX_LEN} characters")
    return address or None


class UserPublic(BaseModel):
    """User as returned by the API (never includes the password hash)."""

    model_config = {"from_attributes": True}

    id: int
    name: str
    email: str
    address: str | None = None
    role: Role
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserCreate(BaseModel):
    """Body for self-registration and admin user creation."""

    name: str = Field(..., description="Display name (20-60 characters).")
    email: EmailStr
    password: str = Field(..., description="8-16 chars, one uppercase, one of !@#$%^&*.")
    address: str | None = Field(default=None, description="Optional postal address.")
    role: Role = "user"

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return validate_name(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return validate_password(v)

    @field_validator("address")
    @classmethod
    def _address(cls, v: str | None) -> str | None:
        return normalize_address(v)


class ProfileUpdate(BaseModel):
    """
    Fields a user may change on their own account.

    - name: replaces the display name (trimmed).
    - email: replaces the login email; must not belong to another user.
    - address: replaces the address; blank clears it.
    - password: re-hashed and replaces the stored hash.

    role is deliberately absent and rejected if sent.
    """

    model_config = {"extra": "forbid"}

    name: str | None = None
    email: EmailStr | None = None
    address: str | None = None
    password: str | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str | None) -> str | None:
        return None if v is None else validate_name(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str | None) -> str | None:
        return None if v is None else validate_password(v)

    @field_validator("address")
    @classmethod
    def _address(cls, v: str | None) -> str | None:
        return normalize_address(v)


class AdminUserUpdate(ProfileUpdate):
    """
    Fields an admin may change on any account: everything in ProfileUpdate
    plus role, which replaces the stored role.
    """

    role: Role | None = None


class UsersListResponse(BaseModel):
    """Response for GET /users (admin only)."""

    users: list[UserPublic]


class ProfileUpdateResponse(BaseModel):
    """Response for PATCH /users/profile."""

    message: str
    user: UserPublic
