"""Account password hashing and the bearer tokens issued at register/login."""

from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from app.core.config import settings

# bcrypt ignores input past 72 bytes; passwords are capped at 16 chars anyway.
BCRYPT_MAX_PASSWORD_BYTES = 72
REQUIRED_CLAIMS = ["sub", "role", "exp", "iat"]


def _password_bytes(plain_password: str) -> bytes:
    return plain_password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]


def hash_password(plain_password: str) -> str:
    """Hash a password with the configured bcrypt cost (BCRYPT_ROUNDS)."""
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(plain_password), salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    """True if the password matches the stored hash; malformed hashes never match."""
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_access_token(user_id: int, role: str) -> str:
    """Issue a token naming the account (sub) and its role, valid for JWT_EXPIRE_MINUTES."""
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
    }
    return jwt.encode(
        payload,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify signature, expiry and required claims; return the payload.
    Raises jwt.PyJWTError on any failure.
    """
    return jwt.decode(
        token,
        settings.JWT_SECRET.get_secret_value(),
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": REQUIRED_CLAIMS},
    )


def user_id_from_token(token: str) -> int:
    """Return the account id a valid token was issued for."""
    sub = decode_access_token(token)["sub"]
    if not isinstance(sub, str) or not sub.isascii() or not sub.isdigit():
        raise jwt.InvalidTokenError("Token subject is not an account id")
    return int(sub)
