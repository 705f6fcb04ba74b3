"""User accounts: registration, authentication, listing and updates."""

import logging
from typing import Literal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.database import transaction
from app.core.security import hash_password, verify_password
from app.models import User
from app.schemas.users import AdminUserUpdate, ProfileUpdate, UserCreate
from app.services.errors import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    translate_db_error,
)

logger = logging.getLogger(__name__)

UserSortField = Literal["name", "email", "role", "created_at"]
SortOrder = Literal["asc", "desc"]

_USER_SORT_COLUMNS = {
    "name": User.name,
    "email": User.email,
    "role": User.role,
    "created_at": User.created_at,
}


def _email_taken(db: Session, email: str, exclude_user_id: int | None = None) -> bool:
    query = db.query(User.id).filter(User.email == email)
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    return query.first() is not None


def create_user(db: Session, body: UserCreate) -> User:
    """Create a user with a hashed password. Raises ConflictError when the email exists."""
    try:
        with transaction(db):
            if _email_taken(db, body.email):
                raise ConflictError("User already exists")
            user = User(
                name=body.name,
                email=body.email,
                password_hash=hash_password(body.password),
                address=body.address,
                role=body.role,
            )
            db.add(user)
            db.flush()
    except SQLAlchemyError as e:
        raise translate_db_error(e, "create user") from e
    db.refresh(user)
    logger.info("User created", extra={"user_id": user.id, "role": user.role})
    return user


def authenticate(db: Session, email: str, password: str) -> User | None:
    """Return the user for valid credentials, else None."""
    user = db.query(User).filter(User.email == email).first()
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def list_users(
    db: Session,
    name: str | None = None,
    email: str | None = None,
    role: str | None = None,
    sort_by: UserSortField = "name",
    sort_order: SortOrder = "asc",
) -> list[User]:
    """List users filtered by name/email substring (case-insensitive) and exact role."""
    query = db.query(User)
    if name:
        query = query.filter(User.name.ilike(f"%{name}%"))
    if email:
        query = query.filter(User.email.ilike(f"%{email}%"))
    if role:
        query = query.filter(User.role == role)
    column = _USER_SORT_COLUMNS[sort_by]
    query = query.order_by(column.desc() if sort_order == "desc" else column.asc(), User.id)
    return query.all()


def _apply_profile_fields(user: User, changes: ProfileUpdate) -> bool:
    """Apply each permitted profile field that was sent. Returns True if anything changed."""
    changed = False
    if changes.name is not None:
        user.name = changes.name
        changed = True
    if changes.email is not None:
        user.email = changes.email
        changed = True
    if "address" in changes.model_fields_set:
        user.address = changes.address
        changed = True
    if changes.password is not None:
        user.password_hash = hash_password(changes.password)
        changed = True
    return changed


def update_profile(db: Session, user_id: int, changes: ProfileUpdate) -> User:
    """Update the caller's own account. Role cannot be changed here."""
    try:
        with transaction(db):
            user = db.query(User).filter(User.id == user_id).first()
            if user is None:
                raise NotFoundError("User not found")
            if changes.email is not None and _email_taken(db, changes.email, user_id):
                raise ConflictError("Email already exists")
            if not _apply_profile_fields(user, changes):
                raise InvalidArgumentError("No valid fields provided for update")
            db.flush()
    except SQLAlchemyError as e:
        raise translate_db_error(e, "update profile") from e
    db.refresh(user)
    logger.info("Profile updated", extra={"user_id": user_id})
    return user


def admin_update_user(db: Session, target_user_id: int, changes: AdminUserUpdate) -> User:
    """Update any account, including its role."""
    try:
        with transaction(db):
            user = db.query(User).filter(User.id == target_user_id).first()
            if user is None:
                raise NotFoundError("User not found")
            if changes.email is not None and _email_taken(db, changes.email, target_user_id):
                raise ConflictError("Email already exists")
            changed = _apply_profile_fields(user, changes)
            if changes.role is not None:
                user.role = changes.role
                changed = True
            if not changed:
                raise InvalidArgumentError("No valid fields provided for update")
            db.flush()
    except SQLAlchemyError as e:
        raise translate_db_error(e, "update user") from e
    db.refresh(user)
    logger.info("User updated by admin", extra={"user_id": target_user_id})
    return user

