"""Register, login and auth dependencies (get_current_user, role gates)."""

from collections.abc import Callable
from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.api.v1.errors import to_http_exception
from app.core.database import get_db
from app.core.security import create_access_token, user_id_from_token
from app.models.user import ROLE_ADMIN, ROLE_STORE_OWNER, ROLE_USER, User
from app.schemas.auth import CurrentUser, LoginRequest, MessageResponse, TokenResponse
from app.schemas.users import UserCreate, UserPublic
from app.services.errors import ServiceError
from app.services.users import authenticate, create_user

router = APIRouter()
security = HTTPBearer(auto_error=False)


def _token_response(user: User) -> TokenResponse:
    token = create_access_token(user.id, user.role)
    return TokenResponse(
        access_token=token,
        token_type="bearer",
        user=UserPublic.model_validate(user),
    )


@router.post("/register", response_model=TokenResponse, status_code=201)
def register(
    body: UserCreate,
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """Create an account and return a JWT for it. Admins are created by admins only."""
    if body.role == ROLE_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin accounts can only be created by an administrator.",
        )
    try:
        user = create_user(db, body)
    except ServiceError as e:
        raise to_http_exception(e) from e
    return _token_response(user)


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """
    Authenticate with email and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    user = authenticate(db, body.email, body.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )
    return _token_response(user)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """Dependency: require valid Bearer JWT and return the current user. Raises 401 if missing or invalid."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        user_id = user_id_from_token(credentials.credentials)
    except jwt.PyJWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return CurrentUser.model_validate(user)


def require_roles(*roles: str) -> Callable[[CurrentUser], CurrentUser]:
    """Build a dependency that admits only callers whose role is in roles (403 otherwise)."""

    def dependency(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied. Insufficient permissions.",
            )
        return current_user

    return dependency


require_admin = require_roles(ROLE_ADMIN)
require_store_owner = require_roles(ROLE_STORE_OWNER)
require_rater = require_roles(ROLE_USER)


@router.get("/me", response_model=CurrentUser)
def me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Return the authenticated user."""
    return current_user


@router.post("/logout", response_model=MessageResponse)
def logout(
    _user: Annotated[CurrentUser, Depends(get_current_user)],
) -> MessageResponse:
    """Tokens are stateless; the client discards its token."""
    return MessageResponse(message="Logged out successfully")
