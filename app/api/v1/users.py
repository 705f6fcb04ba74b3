"""User endpoints: admin listing and creation, own profile, dashboard stats."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user, require_admin
from app.api.v1.errors import to_http_exception
from app.core.database import get_db
from app.schemas.auth import CurrentUser
from app.schemas.dashboard import AdminStats, OwnerStats, UserStats
from app.schemas.users import (
    ProfileUpdate,
    ProfileUpdateResponse,
    Role,
    UserCreate,
    UserPublic,
    UsersListResponse,
)
from app.services.dashboard import get_dashboard_stats
from app.services.errors import ServiceError
from app.services.users import SortOrder, UserSortField, create_user, list_users, update_profile

router = APIRouter()


@router.get("", response_model=UsersListResponse)
def get_users(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    name: Annotated[str | None, Query(max_length=60)] = None,
    email: Annotated[str | None, Query(max_length=255)] = None,
    role: Role | None = None,
    sort_by: UserSortField = "name",
    sort_order: SortOrder = "asc",
) -> UsersListResponse:
    """List users (admin only), filtered by name/email substring and role."""
    users = list_users(
        db, name=name, email=email, role=role, sort_by=sort_by, sort_order=sort_order
    )
    return UsersListResponse(users=[UserPublic.model_validate(u) for u in users])


@router.post("", response_model=UserPublic, status_code=201)
def post_user(
    body: UserCreate,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UserPublic:
    """Create a user with any role (admin only)."""
    try:
        user = create_user(db, body)
    except ServiceError as e:
        raise to_http_exception(e) from e
    return UserPublic.model_validate(user)


@router.patch("/profile", response_model=ProfileUpdateResponse)
def patch_profile(
    body: ProfileUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> ProfileUpdateResponse:
    """Update the caller's own name, email, address or password. Role cannot be changed."""
    try:
        user = update_profile(db, current_user.id, body)
    except ServiceError as e:
        raise to_http_exception(e) from e
    return ProfileUpdateResponse(
        message="Profile updated successfully",
        user=UserPublic.model_validate(user),
    )


@router.get("/dashboard-stats", response_model=AdminStats | OwnerStats | UserStats)
def dashboard_stats(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> AdminStats | OwnerStats | UserStats:
    """Counters for the caller's dashboard; the shape depends on the caller's role."""
    return get_dashboard_stats(db, current_user)
