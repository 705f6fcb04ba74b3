"""Pydantic request/response schemas."""

from app.schemas.admin import (
    DeletedStore,
    DeletedUser,
    DeleteStoreResponse,
    DeleteUserResponse,
    StoreDeletionResult,
    StoreDeletionSummary,
    UserDeletionResult,
    UserDeletionSummary,
)
from app.schemas.auth import CurrentUser, LoginRequest, MessageResponse, TokenResponse
from app.schemas.health import HealthResponse
from app.schemas.ratings import RatingPublic, RatingSubmit, RatingSubmitResponse
from app.schemas.stores import (
    AdminStoreUpdate,
    OwnerStoreUpdate,
    StoreCreate,
    StorePublic,
)
from app.schemas.users import (
    AdminUserUpdate,
    ProfileUpdate,
    Role,
    UserCreate,
    UserPublic,
)

__all__ = [
    "AdminStoreUpdate",
    "AdminUserUpdate",
    "CurrentUser",
    "DeleteStoreResponse",
    "DeleteUserResponse",
    "DeletedStore",
    "DeletedUser",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "OwnerStoreUpdate",
    "ProfileUpdate",
    "RatingPublic",
    "RatingSubmit",
    "RatingSubmitResponse",
    "Role",
    "StoreCreate",
    "StoreDeletionResult",
    "StoreDeletionSummary",
    "StorePublic",
    "TokenResponse",
    "UserCreate",
    "UserDeletionResult",
    "UserDeletionSummary",
    "UserPublic",
]
