"""Admin endpoints: update any user or store, and cascading deletion of either."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import require_admin
from app.api.v1.errors import to_http_exception
from app.core.database import get_db
from app.schemas.admin import DeleteStoreResponse, DeleteUserResponse
from app.schemas.auth import CurrentUser
from app.schemas.stores import AdminStoreUpdate, StorePublic
from app.schemas.users import AdminUserUpdate, UserPublic
from app.services.deletion import delete_store, delete_user, parse_entity_id
from app.services.errors import ServiceError
from app.services.stores import admin_update_store
from app.services.users import admin_update_user

logger = logging.getLogger(__name__)
router = APIRouter()


@router.patch("/users/{user_id}", response_model=UserPublic)
def patch_user(
    user_id: str,
    body: AdminUserUpdate,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UserPublic:
    """Update any user's name, email, address, role or password."""
    try:
        user = admin_update_user(db, parse_entity_id(user_id, "user"), body)
    except ServiceError as e:
        raise to_http_exception(e) from e
    return UserPublic.model_validate(user)


@router.patch("/stores/{store_id}", response_model=StorePublic)
def patch_store(
    store_id: str,
    body: AdminStoreUpdate,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> StorePublic:
    """Update any store's name, email, address or owner."""
    try:
        store = admin_update_store(db, parse_entity_id(store_id, "store"), body)
    except ServiceError as e:
        raise to_http_exception(e) from e
    return StorePublic.model_validate(store)


@router.delete("/users/{user_id}", response_model=DeleteUserResponse)
def remove_user(
    user_id: str,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> DeleteUserResponse:
    """
    Delete a user with everything that references them, in one transaction.

    Removes the user's ratings and, for store owners, their stores and every
    rating on those stores. The summary reports how many rows each step
    removed. Admins cannot delete their own account.
    """
    try:
        result = delete_user(db, actor_id=admin.id, target_user_id=user_id)
    except ServiceError as e:
        logger.info(
            "User deletion refused",
            extra={"target": user_id, "actor_id": admin.id, "error": type(e).__name__},
        )
        raise to_http_exception(e) from e
    return DeleteUserResponse(
        message="User deleted successfully",
        deleted_user=result.deleted_user,
        summary=result.summary,
    )


@router.delete("/stores/{store_id}", response_model=DeleteStoreResponse)
def remove_store(
    store_id: str,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> DeleteStoreResponse:
    """Delete a store and all ratings on it, in one transaction."""
    try:
        result = delete_store(db, actor_id=admin.id, target_store_id=store_id)
    except ServiceError as e:
        logger.info(
            "Store deletion refused",
            extra={"target": store_id, "actor_id": admin.id, "error": type(e).__name__},
        )
        raise to_http_exception(e) from e
    return DeleteStoreResponse(
        message="Store deleted successfully",
        deleted_store=result.deleted_store,
        summary=result.summary,
    )
