"""Store endpoints: browsing for everyone, creation and management for owners and admins."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user, require_admin, require_store_owner
from app.api.v1.errors import to_http_exception
from app.core.database import get_db
from app.schemas.auth import CurrentUser
from app.schemas.stores import (
    OwnedStoreItem,
    OwnerStoreUpdate,
    StoreCreate,
    StoreListItem,
    StorePublic,
    StoreRatingsResponse,
    StoreSortField,
)
from app.services.errors import ServiceError
from app.services.stores import (
    create_store,
    get_store_ratings,
    list_owned_stores,
    list_stores,
    update_owned_store,
)
from app.services.users import SortOrder

router = APIRouter()


@router.get("", response_model=list[StoreListItem])
def get_stores(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    name: Annotated[str | None, Query(max_length=255)] = None,
    email: Annotated[str | None, Query(max_length=255)] = None,
    address: Annotated[str | None, Query(max_length=400)] = None,
    sort_by: StoreSortField = "name",
    sort_order: SortOrder = "asc",
) -> list[StoreListItem]:
    """
    List stores with their overall rating.

    Callers with role 'user' also see their own rating per store (user_rating).
    """
    return list_stores(
        db,
        current_user,
        name=name,
        email=email,
        address=address,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.post("", response_model=StorePublic, status_code=201)
def post_store(
    body: StoreCreate,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> StorePublic:
    """Create a store for any owner (admin only)."""
    try:
        store = create_store(db, body, owner_id=body.owner_id)
    except ServiceError as e:
        raise to_http_exception(e) from e
    return StorePublic.model_validate(store)


@router.post("/create-own", response_model=StorePublic, status_code=201)
def post_own_store(
    body: StoreCreate,
    owner: Annotated[CurrentUser, Depends(require_store_owner)],
    db: Annotated[Session, Depends(get_db)],
) -> StorePublic:
    """Create a store owned by the calling store owner; any ownerId in the body is ignored."""
    try:
        store = create_store(db, body, owner_id=owner.id)
    except ServiceError as e:
        raise to_http_exception(e) from e
    return StorePublic.model_validate(store)


@router.get("/my-stores", response_model=list[OwnedStoreItem])
def get_my_stores(
    owner: Annotated[CurrentUser, Depends(require_store_owner)],
    db: Annotated[Session, Depends(get_db)],
) -> list[OwnedStoreItem]:
    """Stores owned by the caller with average rating, rating count and unique raters."""
    return list_owned_stores(db, owner.id)


@router.get("/{store_id}/ratings", response_model=StoreRatingsResponse)
def get_ratings_for_store(
    store_id: Annotated[int, Path(ge=1)],
    owner: Annotated[CurrentUser, Depends(require_store_owner)],
    db: Annotated[Session, Depends(get_db)],
) -> StoreRatingsResponse:
    """Detailed ratings for a store the caller owns (404 if not theirs)."""
    try:
        return get_store_ratings(db, store_id, owner.id)
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.patch("/{store_id}/update", response_model=StorePublic)
def patch_own_store(
    store_id: Annotated[int, Path(ge=1)],
    body: OwnerStoreUpdate,
    owner: Annotated[CurrentUser, Depends(require_store_owner)],
    db: Annotated[Session, Depends(get_db)],
) -> StorePublic:
    """Update name, email or address of a store the caller owns."""
    try:
        store = update_owned_store(db, store_id, owner.id, body)
    except ServiceError as e:
        raise to_http_exception(e) from e
    return StorePublic.model_validate(store)
