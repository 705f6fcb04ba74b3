"""Stores: listing with query-time averages, creation, ownership views and updates."""

import logging

from sqlalchemy import and_, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from app.core.database import transaction
from app.models import Rating, Store, User
from app.models.user import ROLE_USER
from app.schemas.auth import CurrentUser
from app.schemas.stores import (
    AdminStoreUpdate,
    OwnedStoreItem,
    OwnerStoreUpdate,
    StoreCreate,
    StoreListItem,
    StorePublic,
    StoreRatingEntry,
    StoreRatingsResponse,
    StoreRatingsSummary,
    StoreSortField,
)
from app.services.errors import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    translate_db_error,
)
from app.services.users import SortOrder

logger = logging.getLogger(__name__)


def _email_taken(db: Session, email: str, exclude_store_id: int | None = None) -> bool:
    query = db.query(Store.id).filter(Store.email == email)
    if exclude_store_id is not None:
        query = query.filter(Store.id != exclude_store_id)
    return query.first() is not None


def _average(value: object, places: int = 1) -> float:
    return round(float(value or 0), places)


def list_stores(
    db: Session,
    caller: CurrentUser,
    name: str | None = None,
    email: str | None = None,
    address: str | None = None,
    sort_by: StoreSortField = "name",
    sort_order: SortOrder = "asc",
) -> list[StoreListItem]:
    """
    List stores with their overall average rating.

    Callers with role 'user' also get their own rating for each store.
    Text filters are case-insensitive substring matches.
    """
    overall = func.coalesce(func.avg(Rating.rating), 0).label("overall_rating")
    include_own = caller.role == ROLE_USER
    columns = [Store, overall]
    own = None
    if include_own:
        own = aliased(Rating)
        columns.append(own.rating.label("user_rating"))

    query = db.query(*columns).outerjoin(Rating, Rating.store_id == Store.id)
    if own is not None:
        query = query.outerjoin(
            own, and_(own.store_id == Store.id, own.user_id == caller.id)
        )
    if name:
        query = query.filter(Store.name.ilike(f"%{name}%"))
    if email:
        query = query.filter(Store.email.ilike(f"%{email}%"))
    if address:
        query = query.filter(Store.address.ilike(f"%{address}%"))

    group_by = [Store.id]
    if own is not None:
        group_by.append(own.rating)
    query = query.group_by(*group_by)

    sort_column = overall if sort_by == "overall_rating" else getattr(Store, sort_by)
    query = query.order_by(
        sort_column.desc() if sort_order == "desc" else sort_column.asc(), Store.id
    )

    items: list[StoreListItem] = []
    for row in query.all():
        store = row[0]
        items.append(
            StoreListItem(
                **StorePublic.model_validate(store).model_dump(),
                overall_rating=_average(row.overall_rating),
                user_rating=row.user_rating if include_own else None,
            )
        )
    return items


def create_store(db: Session, body: StoreCreate, owner_id: int | None) -> Store:
    """Create a store owned by owner_id. Duplicate email is a ConflictError."""
    try:
        with transaction(db):
            if _email_taken(db, body.email):
                raise ConflictError("Store already exists")
            if owner_id is not None and db.get(User, owner_id) is None:
                raise InvalidArgumentError("Invalid owner ID")
            store = Store(
                name=body.name,
                email=body.email,
                address=body.address,
                owner_id=owner_id,
            )
            db.add(store)
            db.flush()
    except SQLAlchemyError as e:
        raise translate_db_error(e, "create store") from e
    db.refresh(store)
    logger.info("Store created", extra={"store_id": store.id, "owner_id": owner_id})
    return store


def list_owned_stores(db: Session, owner_id: int) -> list[OwnedStoreItem]:
    """Stores owned by owner_id with rating aggregates, newest first."""
    rows = (
        db.query(
            Store,
            func.coalesce(func.avg(Rating.rating), 0).label("average_rating"),
            func.count(Rating.id).label("total_ratings"),
            func.count(func.distinct(Rating.user_id)).label("unique_raters"),
        )
        .outerjoin(Rating, Rating.store_id == Store.id)
        .filter(Store.owner_id == owner_id)
        .group_by(Store.id)
        .order_by(Store.created_at.desc(), Store.id.desc())
        .all()
    )
    return [
        OwnedStoreItem(
            **StorePublic.model_validate(row[0]).model_dump(),
            average_rating=_average(row.average_rating),
            total_ratings=row.total_ratings,
            unique_raters=row.unique_raters,
        )
        for row in rows
    ]


def _owned_store(db: Session, store_id: int, owner_id: int) -> Store:
    store = (
        db.query(Store)
        .filter(Store.id == store_id, Store.owner_id == owner_id)
        .first()
    )
    if store is None:
        raise NotFoundError("Store not found or access denied")
    return store


def get_store_ratings(db: Session, store_id: int, owner_id: int) -> StoreRatingsResponse:
    """Ratings on a store the caller owns, with rater details, newest update first."""
    store = _owned_store(db, store_id, owner_id)
    rows = (
        db.query(
            User.id.label("user_id"),
            User.name.label("user_name"),
            User.email.label("user_email"),
            Rating.rating,
            Rating.created_at,
            Rating.updated_at,
        )
        .join(User, Rating.user_id == User.id)
        .filter(Rating.store_id == store_id)
        .order_by(Rating.updated_at.desc(), Rating.id.desc())
        .all()
    )
    ratings = [StoreRatingEntry.model_validate(row._asdict()) for row in rows]
    average = sum(r.rating for r in ratings) / len(ratings) if ratings else 0.0
    return StoreRatingsResponse(
        store=StorePublic.model_validate(store),
        ratings=ratings,
        summary=StoreRatingsSummary(
            total_ratings=len(ratings), average_rating=round(average, 1)
        ),
    )


def _apply_store_fields(store: Store, changes: OwnerStoreUpdate) -> bool:
    """Apply each permitted store field that was sent. Returns True if anything changed."""
    changed = False
    if changes.name is not None:
        store.name = changes.name
        changed = True
    if changes.email is not None:
        store.email = changes.email
        changed = True
    if "address" in changes.model_fields_set:
        store.address = changes.address
        changed = True
    return changed


def update_owned_store(
    db: Session, store_id: int, owner_id: int, changes: OwnerStoreUpdate
) -> Store:
    """Update a store the caller owns. The owner cannot be reassigned here."""
    try:
        with transaction(db):
            store = _owned_store(db, store_id, owner_id)
            if changes.email is not None and _email_taken(db, changes.email, store_id):
                raise ConflictError("Store with this email already exists")
            if not _apply_store_fields(store, changes):
                raise InvalidArgumentError("No valid fields provided for update")
            db.flush()
    except SQLAlchemyError as e:
        raise translate_db_error(e, "update store") from e
    db.refresh(store)
    logger.info("Store updated by owner", extra={"store_id": store_id, "owner_id": owner_id})
    return store


def admin_update_store(db: Session, store_id: int, changes: AdminStoreUpdate) -> Store:
    """Update any store, including reassigning its owner."""
    try:
        with transaction(db):
            store = db.query(Store).filter(Store.id == store_id).first()
            if store is None:
                raise NotFoundError("Store not found")
            if changes.email is not None and _email_taken(db, changes.email, store_id):
                raise ConflictError("Store with this email already exists")
            changed = _apply_store_fields(store, changes)
            if changes.owner_id is not None:
                if db.get(User, changes.owner_id) is None:
                    raise InvalidArgumentError("Invalid owner ID")
                store.owner_id = changes.owner_id
                changed = True
            if not changed:
                raise InvalidArgumentError("No valid fields provided for update")
            db.flush()
    except SQLAlchemyError as e:
        raise translate_db_error(e, "update store") from e
    db.refresh(store)
    logger.info("Store updated by admin", extra={"store_id": store_id})
    return store
