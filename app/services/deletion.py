"""Cascading deletion of users and stores.

Each operation validates its target, then removes dependent rows and the
target itself inside one transaction, counting what every step removed.
Either all steps commit or none do; callers only ever see the terminal
result or a ServiceError.

User deletion order:
  1. ratings authored by the user
  2. for store owners: ratings on owned stores, then the owned stores
  3. the user row

Store deletion order:
  1. ratings on the store
  2. the store row
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.database import transaction
from app.models import Rating, Store, User
from app.models.user import ROLE_STORE_OWNER
from app.schemas.admin import (
    DeletedStore,
    DeletedUser,
    StoreDeletionResult,
    StoreDeletionSummary,
    UserDeletionResult,
    UserDeletionSummary,
)
from app.services.errors import (
    InvalidArgumentError,
    InvalidOperationError,
    NotFoundError,
    translate_db_error,
)

logger = logging.getLogger(__name__)


def parse_entity_id(raw: int | str | None, label: str) -> int:
    """
    Parse a path identifier into a positive int.

    Accepts ints (not bools) and strings of ASCII digits with optional
    surrounding whitespace. Raises InvalidArgumentError otherwise.
    """
    if isinstance(raw, bool):
        raise InvalidArgumentError(f"Invalid {label} ID")
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and raw.strip().isascii() and raw.strip().isdigit():
        value = int(raw.strip())
    else:
        raise InvalidArgumentError(f"Invalid {label} ID")
    if value <= 0:
        raise InvalidArgumentError(f"Invalid {label} ID")
    return value


def _delete_owned_stores(db: Session, owner_id: int) -> tuple[int, int]:
    """Delete ratings on the owner's stores, then the stores. Returns (stores, ratings)."""
    store_ids = [
        row.id for row in db.query(Store.id).filter(Store.owner_id == owner_id).all()
    ]
    if not store_ids:
        return 0, 0
    ratings_deleted = (
        db.query(Rating)
        .filter(Rating.store_id.in_(store_ids))
        .delete(synchronize_session=False)
    )
    stores_deleted = (
        db.query(Store)
        .filter(Store.id.in_(store_ids))
        .delete(synchronize_session=False)
    )
    return stores_deleted, ratings_deleted


def delete_user(db: Session, actor_id: int, target_user_id: int | str) -> UserDeletionResult:
    """
    Delete a user and everything that depends on it, atomically.

    actor_id is the authenticated admin; role is checked by the caller. An
    admin may not delete their own account here.

    Raises InvalidArgumentError, NotFoundError, InvalidOperationError,
    ConstraintViolationError or StorageError. Nothing is committed on error.
    """
    user_id = parse_entity_id(target_user_id, "user")
    try:
        with transaction(db):
            user = db.query(User).filter(User.id == user_id).first()
            if user is None:
                raise NotFoundError("User not found")
            if user_id == actor_id:
                raise InvalidOperationError("Cannot delete your own account")

            deleted_user = DeletedUser(
                id=user.id, name=user.name, email=user.email, role=user.role
            )

            ratings_authored = (
                db.query(Rating)
                .filter(Rating.user_id == user_id)
                .delete(synchronize_session=False)
            )

            stores_deleted = 0
            ratings_on_stores = 0
            if deleted_user.role == ROLE_STORE_OWNER:
                stores_deleted, ratings_on_stores = _delete_owned_stores(db, user_id)

            users_deleted = (
                db.query(User)
                .filter(User.id == user_id)
                .delete(synchronize_session=False)
            )
            if users_deleted == 0:
                raise NotFoundError("User not found during deletion")
    except SQLAlchemyError as e:
        logger.error(
            "User deletion rolled back",
            extra={"user_id": user_id, "actor_id": actor_id, "error": type(e).__name__},
        )
        raise translate_db_error(e, "delete user") from e

    summary = UserDeletionSummary(
        ratings_authored_deleted=ratings_authored,
        stores_deleted=stores_deleted,
        ratings_on_owned_stores_deleted=ratings_on_stores,
    )
    logger.info(
        "User deleted",
        extra={
            "user_id": user_id,
            "actor_id": actor_id,
            "role": deleted_user.role,
            "ratings_authored_deleted": summary.ratings_authored_deleted,
            "stores_deleted": summary.stores_deleted,
            "ratings_on_owned_stores_deleted": summary.ratings_on_owned_stores_deleted,
        },
    )
    return UserDeletionResult(deleted_user=deleted_user, summary=summary)


def delete_store(db: Session, actor_id: int, target_store_id: int | str) -> StoreDeletionResult:
    """
    Delete a store and its ratings, atomically.

    Raises InvalidArgumentError, NotFoundError, ConstraintViolationError or
    StorageError. Nothing is committed on error.
    """
    store_id = parse_entity_id(target_store_id, "store")
    try:
        with transaction(db):
            store = db.query(Store).filter(Store.id == store_id).first()
            if store is None:
                raise NotFoundError("Store not found")

            deleted_store = DeletedStore(id=store.id, name=store.name, email=store.email)

            ratings_deleted = (
                db.query(Rating)
                .filter(Rating.store_id == store_id)
                .delete(synchronize_session=False)
            )
            stores_deleted = (
                db.query(Store)
                .filter(Store.id == store_id)
                .delete(synchronize_session=False)
            )
            if stores_deleted == 0:
                raise NotFoundError("Store not found during deletion")
    except SQLAlchemyError as e:
        logger.error(
            "Store deletion rolled back",
            extra={"store_id": store_id, "actor_id": actor_id, "error": type(e).__name__},
        )
        raise translate_db_error(e, "delete store") from e

    logger.info(
        "Store deleted",
        extra={"store_id": store_id, "actor_id": actor_id, "ratings_deleted": ratings_deleted},
    )
    return StoreDeletionResult(
        deleted_store=deleted_store,
        summary=StoreDeletionSummary(ratings_deleted=ratings_deleted),
    )
