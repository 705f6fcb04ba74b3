"""Ratings: upsert per (user, store), listings, and deletion by author or admin."""

import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.database import transaction
from app.models import Rating, Store, User
from app.models.user import ROLE_ADMIN
from app.schemas.auth import CurrentUser
from app.schemas.ratings import AdminRatingItem, MyRatingItem
from app.services.errors import NotFoundError, PermissionDeniedError, translate_db_error

logger = logging.getLogger(__name__)


def _write_rating(db: Session, user_id: int, store_id: int, value: int) -> tuple[Rating, bool]:
    """Insert or update the caller's rating. Returns (row, created)."""
    with transaction(db):
        if db.get(Store, store_id) is None:
            raise NotFoundError("Store not found")
        existing = (
            db.query(Rating)
            .filter(Rating.user_id == user_id, Rating.store_id == store_id)
            .first()
        )
        if existing is not None:
            existing.rating = value
            existing.updated_at = func.now()
            db.flush()
            return existing, False
        row = Rating(user_id=user_id, store_id=store_id, rating=value)
        db.add(row)
        db.flush()
        return row, True


def submit_rating(
    db: Session, user_id: int, store_id: int, value: int
) -> tuple[Rating, bool, float]:
    """
    Upsert a rating and return (row, created, store_average).

    A concurrent first submission for the same pair trips the unique
    constraint; the write is then retried once and lands as an update.
    """
    try:
        try:
            row, created = _write_rating(db, user_id, store_id, value)
        except IntegrityError:
            row, created = _write_rating(db, user_id, store_id, value)
        db.refresh(row)
        average = (
            db.query(func.avg(Rating.rating)).filter(Rating.store_id == store_id).scalar()
        )
    except SQLAlchemyError as e:
        raise translate_db_error(e, "submit rating") from e
    logger.info(
        "Rating %s",
        "created" if created else "updated",
        extra={"user_id": user_id, "store_id": store_id, "rating": value},
    )
    return row, created, round(float(average or 0), 1)


def list_user_ratings(db: Session, user_id: int) -> list[MyRatingItem]:
    """The user's ratings with store details, most recently updated first."""
    rows = (
        db.query(
            Rating.id,
            Rating.rating,
            Rating.created_at,
            Rating.updated_at,
            Store.id.label("store_id"),
            Store.name.label("store_name"),
            Store.email.label("store_email"),
            Store.address.label("store_address"),
        )
        .join(Store, Rating.store_id == Store.id)
        .filter(Rating.user_id == user_id)
        .order_by(Rating.updated_at.desc(), Rating.id.desc())
        .all()
    )
    return [MyRatingItem.model_validate(row._asdict()) for row in rows]


def list_all_ratings(db: Session) -> list[AdminRatingItem]:
    """Every rating with author and store details, most recently updated first."""
    rows = (
        db.query(
            Rating.id,
            Rating.rating,
            Rating.created_at,
            Rating.updated_at,
            User.id.label("user_id"),
            User.name.label("user_name"),
            User.email.label("user_email"),
            Store.id.label("store_id"),
            Store.name.label("store_name"),
            Store.email.label("store_email"),
        )
        .join(User, Rating.user_id == User.id)
        .join(Store, Rating.store_id == Store.id)
        .order_by(Rating.updated_at.desc(), Rating.id.desc())
        .all()
    )
    return [AdminRatingItem.model_validate(row._asdict()) for row in rows]


def delete_rating(db: Session, caller: CurrentUser, rating_id: int) -> None:
    """Delete one rating. Authors may delete their own; admins may delete any."""
    try:
        with transaction(db):
            rating = db.get(Rating, rating_id)
            if rating is None:
                raise NotFoundError("Rating not found")
            if caller.role != ROLE_ADMIN and rating.user_id != caller.id:
                raise PermissionDeniedError("Not authorized to delete this rating")
            db.delete(rating)
    except SQLAlchemyError as e:
        raise translate_db_error(e, "delete rating") from e
    logger.info("Rating deleted", extra={"rating_id": rating_id, "actor_id": caller.id})
