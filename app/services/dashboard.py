"""Role-specific dashboard counters, computed at query time."""

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models import Rating, Store, User
from app.models.user import ROLE_ADMIN, ROLE_STORE_OWNER
from app.schemas.auth import CurrentUser
from app.schemas.dashboard import AdminStats, OwnerStats, UserStats


def _avg(value: object) -> float:
    return round(float(value or 0), 2)


def get_dashboard_stats(db: Session, caller: CurrentUser) -> AdminStats | OwnerStats | UserStats:
    """Admins see global totals, store owners their stores, users their own ratings."""
    if caller.role == ROLE_ADMIN:
        return AdminStats(
            total_users=db.query(func.count(User.id)).scalar() or 0,
            total_stores=db.query(func.count(Store.id)).scalar() or 0,
            total_ratings=db.query(func.count(Rating.id)).scalar() or 0,
            average_rating=_avg(db.query(func.avg(Rating.rating)).scalar()),
        )
    if caller.role == ROLE_STORE_OWNER:
        owned = (
            db.query(func.count(Rating.id), func.avg(Rating.rating))
            .join(Store, Rating.store_id == Store.id)
            .filter(Store.owner_id == caller.id)
            .one()
        )
        return OwnerStats(
            my_stores=db.query(func.count(Store.id))
            .filter(Store.owner_id == caller.id)
            .scalar()
            or 0,
            my_ratings=owned[0] or 0,
            my_average_rating=_avg(owned[1]),
        )
    mine = (
        db.query(func.count(Rating.id), func.avg(Rating.rating))
        .filter(Rating.user_id == caller.id)
        .one()
    )
    return UserStats(my_ratings=mine[0] or 0, my_average_rating=_avg(mine[1]))
