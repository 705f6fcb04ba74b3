"""ORM model for 1-5 star ratings a user gives a store."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    UniqueConstraint,
    func,
)

from app.models.base import Base

RATING_MIN = 1
RATING_MAX = 5


class Rating(Base):
    """One rating per (user, store) pair; resubmitting updates the row."""

    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("user_id", "store_id", name="uq_ratings_user_store"),
        CheckConstraint(
            f"rating >= {RATING_MIN} AND rating <= {RATING_MAX}",
            name="ck_ratings_rating_range",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
