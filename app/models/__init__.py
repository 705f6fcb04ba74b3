"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.rating import Rating
from app.models.store import Store
from app.models.user import User

__all__ = ["Base", "Rating", "Store", "User"]
