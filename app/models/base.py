"""SQLAlchemy declarative Base and shared model configuration."""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Matches the index names used in alembic/versions (op.f("ix_<table>_<column>")).
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
}


class Base(DeclarativeBase):
    """Declarative base for users, stores and ratings."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)
