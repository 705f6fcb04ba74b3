"""ORM model for application users (auth and RBAC)."""

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, Text, func

from app.models.base import Base

ROLE_USER = "user"
ROLE_STORE_OWNER = "store_owner"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_STORE_OWNER, ROLE_ADMIN)


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    role: 'user', 'store_owner' or 'admin'. Only store owners own stores.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "role IN ('user', 'store_owner', 'admin')", name="ck_users_role"
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(60), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    address = Column(Text, nullable=True)
    role = Column(String(32), nullable=False, server_default=ROLE_USER)
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
