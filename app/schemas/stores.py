"""Pydantic schemas for stores: creation, explicit update structs, and listing rows."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from app.schemas.users import normalize_address

StoreSortField = Literal["name", "email", "address", "created_at", "overall_rating"]


def _store_name(value: str) -> str:
    name = value.strip()
    if not name:
        raise ValueError("Store name cannot be empty")
    if len(name) > 255:
        raise ValueError("Store name cannot exceed 255 characters")
    return name


class StorePublic(BaseModel):
    """Store row as returned by the API."""

    model_config = {"from_attributes": True}

    id: int
    name: str
    email: str
    address: str | None = None
    owner_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StoreCreate(BaseModel):
    """Body for store creation. owner_id is only honored for admins (sent as ownerId)."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    email: EmailStr
    address: str | None = None
    owner_id: int | None = Field(default=None, ge=1, alias="ownerId")

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _store_name(v)

    @field_validator("address")
    @classmethod
    def _address(cls, v: str | None) -> str | None:
        return normalize_address(v)


class OwnerStoreUpdate(BaseModel):
    """
    Fields a store owner may change on a store they own.

    - name: replaces the store name (trimmed, non-empty).
    - email: replaces the contact email.
    - address: replaces the address; blank clears it.
    """

    model_config = {"extra": "forbid"}

    name: str | None = None
    email: EmailStr | None = None
    address: str | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str | None) -> str | None:
        return None if v is None else _store_name(v)

    @field_validator("address")
    @classmethod
    def _address(cls, v: str | None) -> str | None:
        return normalize_address(v)


class AdminStoreUpdate(OwnerStoreUpdate):
    """Owner fields plus owner_id, which reassigns the store to another user."""

    owner_id: int | None = Field(default=None, ge=1)


class StoreListItem(StorePublic):
    """Row for GET /stores; user_rating is set only for callers with role 'user'."""

    overall_rating: float = 0.0
    user_rating: int | None = None


class OwnedStoreItem(StorePublic):
    """Row for GET /stores/my-stores."""

    average_rating: float = 0.0
    total_ratings: int = 0
    unique_raters: int = 0


class StoreRatingEntry(BaseModel):
    """One rating on an owned store, with the rater's identity."""

    user_id: int
    user_name: str
    user_email: str
    rating: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StoreRatingsSummary(BaseModel):
    """Totals for an owned store's ratings."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_ratings: int
    average_rating: float


class StoreRatingsResponse(BaseModel):
    """Response for GET /stores/{id}/ratings."""

    store: StorePublic
    ratings: list[StoreRatingEntry]
    summary: StoreRatingsSummary
