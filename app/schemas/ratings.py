"""Pydantic schemas for submitting and listing ratings."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.rating import RATING_MAX, RATING_MIN


class RatingSubmit(BaseModel):
    """Body for POST /ratings (sent as {storeId, rating})."""

    model_config = ConfigDict(populate_by_name=True)

    store_id: int = Field(..., ge=1, alias="storeId", description="Store being rated.")
    rating: int = Field(..., ge=RATING_MIN, le=RATING_MAX, description="Stars, 1-5.")


class RatingPublic(BaseModel):
    """Rating row as returned by the API."""

    model_config = {"from_attributes": True}

    id: int
    user_id: int
    store_id: int
    rating: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RatingSubmitResponse(BaseModel):
    """Response for POST /ratings: the stored row and the store's new average."""

    model_config = ConfigDict(populate_by_name=True)

    rating: RatingPublic
    store_average: float = Field(..., alias="storeAverage")
    message: str


class MyRatingItem(BaseModel):
    """A rating by the caller, joined with the rated store."""

    id: int
    rating: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    store_id: int
    store_name: str
    store_email: str
    store_address: str | None = None


class AdminRatingItem(BaseModel):
    """A rating joined with both its author and its store."""

    id: int
    rating: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    user_id: int
    user_name: str
    user_email: str
    store_id: int
    store_name: str
    store_email: str


class MyRatingsResponse(BaseModel):
    """Response for GET /ratings/my-ratings."""

    count: int
    ratings: list[MyRatingItem]


class AllRatingsResponse(BaseModel):
    """Response for GET /ratings (admin only)."""

    count: int
    ratings: list[AdminRatingItem]
