"""Rating endpoints: submit/update, own ratings, all ratings (admin), delete."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user, require_admin, require_rater
from app.api.v1.errors import to_http_exception
from app.core.database import get_db
from app.schemas.auth import CurrentUser, MessageResponse
from app.schemas.ratings import (
    AllRatingsResponse,
    MyRatingsResponse,
    RatingPublic,
    RatingSubmit,
    RatingSubmitResponse,
)
from app.services.errors import ServiceError
from app.services.ratings import (
    delete_rating,
    list_all_ratings,
    list_user_ratings,
    submit_rating,
)

router = APIRouter()


@router.post("", response_model=RatingSubmitResponse)
def post_rating(
    body: RatingSubmit,
    rater: Annotated[CurrentUser, Depends(require_rater)],
    db: Annotated[Session, Depends(get_db)],
) -> RatingSubmitResponse:
    """
    Submit a 1-5 rating for a store, or update the caller's existing one.

    Returns the stored rating and the store's new average (one decimal).
    """
    try:
        row, created, average = submit_rating(db, rater.id, body.store_id, body.rating)
    except ServiceError as e:
        raise to_http_exception(e) from e
    return RatingSubmitResponse(
        rating=RatingPublic.model_validate(row),
        store_average=average,
        message="Rating submitted successfully" if created else "Rating updated successfully",
    )


@router.get("/my-ratings", response_model=MyRatingsResponse)
def get_my_ratings(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> MyRatingsResponse:
    """Ratings the caller has given, newest update first."""
    ratings = list_user_ratings(db, current_user.id)
    return MyRatingsResponse(count=len(ratings), ratings=ratings)


@router.get("", response_model=AllRatingsResponse)
def get_all_ratings(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> AllRatingsResponse:
    """All ratings with author and store details (admin only)."""
    ratings = list_all_ratings(db)
    return AllRatingsResponse(count=len(ratings), ratings=ratings)


@router.delete("/{rating_id}", response_model=MessageResponse)
def remove_rating(
    rating_id: Annotated[int, Path(ge=1)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Delete a rating; authors may delete their own, admins any."""
    try:
        delete_rating(db, current_user, rating_id)
    except ServiceError as e:
        raise to_http_exception(e) from e
    return MessageResponse(message="Rating deleted successfully")
