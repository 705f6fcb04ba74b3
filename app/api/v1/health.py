"""Health check endpoint with database connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import check_db_connected, get_db
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(db: Annotated[Session, Depends(get_db)]) -> HealthResponse:
    """Report service status and whether the database answers. Unauthenticated."""
    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database="connected" if check_db_connected(db) else "disconnected",
    )
