"""Health check endpoint with a credential store connectivity check."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app import __version__
from app.core.config import settings
from app.core.database import check_db_connected, get_db
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(db: Session = Depends(get_db)) -> HealthResponse:
    """
    Report service health. Degraded when the credential store is unreachable,
    since no request can be authenticated without it.
    """
    connected = check_db_connected(db)
    return HealthResponse(
        status="ok" if connected else "degraded",
        environment=settings.APP_ENV,
        version=__version__,
        database="connected" if connected else "disconnected",
    )
