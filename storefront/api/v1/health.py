"""Liveness for the storefront API: database reachability and the selected mail transport."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.core.config import Settings, get_settings
from storefront.core.database import check_db_connected, get_db
from storefront.schemas.health import HealthResponse
from storefront.services.mailer import mail_transport

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """
    Report "degraded" rather than an error status when the database is
    unreachable; load balancers read the body, monitoring reads the fields.
    """
    connected = check_db_connected(db)
    if not connected:
        logger.warning("Health check could not reach the database")
    return HealthResponse(
        status="ok" if connected else "degraded",
        environment=settings.APP_ENV,
        database="connected" if connected else "disconnected",
        mail=mail_transport(settings),
    )
