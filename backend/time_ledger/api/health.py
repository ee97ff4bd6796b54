import logging
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text

from time_ledger.config import get_settings
from time_ledger.db import SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

HealthStatus = Literal["ok", "degraded"]


class HealthResponse(BaseModel):
    """Service liveness plus database reachability."""

    status: HealthStatus
    app_name: str
    version: str
    environment: str
    database: bool


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Report service status. The database being unreachable degrades it."""
    settings = get_settings()
    database_ok = True
    try:
        await session.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check could not reach the database")
        database_ok = False

    return HealthResponse(
        status="ok" if database_ok else "degraded",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        database=database_ok,
    )
