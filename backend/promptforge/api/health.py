from __future__ import annotations

import structlog
from fastapi import APIRouter
from sqlalchemy import text

from promptforge import __version__
from promptforge.database import async_session_factory
from promptforge.schemas.health import HealthResponse, ServiceStatus

logger = structlog.get_logger()
router = APIRouter()


async def _check_database() -> ServiceStatus:
    try:
        async with async_session_factory() as session:
            await session.execute(text("SELECT 1"))
        return ServiceStatus(status="healthy")
    except Exception as e:
        logger.error("health_check_database_failed", error=str(e))
        return ServiceStatus(status="unhealthy", detail=str(e))


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check health of the persistence backend."""
    db = await _check_database()
    return HealthResponse(
        status="healthy" if db.status == "healthy" else "degraded",
        service="PromptForge API",
        version=__version__,
        database=db,
    )
