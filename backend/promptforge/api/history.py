from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from promptforge.config import settings
from promptforge.database import get_db_session
from promptforge.metrics import history_records_total
from promptforge.models import HistoryItem
from promptforge.schemas import Envelope, HistoryCreate, HistoryItemResponse, ok

logger = structlog.get_logger()
router = APIRouter(prefix="/history", tags=["history"])


@router.get("", response_model=Envelope[list[HistoryItemResponse]])
async def list_history(
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[list[HistoryItemResponse]]:
    """Return the most recent execution records, newest first."""
    stmt = (
        select(HistoryItem)
        .order_by(HistoryItem.timestamp.desc(), HistoryItem.id.desc())
        .limit(settings.HISTORY_LIMIT)
    )
    result = await session.execute(stmt)
    items = result.scalars().all()
    return ok([HistoryItemResponse.model_validate(i) for i in items])


@router.post("", response_model=Envelope[str])
async def save_history(
    body: HistoryCreate,
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[str]:
    """Append one immutable execution record.

    Args:
        body: The request parameters and outcome of a single test execution.
        session: Async database session from the connection pool.

    Returns:
        Envelope with a confirmation message.
    """
    item = HistoryItem(
        prompt=body.prompt,
        model=body.model,
        temperature=body.temperature,
        max_tokens=body.max_tokens,
        success=body.success,
        response=body.response,
        error_msg=body.error_msg,
    )
    session.add(item)
    await session.flush()

    history_records_total.labels(success=str(body.success).lower()).inc()
    logger.info("history_saved", history_id=item.id, model=body.model, success=body.success)
    return ok("History saved successfully")


@router.delete("", response_model=Envelope[str])
async def clear_history(
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[str]:
    """Remove every execution record."""
    result = await session.execute(delete(HistoryItem))
    logger.info("history_cleared", rows_deleted=result.rowcount)
    return ok("History cleared successfully")
