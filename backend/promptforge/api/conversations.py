from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from promptforge.database import get_db_session
from promptforge.exceptions import NotFoundError, ValidationError
from promptforge.metrics import conversations_deleted_total, conversations_saved_total
from promptforge.models import Conversation, ConversationMessage
from promptforge.models.base import utcnow
from promptforge.models.conversation import DEFAULT_CONVERSATION_TITLE
from promptforge.schemas import ConversationDetail, ConversationSave, ConversationSummary, Envelope, ok

logger = structlog.get_logger()
router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.get("", response_model=Envelope[list[ConversationSummary]])
async def list_conversations(
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[list[ConversationSummary]]:
    """List stored conversations, most recently updated first."""
    stmt = select(Conversation).order_by(Conversation.updated_at.desc())
    result = await session.execute(stmt)
    convs = result.scalars().all()
    return ok([ConversationSummary.model_validate(c) for c in convs])


@router.get("/{conv_id}", response_model=Envelope[ConversationDetail])
async def get_conversation(
    conv_id: str,
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[ConversationDetail]:
    """Return a conversation with its full message thread in stored order.

    Args:
        conv_id: The client-generated conversation id.
        session: Async database session from the connection pool.

    Raises:
        NotFoundError: If no conversation has that id.

    Returns:
        Envelope wrapping the conversation and its ordered messages.
    """
    stmt = select(Conversation).options(selectinload(Conversation.messages)).where(Conversation.id == conv_id)
    result = await session.execute(stmt)
    conv = result.scalar_one_or_none()
    if not conv:
        raise NotFoundError("Conversation not found")
    return ok(ConversationDetail.model_validate(conv))


@router.post("", response_model=Envelope[str])
async def save_conversation(
    body: ConversationSave,
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[str]:
    """Create or replace a conversation snapshot.

    Every save carries the full transcript: existing messages are deleted and
    the submitted list is inserted in order within the same transaction, so
    the last write wins. A new conversation without a title gets the default
    placeholder title.

    Args:
        body: Conversation id, title and the complete message list.
        session: Async database session from the connection pool.

    Raises:
        ValidationError: If the conversation id is missing.

    Returns:
        Envelope with a confirmation message.
    """
    if not body.conversation_id:
        raise ValidationError("Conversation ID is required")

    conv = await session.get(Conversation, body.conversation_id)
    if conv is None:
        conv = Conversation(id=body.conversation_id, title=body.title or DEFAULT_CONVERSATION_TITLE)
        session.add(conv)
        created = True
    else:
        if body.title:
            conv.title = body.title
        conv.updated_at = utcnow()
        await session.execute(delete(ConversationMessage).where(ConversationMessage.conversation_id == conv.id))
        created = False

    for position, msg in enumerate(body.messages):
        session.add(
            ConversationMessage(
                conversation_id=body.conversation_id,
                position=position,
                role=msg.role,
                content=msg.content,
                timestamp=msg.timestamp or utcnow(),
            )
        )
    await session.flush()

    conversations_saved_total.labels(outcome="created" if created else "replaced").inc()
    logger.info(
        "conversation_saved",
        conv_id=body.conversation_id,
        created=created,
        message_count=len(body.messages),
    )
    return ok("Conversation saved successfully")


@router.delete("/{conv_id}", response_model=Envelope[str])
async def delete_conversation(
    conv_id: str,
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[str]:
    """Delete a conversation and, by cascade, its messages.

    Deleting an id that does not exist is not an error.
    """
    conv = await session.get(Conversation, conv_id)
    if conv is not None:
        await session.execute(delete(ConversationMessage).where(ConversationMessage.conversation_id == conv_id))
        await session.delete(conv)
        conversations_deleted_total.inc()
    logger.info("conversation_deleted", conv_id=conv_id, existed=conv is not None)
    return ok("Conversation deleted successfully")
