from __future__ import annotations

import json

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from promptforge.database import get_db_session
from promptforge.exceptions import NotFoundError, ValidationError
from promptforge.metrics import prompts_used_total
from promptforge.models import SavedPrompt
from promptforge.models.prompt import DEFAULT_CATEGORY
from promptforge.schemas import Envelope, PromptWrite, SavedPromptResponse, ok

logger = structlog.get_logger()
router = APIRouter(prefix="/prompts", tags=["prompts"])


def _parse_prompt_id(prompt_id: str) -> int:
    try:
        return int(prompt_id)
    except ValueError:
        raise ValidationError("Invalid prompt ID format") from None


def _validate(body: PromptWrite) -> None:
    if not body.title.strip():
        raise ValidationError("Title is required")
    if not body.content.strip():
        raise ValidationError("Content is required")


def _encode_tags(tags: list[str]) -> str:
    """Serialize tags as a JSON array, keeping first occurrences in order."""
    unique: list[str] = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in unique:
            unique.append(tag)
    return json.dumps(unique)


async def _get_or_404(session: AsyncSession, prompt_id: int) -> SavedPrompt:
    prompt = await session.get(SavedPrompt, prompt_id)
    if prompt is None:
        raise NotFoundError("Prompt not found")
    return prompt


@router.get("", response_model=Envelope[list[SavedPromptResponse]])
async def list_prompts(
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[list[SavedPromptResponse]]:
    """List the prompt library, most recently updated first."""
    result = await session.execute(select(SavedPrompt).order_by(SavedPrompt.updated_at.desc(), SavedPrompt.id.desc()))
    return ok([SavedPromptResponse.model_validate(p) for p in result.scalars().all()])


@router.post("", response_model=Envelope[SavedPromptResponse])
async def create_prompt(
    body: PromptWrite,
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[SavedPromptResponse]:
    """Add a prompt to the library.

    Args:
        body: Title, content and optional description, category and tags.
        session: Async database session from the connection pool.

    Raises:
        ValidationError: If the title or content is blank.

    Returns:
        Envelope wrapping the stored prompt.
    """
    _validate(body)
    prompt = SavedPrompt(
        title=body.title,
        content=body.content,
        description=body.description,
        category=body.category or DEFAULT_CATEGORY,
        tags=_encode_tags(body.tags),
        usage_count=0,
    )
    session.add(prompt)
    await session.flush()
    logger.info("prompt_created", prompt_id=prompt.id, category=prompt.category)
    return ok(SavedPromptResponse.model_validate(prompt))


@router.get("/{prompt_id}", response_model=Envelope[SavedPromptResponse])
async def get_prompt(
    prompt_id: str,
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[SavedPromptResponse]:
    prompt = await _get_or_404(session, _parse_prompt_id(prompt_id))
    return ok(SavedPromptResponse.model_validate(prompt))


@router.put("/{prompt_id}", response_model=Envelope[SavedPromptResponse])
async def update_prompt(
    prompt_id: str,
    body: PromptWrite,
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[SavedPromptResponse]:
    """Replace the editable fields of a saved prompt.

    Raises:
        ValidationError: If the id is malformed or the title or content is blank.
        NotFoundError: If the prompt does not exist.
    """
    pid = _parse_prompt_id(prompt_id)
    _validate(body)
    prompt = await _get_or_404(session, pid)
    prompt.title = body.title
    prompt.content = body.content
    prompt.description = body.description
    prompt.category = body.category or DEFAULT_CATEGORY
    prompt.tags = _encode_tags(body.tags)
    await session.flush()
    logger.info("prompt_updated", prompt_id=pid)
    return ok(SavedPromptResponse.model_validate(prompt))


@router.delete("/{prompt_id}", response_model=Envelope[str])
async def delete_prompt(
    prompt_id: str,
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[str]:
    """Delete a saved prompt. Unknown ids are not an error."""
    pid = _parse_prompt_id(prompt_id)
    prompt = await session.get(SavedPrompt, pid)
    if prompt is not None:
        await session.delete(prompt)
    logger.info("prompt_deleted", prompt_id=pid, existed=prompt is not None)
    return ok("Prompt deleted successfully")


@router.post("/{prompt_id}/use", response_model=Envelope[SavedPromptResponse])
async def use_prompt(
    prompt_id: str,
    session: AsyncSession = Depends(get_db_session),
) -> Envelope[SavedPromptResponse]:
    """Increment a prompt's usage count and return it for loading into the editor.

    The increment happens in SQL and leaves ``updated_at`` untouched, so using
    a prompt does not reorder the library.
    """
    prompt = await _get_or_404(session, _parse_prompt_id(prompt_id))
    await session.execute(
        update(SavedPrompt)
        .where(SavedPrompt.id == prompt.id)
        .values(usage_count=SavedPrompt.usage_count + 1, updated_at=SavedPrompt.updated_at)
        .execution_options(synchronize_session=False)
    )
    await session.refresh(prompt)
    prompts_used_total.inc()
    logger.info("prompt_used", prompt_id=prompt.id, usage_count=prompt.usage_count)
    return ok(SavedPromptResponse.model_validate(prompt))
