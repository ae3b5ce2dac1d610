from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict


class MessageIn(BaseModel):
    """One transcript entry as sent by the client."""

    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime | None = None


class ConversationSave(BaseModel):
    """Request body for creating or replacing a conversation snapshot."""

    conversation_id: str = ""
    title: str = ""
    messages: list[MessageIn] = []


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    role: str
    content: str
    timestamp: datetime


class ConversationSummary(BaseModel):
    """Response schema for a conversation in the history list."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    created_at: datetime
    updated_at: datetime


class ConversationDetail(ConversationSummary):
    """A conversation together with its full ordered transcript."""

    messages: list[MessageResponse]
