from __future__ import annotations

import json
from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator


class PromptWrite(BaseModel):
    """Request body for creating or updating a saved prompt."""

    title: str = ""
    content: str = ""
    description: str = ""
    category: str = ""
    tags: list[str] = []


class SavedPromptResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    description: str
    category: str
    tags: list[str]
    created_at: datetime
    updated_at: datetime
    usage_count: int

    @field_validator("tags", mode="before")
    @classmethod
    def _decode_tags(cls, value: object) -> object:
        """Tags are stored as a JSON array string on the ORM row."""
        if isinstance(value, str):
            return json.loads(value) if value else []
        return value
