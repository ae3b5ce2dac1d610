from __future__ import annotations

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from promptforge.models.base import Base, TimestampMixin

DEFAULT_CATEGORY = "General"


class SavedPrompt(Base, TimestampMixin):
    """Prompt library entry. ``tags`` holds a JSON-encoded array of strings."""

    __tablename__ = "saved_prompts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(500))
    content: Mapped[str] = mapped_column(Text)
    description: Mapped[str] = mapped_column(Text, default="")
    category: Mapped[str] = mapped_column(String(100), default=DEFAULT_CATEGORY)
    tags: Mapped[str] = mapped_column(Text, default="[]")
    usage_count: Mapped[int] = mapped_column(Integer, default=0)
