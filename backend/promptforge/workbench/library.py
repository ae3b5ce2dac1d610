from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import structlog

from promptforge.workbench.client import Envelope, WorkbenchClient
from promptforge.workbench.errors import TransportError
from promptforge.workbench.notify import Notifier, log_notifier

logger = structlog.get_logger()

_GERUNDS = {"load": "loading", "save": "saving", "update": "updating", "delete": "deleting"}


def _fields(title: str, content: str, description: str, category: str, tags: list[str] | None) -> dict[str, Any]:
    return {"title": title, "content": content, "description": description, "category": category, "tags": tags or []}


@dataclass(frozen=True)
class SavedPrompt:
    id: int
    title: str
    content: str
    description: str = ""
    category: str = "General"
    tags: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    usage_count: int = 0

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> SavedPrompt:
        return cls(
            id=data["id"],
            title=data["title"],
            content=data["content"],
            description=data.get("description", ""),
            category=data.get("category", "General"),
            tags=list(data.get("tags") or []),
            created_at=datetime.fromisoformat(data["created_at"]) if data.get("created_at") else None,
            updated_at=datetime.fromisoformat(data["updated_at"]) if data.get("updated_at") else None,
            usage_count=data.get("usage_count", 0),
        )


class PromptLibrary:
    """Client-side view of the saved prompt library.

    The list is fetched once and cached. Every mutation (create, update,
    delete, use) discards the cache so the next read re-fetches it.
    User-initiated actions report their outcome through the notifier.
    """

    def __init__(self, client: WorkbenchClient, notifier: Notifier = log_notifier) -> None:
        self.client = client
        self.notifier = notifier
        self._cache: list[SavedPrompt] | None = None
        self._generation = 0

    def invalidate(self) -> None:
        self._cache = None
        self._generation += 1

    async def prompts(self) -> list[SavedPrompt]:
        """The library, newest first. Empty when it cannot be fetched."""
        if self._cache is not None:
            return self._cache
        # A mutation during the fetch makes its result stale.
        generation = self._generation
        try:
            envelope = await self.client.list_prompts()
        except TransportError as exc:
            logger.warning("prompt_list_failed", error=exc.detail)
            return []
        if not envelope.success or not isinstance(envelope.data, list):
            logger.warning("prompt_list_failed", error=envelope.error)
            return []
        try:
            prompts = [SavedPrompt.from_payload(item) for item in envelope.data]
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("prompt_list_malformed", error=str(exc))
            return []
        if generation == self._generation:
            self._cache = prompts
        return prompts

    async def _call(self, action: str, request: Any) -> Envelope | None:
        try:
            envelope = await request
        except TransportError as exc:
            logger.warning("prompt_request_failed", action=action, error=exc.detail)
            self.notifier("error", f"Error {_GERUNDS[action]} prompt")
            return None
        if not envelope.success:
            self.notifier("error", f"Failed to {action} prompt: {envelope.error}")
            return None
        return envelope

    async def get(self, prompt_id: int) -> SavedPrompt | None:
        envelope = await self._call("load", self.client.get_prompt(prompt_id))
        return SavedPrompt.from_payload(envelope.data) if envelope else None

    def _check_fields(self, title: str, content: str) -> bool:
        if not title.strip():
            self.notifier("error", "Please enter a title")
            return False
        if not content.strip():
            self.notifier("error", "Please enter prompt content")
            return False
        return True

    async def create(
        self,
        title: str,
        content: str,
        description: str = "",
        category: str = "",
        tags: list[str] | None = None,
    ) -> SavedPrompt | None:
        if not self._check_fields(title, content):
            return None
        fields = _fields(title, content, description, category, tags)
        envelope = await self._call("save", self.client.create_prompt(fields))
        if envelope is None:
            return None
        self.invalidate()
        self.notifier("success", "Prompt saved successfully!")
        return SavedPrompt.from_payload(envelope.data)

    async def update(
        self,
        prompt_id: int,
        title: str,
        content: str,
        description: str = "",
        category: str = "",
        tags: list[str] | None = None,
    ) -> SavedPrompt | None:
        if not self._check_fields(title, content):
            return None
        fields = _fields(title, content, description, category, tags)
        envelope = await self._call("update", self.client.update_prompt(prompt_id, fields))
        if envelope is None:
            return None
        self.invalidate()
        self.notifier("success", "Prompt updated successfully!")
        return SavedPrompt.from_payload(envelope.data)

    async def delete(self, prompt_id: int) -> bool:
        envelope = await self._call("delete", self.client.delete_prompt(prompt_id))
        if envelope is None:
            return False
        self.invalidate()
        self.notifier("success", "Prompt deleted successfully!")
        return True

    async def use(self, prompt_id: int) -> SavedPrompt | None:
        """Mark a prompt as used and return it with its new usage count."""
        envelope = await self._call("load", self.client.use_prompt(prompt_id))
        if envelope is None:
            return None
        self.invalidate()
        self.notifier("success", "Prompt loaded successfully!")
        return SavedPrompt.from_payload(envelope.data)
