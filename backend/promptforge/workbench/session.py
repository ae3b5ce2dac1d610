from __future__ import annotations

import enum
import secrets
import string
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

import structlog

from promptforge.workbench.client import WorkbenchClient
from promptforge.workbench.errors import TransportError
from promptforge.workbench.notify import Notifier, log_notifier
from promptforge.workbench.state import CURRENT_CONVERSATION_KEY, LocalStateStore

logger = structlog.get_logger()

GREETING = (
    "**Prompt Engineering Session**\n\n"
    "Define your prompt objective and target use case to begin optimization."
)
PLACEHOLDER_TITLE = "New Conversation"
TITLE_MAX_CHARS = 50

SYSTEM_PROMPT = """You are a professional prompt engineer. Optimize prompts for AI systems through iterative refinement.

Process:
1. Analyze the user's prompt objective and requirements
2. Generate two sections:
   a. Revised prompt: Clear, optimized version
   b. Questions: Specific clarifications needed for further improvement
3. Continue refinement until the prompt meets professional standards

Focus on clarity, specificity, and effectiveness."""

_ID_ALPHABET = string.digits + string.ascii_lowercase


class SessionState(enum.Enum):
    NO_SESSION = "no_session"
    ACTIVE = "active"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _parse_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


@dataclass
class Message:
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = field(default_factory=_utcnow)

    def to_payload(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content, "timestamp": self.timestamp.isoformat()}

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> Message:
        return cls(
            role=data["role"],
            content=data.get("content", ""),
            timestamp=_parse_timestamp(data.get("timestamp")) or _utcnow(),
        )


@dataclass
class Conversation:
    """In-memory state of one prompt-refinement conversation.

    ``title`` stays ``None`` until it has been derived from the first user
    message; after that it never changes.
    """

    id: str
    messages: list[Message] = field(default_factory=list)
    title: str | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class ConversationSummary:
    id: str
    title: str
    updated_at: datetime | None


def generate_conversation_id() -> str:
    """Return a new id of the form ``conv_<epoch ms>_<9 random base36 chars>``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"conv_{int(time.time() * 1000)}_{suffix}"


def derive_title(messages: list[Message]) -> str | None:
    """Title from the first user message, or ``None`` if there is none yet."""
    first = next((m for m in messages if m.role == "user"), None)
    if first is None:
        return None
    if len(first.content) > TITLE_MAX_CHARS:
        return first.content[:TITLE_MAX_CHARS] + "..."
    return first.content


def format_error_placeholder(message: str) -> str:
    return f"⚠️ **Error**: {message}\n\nRetry or refresh if the issue persists."


class SessionManager:
    """Owns the lifecycle of the current conversation.

    The session is either ``NO_SESSION`` or ``ACTIVE`` (an id plus at least
    one message). Every mutation persists the full transcript to the server;
    the id of the open conversation is kept in the local state store so it can
    be resumed after a restart.
    """

    def __init__(
        self,
        client: WorkbenchClient,
        state_store: LocalStateStore,
        notifier: Notifier = log_notifier,
        system_prompt: str = SYSTEM_PROMPT,
    ) -> None:
        self.client = client
        self.state_store = state_store
        self.notifier = notifier
        self.system_prompt = system_prompt
        self._current: Conversation | None = None

    @property
    def current(self) -> Conversation | None:
        return self._current

    @property
    def state(self) -> SessionState:
        if self._current is not None and self._current.messages:
            return SessionState.ACTIVE
        return SessionState.NO_SESSION

    async def start(self) -> Conversation:
        """Open a fresh conversation seeded with the assistant greeting."""
        self._current = Conversation(
            id=generate_conversation_id(),
            messages=[Message(role="assistant", content=GREETING)],
        )
        self.state_store.set(CURRENT_CONVERSATION_KEY, self._current.id)
        logger.info("session_started", conv_id=self._current.id)
        await self.persist()
        return self._current

    async def _load(self, conv_id: str) -> Conversation | None:
        try:
            envelope = await self.client.get_conversation(conv_id)
        except TransportError as exc:
            logger.warning("conversation_load_failed", conv_id=conv_id, error=exc.detail)
            return None
        if not envelope.success or not isinstance(envelope.data, dict):
            logger.info("conversation_not_loaded", conv_id=conv_id, error=envelope.error)
            return None

        try:
            messages = [Message.from_payload(m) for m in envelope.data.get("messages") or []]
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("conversation_malformed", conv_id=conv_id, error=str(exc))
            return None
        if not messages:
            logger.info("conversation_empty", conv_id=conv_id)
            return None
        # A stored title is only final once a user message exists to derive it from.
        title = envelope.data.get("title") if any(m.role == "user" for m in messages) else None
        return Conversation(
            id=conv_id,
            messages=messages,
            title=title or None,
            updated_at=_parse_timestamp(envelope.data.get("updated_at")),
        )

    async def resume(self) -> bool:
        """Reopen the conversation recorded in the local state store.

        Returns:
            True if a conversation was restored. On any failure the session
            falls back to ``NO_SESSION`` and the stale pointer is cleared.
        """
        conv_id = self.state_store.get(CURRENT_CONVERSATION_KEY)
        if not conv_id:
            return False
        conversation = await self._load(conv_id)
        if conversation is None:
            self.clear()
            return False
        self._current = conversation
        logger.info("session_resumed", conv_id=conv_id, message_count=len(conversation.messages))
        return True

    async def switch_to(self, conv_id: str) -> bool:
        """Replace the current conversation with a stored one.

        The current session is left untouched if the load fails.
        """
        conversation = await self._load(conv_id)
        if conversation is None:
            self.notifier("error", "Failed to load conversation")
            return False
        self._current = conversation
        self.state_store.set(CURRENT_CONVERSATION_KEY, conv_id)
        logger.info("session_switched", conv_id=conv_id)
        return True

    async def delete(self, conv_id: str) -> bool:
        """Delete a stored conversation, closing the session if it was current."""
        try:
            envelope = await self.client.delete_conversation(conv_id)
        except TransportError as exc:
            self.notifier("error", f"Network error: {exc.detail}")
            return False
        if not envelope.success:
            self.notifier("error", envelope.error or "Failed to delete conversation")
            return False
        if self._current is not None and self._current.id == conv_id:
            self.clear()
        logger.info("conversation_deleted", conv_id=conv_id)
        return True

    def clear(self) -> None:
        self._current = None
        self.state_store.remove(CURRENT_CONVERSATION_KEY)

    async def list_conversations(self) -> list[ConversationSummary]:
        """Stored conversations in server order; empty if they cannot be fetched."""
        try:
            envelope = await self.client.list_conversations()
        except TransportError as exc:
            logger.warning("conversation_list_failed", error=exc.detail)
            return []
        if not envelope.success or not isinstance(envelope.data, list):
            logger.warning("conversation_list_failed", error=envelope.error)
            return []
        try:
            return [
                ConversationSummary(
                    id=item["id"],
                    title=item.get("title") or PLACEHOLDER_TITLE,
                    updated_at=_parse_timestamp(item.get("updated_at")),
                )
                for item in envelope.data
            ]
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("conversation_list_malformed", error=str(exc))
            return []

    async def _append(self, message: Message) -> Message | None:
        if self.state is SessionState.NO_SESSION:
            logger.warning("append_without_session", role=message.role)
            return None
        self._current.messages.append(message)
        await self.persist()
        return message

    async def append_user_message(self, text: str) -> Message | None:
        if not text.strip():
            return None
        return await self._append(Message(role="user", content=text.strip()))

    async def append_assistant_message(self, content: str) -> Message | None:
        return await self._append(Message(role="assistant", content=content))

    async def append_assistant_error(self, message: str) -> Message | None:
        return await self._append(Message(role="assistant", content=format_error_placeholder(message)))

    def request_messages(self) -> list[dict[str, str]]:
        """Outbound chat payload: the system prompt followed by the transcript."""
        messages = [{"role": "system", "content": self.system_prompt}]
        if self._current is not None:
            messages.extend({"role": m.role, "content": m.content} for m in self._current.messages)
        return messages

    async def persist(self) -> bool:
        """Send the full transcript of the current conversation to the server.

        Failures are logged and otherwise ignored; there is no retry.
        """
        conversation = self._current
        if conversation is None or not conversation.messages:
            return False
        if conversation.title is None:
            conversation.title = derive_title(conversation.messages)

        try:
            envelope = await self.client.save_conversation(
                conversation.id,
                conversation.title or PLACEHOLDER_TITLE,
                [m.to_payload() for m in conversation.messages],
            )
        except TransportError as exc:
            logger.warning("conversation_persist_failed", conv_id=conversation.id, error=exc.detail)
            return False
        if not envelope.success:
            logger.warning("conversation_persist_rejected", conv_id=conversation.id, error=envelope.error)
            return False
        conversation.updated_at = _utcnow()
        return True
