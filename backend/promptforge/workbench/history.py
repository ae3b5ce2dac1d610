from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import structlog

from promptforge.workbench.client import WorkbenchClient
from promptforge.workbench.errors import TransportError

logger = structlog.get_logger()


@dataclass
class HistoryRecord:
    """One prompt execution and its outcome.

    Exactly one of ``response`` and ``error_msg`` is set, depending on
    ``success``.
    """

    prompt: str
    model: str
    temperature: float
    max_tokens: int | None
    success: bool
    response: str | None = None
    error_msg: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if self.success:
            self.response = self.response or ""
            self.error_msg = None
        else:
            self.error_msg = self.error_msg or "Unknown error"
            self.response = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "prompt": self.prompt,
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "success": self.success,
            "response": self.response,
            "error_msg": self.error_msg,
        }

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> HistoryRecord:
        record = cls(
            prompt=data["prompt"],
            model=data["model"],
            temperature=data["temperature"],
            max_tokens=data.get("max_tokens"),
            success=data["success"],
            response=data.get("response"),
            error_msg=data.get("error_msg"),
        )
        if data.get("timestamp"):
            record.timestamp = datetime.fromisoformat(data["timestamp"])
        return record


class HistoryRecorder:
    """Append-only log of test executions.

    Recording never fails the caller: if the server cannot take a record it is
    kept in an in-memory fallback list for the life of the process instead.
    """

    def __init__(self, client: WorkbenchClient) -> None:
        self.client = client
        self._fallback: list[HistoryRecord] = []

    @property
    def fallback(self) -> list[HistoryRecord]:
        """Records that could not be persisted, newest first."""
        return list(self._fallback)

    async def record(self, record: HistoryRecord) -> bool:
        """Persist one record.

        Returns:
            True if the server stored the record, False if it went to the
            in-memory fallback.
        """
        try:
            envelope = await self.client.save_history(record.to_payload())
        except TransportError as exc:
            logger.warning("history_save_failed", error=exc.detail)
        else:
            if envelope.success:
                return True
            logger.warning("history_save_rejected", error=envelope.error)
        self._fallback.insert(0, record)
        return False

    async def list(self) -> list[HistoryRecord]:
        """Stored records, newest first; empty if the server is unreachable."""
        try:
            envelope = await self.client.list_history()
        except TransportError as exc:
            logger.warning("history_list_failed", error=exc.detail)
            return []
        if not envelope.success or not isinstance(envelope.data, list):
            logger.warning("history_list_failed", error=envelope.error)
            return []
        try:
            return [HistoryRecord.from_payload(item) for item in envelope.data]
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("history_list_malformed", error=str(exc))
            return []

    async def clear(self) -> bool:
        try:
            envelope = await self.client.clear_history()
        except TransportError as exc:
            logger.warning("history_clear_failed", error=exc.detail)
            return False
        if not envelope.success:
            logger.warning("history_clear_failed", error=envelope.error)
            return False
        return True
