from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import structlog

from promptforge.config import settings

logger = structlog.get_logger()

CURRENT_CONVERSATION_KEY = "current_conversation_id"


class LocalStateStore:
    """Small durable key-value store backed by a JSON file.

    Holds client-side state that must survive a restart, such as the id of
    the conversation that was open last. An unreadable file is treated as
    empty.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path if path is not None else settings.WORKBENCH_STATE_PATH)

    def _load(self) -> dict[str, Any]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning("state_file_unreadable", path=str(self.path), error=str(exc))
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.replace(tmp, self.path)

    def get(self, key: str) -> Any:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._dump(data)
