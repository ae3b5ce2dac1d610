from __future__ import annotations

from collections.abc import Callable
from typing import Literal

import structlog

logger = structlog.get_logger()

NotificationLevel = Literal["success", "error", "info"]
Notifier = Callable[[NotificationLevel, str], None]


def log_notifier(level: NotificationLevel, message: str) -> None:
    """Default notifier: write user-facing notifications to the log."""
    if level == "error":
        logger.warning("workbench_notification", level=level, message=message)
    else:
        logger.info("workbench_notification", level=level, message=message)
