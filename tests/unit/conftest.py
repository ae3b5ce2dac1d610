from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from httpx import ASGITransport

from promptforge.main import app
from promptforge.workbench import LocalStateStore, WorkbenchClient

# ---------------------------------------------------------------------------
# Workbench fixtures. ``workbench_client`` talks to the real app over ASGI and
# an in-memory database; ``failing_client`` simulates an unreachable server.
# ---------------------------------------------------------------------------


def _refuse(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Connection refused", request=request)


@pytest.fixture
async def workbench_client(db_override: None) -> WorkbenchClient:
    async with WorkbenchClient(base_url="http://test/api", transport=ASGITransport(app=app)) as client:
        yield client


@pytest.fixture
async def failing_client() -> WorkbenchClient:
    async with WorkbenchClient(base_url="http://test/api", transport=httpx.MockTransport(_refuse)) as client:
        yield client


@pytest.fixture
def state_store(tmp_path: Path) -> LocalStateStore:
    return LocalStateStore(tmp_path / "state.json")


@pytest.fixture
def notifications() -> list[tuple[str, str]]:
    """Collects ``(level, message)`` pairs passed to a notifier."""
    return []


@pytest.fixture
def notifier(notifications: list[tuple[str, str]]):  # type: ignore[no-untyped-def]
    def _notify(level: str, message: str) -> None:
        notifications.append((level, message))

    return _notify
