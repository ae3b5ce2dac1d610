from __future__ import annotations

import httpx
import pytest

from promptforge.workbench import TransportError, WorkbenchClient, close_workbench_client, get_workbench_client


def _client(handler) -> WorkbenchClient:  # type: ignore[no-untyped-def]
    return WorkbenchClient(base_url="http://test/api", transport=httpx.MockTransport(handler))


@pytest.mark.anyio
async def test_logical_failure_is_returned_not_raised() -> None:
    """A {success: false} body is a normal envelope, not an exception."""
    client = _client(lambda request: httpx.Response(200, json={"success": False, "error": "Prompt not found"}))
    async with client:
        envelope = await client.get_prompt(3)
    assert envelope.success is False
    assert envelope.error == "Prompt not found"
    assert envelope.data is None


@pytest.mark.anyio
async def test_requests_use_api_paths() -> None:
    seen: list[tuple[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path))
        return httpx.Response(200, json={"success": True, "data": "ok"})

    async with _client(handler) as client:
        await client.use_prompt(5)
        await client.delete_conversation("conv_1")
        await client.clear_history()

    assert seen == [
        ("POST", "/api/prompts/5/use"),
        ("DELETE", "/api/conversations/conv_1"),
        ("DELETE", "/api/history"),
    ]


@pytest.mark.anyio
async def test_non_2xx_raises_transport_error() -> None:
    async with _client(lambda request: httpx.Response(502, text="Bad Gateway")) as client:
        with pytest.raises(TransportError) as exc_info:
            await client.list_history()
    assert exc_info.value.status_code == 502


@pytest.mark.anyio
async def test_non_json_body_raises_transport_error() -> None:
    async with _client(lambda request: httpx.Response(200, text="<html>")) as client:
        with pytest.raises(TransportError):
            await client.list_prompts()


@pytest.mark.anyio
async def test_network_error_raises_transport_error(failing_client: WorkbenchClient) -> None:
    with pytest.raises(TransportError) as exc_info:
        await failing_client.list_conversations()
    assert exc_info.value.status_code is None
    assert "Connection refused" in exc_info.value.detail


@pytest.mark.anyio
async def test_bare_object_is_wrapped_as_success() -> None:
    """Endpoints without an envelope, such as /providers, decode as successful data."""
    body = {"default": "anthropic", "available": ["openai"], "configured": {"openai": False}}
    async with _client(lambda request: httpx.Response(200, json=body)) as client:
        envelope = await client.providers()
    assert envelope.success is True
    assert envelope.data == body


@pytest.mark.anyio
async def test_singleton_client_is_reused_and_closed() -> None:
    first = get_workbench_client()
    assert get_workbench_client() is first
    await close_workbench_client()
    assert get_workbench_client() is not first
    await close_workbench_client()
