from __future__ import annotations

import pytest
from httpx import AsyncClient


async def _create(client: AsyncClient, **fields: object) -> dict:
    body = {"title": "Summarizer", "content": "Summarize {{text}}", **fields}
    resp = await client.post("/api/prompts", json=body)
    assert resp.json()["success"] is True
    return resp.json()["data"]


@pytest.mark.anyio
async def test_create_prompt_applies_defaults(api_client: AsyncClient) -> None:
    """A new prompt should default to the General category with zero uses."""
    prompt = await _create(api_client)
    assert prompt["id"] > 0
    assert prompt["category"] == "General"
    assert prompt["description"] == ""
    assert prompt["tags"] == []
    assert prompt["usage_count"] == 0


@pytest.mark.anyio
async def test_tags_are_deduplicated_in_order(api_client: AsyncClient) -> None:
    """Tags behave as an ordered set."""
    prompt = await _create(api_client, tags=["nlp", " summary ", "nlp", "", "summary"])
    assert prompt["tags"] == ["nlp", "summary"]


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("body", "error"),
    [
        ({"title": " ", "content": "x"}, "Title is required"),
        ({"title": "x", "content": ""}, "Content is required"),
    ],
)
async def test_create_prompt_validates_fields(api_client: AsyncClient, body: dict, error: str) -> None:
    """Blank title or content should fail with a logical error."""
    resp = await api_client.post("/api/prompts", json=body)
    assert resp.status_code == 200
    assert resp.json() == {"success": False, "error": error}


@pytest.mark.anyio
async def test_invalid_prompt_id_format(api_client: AsyncClient) -> None:
    """Non-numeric ids should be rejected before touching the database."""
    resp = await api_client.get("/api/prompts/abc")
    assert resp.json() == {"success": False, "error": "Invalid prompt ID format"}


@pytest.mark.anyio
async def test_get_missing_prompt(api_client: AsyncClient) -> None:
    resp = await api_client.get("/api/prompts/999")
    assert resp.json() == {"success": False, "error": "Prompt not found"}


@pytest.mark.anyio
async def test_update_prompt(api_client: AsyncClient) -> None:
    """PUT should replace the editable fields."""
    prompt = await _create(api_client)
    body = {"title": "Renamed", "content": "New body", "category": "Writing", "tags": ["a"]}
    resp = await api_client.put(f"/api/prompts/{prompt['id']}", json=body)
    updated = resp.json()["data"]
    assert updated["title"] == "Renamed"
    assert updated["content"] == "New body"
    assert updated["category"] == "Writing"
    assert updated["tags"] == ["a"]


@pytest.mark.anyio
async def test_update_missing_prompt(api_client: AsyncClient) -> None:
    resp = await api_client.put("/api/prompts/42", json={"title": "t", "content": "c"})
    assert resp.json() == {"success": False, "error": "Prompt not found"}


@pytest.mark.anyio
async def test_list_prompts_most_recently_updated_first(api_client: AsyncClient) -> None:
    """Updating an older prompt should move it to the top of the list."""
    first = await _create(api_client, title="First")
    await _create(api_client, title="Second")
    await api_client.put(f"/api/prompts/{first['id']}", json={"title": "First v2", "content": "c"})

    titles = [p["title"] for p in (await api_client.get("/api/prompts")).json()["data"]]
    assert titles == ["First v2", "Second"]


@pytest.mark.anyio
async def test_use_prompt_increments_usage_count(api_client: AsyncClient) -> None:
    """Each use bumps usage_count by one without touching updated_at."""
    prompt = await _create(api_client)
    before = (await api_client.get(f"/api/prompts/{prompt['id']}")).json()["data"]

    await api_client.post(f"/api/prompts/{prompt['id']}/use")
    used = (await api_client.post(f"/api/prompts/{prompt['id']}/use")).json()["data"]

    assert used["usage_count"] == 2
    assert used["content"] == "Summarize {{text}}"
    assert used["updated_at"] == before["updated_at"]


@pytest.mark.anyio
async def test_use_missing_prompt(api_client: AsyncClient) -> None:
    resp = await api_client.post("/api/prompts/7/use")
    assert resp.json() == {"success": False, "error": "Prompt not found"}


@pytest.mark.anyio
async def test_delete_prompt_is_idempotent(api_client: AsyncClient) -> None:
    """Deleting a prompt twice should succeed both times."""
    prompt = await _create(api_client)

    first = await api_client.delete(f"/api/prompts/{prompt['id']}")
    second = await api_client.delete(f"/api/prompts/{prompt['id']}")
    assert first.json()["data"] == "Prompt deleted successfully"
    assert second.json()["success"] is True
    assert (await api_client.get("/api/prompts")).json()["data"] == []
