from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from promptforge.config import settings
from promptforge.workbench.errors import TransportError

logger = structlog.get_logger()


@dataclass(frozen=True)
class Envelope:
    """Decoded ``{success, data?, error?}`` response body."""

    success: bool
    data: Any = None
    error: str | None = None


class WorkbenchClient:
    """Async HTTP client for the PromptForge persistence API.

    Every call returns an ``Envelope``. Logical failures come back as
    ``Envelope(success=False, error=...)``; anything outside the envelope
    contract raises ``TransportError`` so callers can pick their own
    degrade-to-safe-state behaviour.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.WORKBENCH_API_BASE).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.WORKBENCH_TIMEOUT,
            transport=transport,
        )

    async def __aenter__(self) -> WorkbenchClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(self, method: str, path: str, json: Any = None) -> Envelope:
        """Send one request and decode the envelope.

        Args:
            method: HTTP method.
            path: Path relative to the API base (e.g. ``"/history"``).
            json: Optional JSON body.

        Returns:
            The decoded envelope.

        Raises:
            TransportError: On network errors, non-2xx statuses or a body
                that is not a JSON object.
        """
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as exc:
            logger.warning("workbench_request_failed", method=method, path=path, error=str(exc))
            raise TransportError(str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            logger.warning("workbench_http_error", method=method, path=path, status=response.status_code)
            raise TransportError(f"HTTP {response.status_code}", status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError("Response body is not valid JSON", status_code=response.status_code) from exc
        if not isinstance(payload, dict):
            raise TransportError("Response body is not an envelope", status_code=response.status_code)

        if "success" not in payload:
            # Endpoints such as /providers answer with a bare object.
            return Envelope(success=True, data=payload)
        return Envelope(success=bool(payload["success"]), data=payload.get("data"), error=payload.get("error"))

    # Conversations

    async def save_conversation(self, conversation_id: str, title: str, messages: list[dict[str, Any]]) -> Envelope:
        body = {"conversation_id": conversation_id, "title": title, "messages": messages}
        return await self.request("POST", "/conversations", json=body)

    async def get_conversation(self, conversation_id: str) -> Envelope:
        return await self.request("GET", f"/conversations/{conversation_id}")

    async def list_conversations(self) -> Envelope:
        return await self.request("GET", "/conversations")

    async def delete_conversation(self, conversation_id: str) -> Envelope:
        return await self.request("DELETE", f"/conversations/{conversation_id}")

    # History

    async def save_history(self, record: dict[str, Any]) -> Envelope:
        return await self.request("POST", "/history", json=record)

    async def list_history(self) -> Envelope:
        return await self.request("GET", "/history")

    async def clear_history(self) -> Envelope:
        return await self.request("DELETE", "/history")

    # Prompt library

    async def list_prompts(self) -> Envelope:
        return await self.request("GET", "/prompts")

    async def get_prompt(self, prompt_id: int) -> Envelope:
        return await self.request("GET", f"/prompts/{prompt_id}")

    async def create_prompt(self, fields: dict[str, Any]) -> Envelope:
        return await self.request("POST", "/prompts", json=fields)

    async def update_prompt(self, prompt_id: int, fields: dict[str, Any]) -> Envelope:
        return await self.request("PUT", f"/prompts/{prompt_id}", json=fields)

    async def delete_prompt(self, prompt_id: int) -> Envelope:
        return await self.request("DELETE", f"/prompts/{prompt_id}")

    async def use_prompt(self, prompt_id: int) -> Envelope:
        return await self.request("POST", f"/prompts/{prompt_id}/use")

    # Execution

    async def execute(self, prompt: str, model: str, temperature: float, max_tokens: int) -> Envelope:
        body = {"prompt": prompt, "model": model, "temperature": temperature, "max_tokens": max_tokens}
        return await self.request("POST", "/execute", json=body)

    async def prompt_engineer(self, messages: list[dict[str, str]], model: str, temperature: float) -> Envelope:
        body = {"messages": messages, "model": model, "temperature": temperature}
        return await self.request("POST", "/prompt-engineer", json=body)

    async def critique(self, prompt: str, model: str = "") -> Envelope:
        return await self.request("POST", "/critique", json={"prompt": prompt, "model": model})

    async def dual_critique(self, prompt: str, model: str = "") -> Envelope:
        return await self.request("POST", "/dual-critique", json={"prompt": prompt, "model": model})

    async def multi_model_execute(
        self, prompt: str, models: list[str], temperature: float = 0.0, max_tokens: int = 0
    ) -> Envelope:
        body = {"prompt": prompt, "models": models, "temperature": temperature, "max_tokens": max_tokens}
        return await self.request("POST", "/multi-model-execute", json=body)

    async def generate_eval(
        self, prompt: str, eval_types: list[str], sample_size: int = 0, model: str = "", difficulty: str = ""
    ) -> Envelope:
        body = {
            "prompt": prompt,
            "eval_types": eval_types,
            "sample_size": sample_size,
            "model": model,
            "difficulty": difficulty,
        }
        return await self.request("POST", "/generate-eval", json=body)

    async def providers(self) -> Envelope:
        return await self.request("GET", "/providers")


_workbench_client: WorkbenchClient | None = None


def get_workbench_client() -> WorkbenchClient:
    """Get or create the singleton workbench client.

    Returns:
        The shared WorkbenchClient instance. Created on first call and reused
        on subsequent calls (singleton pattern).
    """
    global _workbench_client
    if _workbench_client is None:
        _workbench_client = WorkbenchClient()
        logger.info("workbench_client_created", base_url=_workbench_client.base_url)
    return _workbench_client


async def close_workbench_client() -> None:
    """Close the singleton client, if one was created."""
    global _workbench_client
    if _workbench_client:
        await _workbench_client.aclose()
        _workbench_client = None
        logger.info("workbench_client_closed")
