from __future__ import annotations

import math
import time
from dataclasses import dataclass

import structlog

from promptforge.config import settings

logger = structlog.get_logger()

PROVIDERS = ["openai", "azure-openai", "anthropic"]

PROMPT_PREVIEW_CHARS = 50


def resolve_parameters(
    model: str, temperature: float, max_tokens: int, default_max_tokens: int
) -> tuple[str, float, int]:
    """Fill in execution defaults for unset request parameters.

    A zero temperature or max_tokens means "not provided", matching how the
    workbench client sends its requests.

    Args:
        model: Requested model id, possibly empty.
        temperature: Requested temperature, 0 meaning unset.
        max_tokens: Requested completion budget, 0 meaning unset.
        default_max_tokens: Budget to use when ``max_tokens`` is unset.

    Returns:
        The ``(model, temperature, max_tokens)`` actually used.
    """
    return (
        model or settings.DEFAULT_MODEL,
        temperature or settings.DEFAULT_TEMPERATURE,
        max_tokens or default_max_tokens,
    )


def execute_prompt(prompt: str, model: str = "", temperature: float = 0.0, max_tokens: int = 0) -> str:
    """Return a canned completion describing the request that would be sent."""
    model, temperature, max_tokens = resolve_parameters(model, temperature, max_tokens, settings.DEFAULT_MAX_TOKENS)
    preview = prompt[:PROMPT_PREVIEW_CHARS]
    logger.info("canned_execution", model=model, prompt_length=len(prompt))
    return (
        f'Canned response for the prompt: "{preview}..."\n\n'
        f"Model: {model}\n"
        f"Temperature: {temperature}\n"
        f"Max Tokens: {max_tokens}\n\n"
        "Configure a provider API key (OPENAI_API_KEY, ANTHROPIC_API_KEY or "
        "AZURE_OPENAI_API_KEY) to route this request to a real model."
    )


def engineer_prompt(messages: list[dict[str, str]], model: str = "", temperature: float = 0.0) -> str:
    """Return a canned prompt-engineering turn for the latest user message.

    The reply follows the two-section layout the workbench parses:
    ``a. Revised prompt`` followed by ``b. Questions``.

    Args:
        messages: Outbound chat payload (system prompt plus transcript).
        model: Requested model id, defaults to the prompt-engineer model.
        temperature: Requested temperature, 0 meaning the default.

    Returns:
        The assistant reply text.
    """
    model, temperature, max_tokens = resolve_parameters(
        model or settings.PROMPT_ENGINEER_MODEL, temperature, 0, settings.PROMPT_ENGINEER_MAX_TOKENS
    )
    latest = next((m["content"] for m in reversed(messages) if m["role"] == "user"), "")
    logger.info(
        "canned_prompt_engineering", model=model, turns=len(messages), temperature=temperature, max_tokens=max_tokens
    )
    return (
        "Here is a tightened version of your prompt.\n\n"
        f"a. Revised prompt:\nYou are an expert assistant. {latest.strip()} "
        "Respond in a clear, structured format and state any assumptions you make.\n\n"
        "b. Questions:\n"
        "- Who is the intended audience for the output?\n"
        "- What output format and length do you expect?\n"
        "- Are there constraints or examples the model should follow?"
    )


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass(frozen=True)
class ModelRun:
    model: str
    success: bool
    response: str
    execution_time_ms: float
    token_usage: TokenUsage


def approximate_tokens(text: str) -> int:
    return math.ceil(len(text) / 4)


def execute_across_models(
    prompt: str, models: list[str], temperature: float = 0.0, max_tokens: int = 0
) -> list[ModelRun]:
    """Run the same prompt against several models, in request order."""
    runs: list[ModelRun] = []
    for model in models:
        start = time.perf_counter()
        response = execute_prompt(prompt, model, temperature, max_tokens)
        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
        prompt_tokens = approximate_tokens(prompt)
        completion_tokens = approximate_tokens(response)
        runs.append(
            ModelRun(
                model=model,
                success=True,
                response=response,
                execution_time_ms=elapsed_ms,
                token_usage=TokenUsage(prompt_tokens, completion_tokens, prompt_tokens + completion_tokens),
            )
        )
    logger.info("canned_multi_model_execution", models=len(models))
    return runs
