from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

import structlog
import tiktoken

logger = structlog.get_logger()

WARNING_RATIO = 0.8
DANGER_RATIO = 0.95


@dataclass(frozen=True)
class ModelContext:
    name: str
    limit: int
    formatted_limit: str


MODEL_CONTEXTS: dict[str, ModelContext] = {
    "gpt-4": ModelContext("GPT-4", 8192, "8K"),
    "gpt-4-turbo": ModelContext("GPT-4 Turbo", 128000, "128K"),
    "gpt-3.5-turbo": ModelContext("GPT-3.5 Turbo", 16384, "16K"),
    "gpt-4.1": ModelContext("GPT-4.1", 200000, "200K"),
    "o3": ModelContext("O3", 1000000, "1M"),
    "claude-3-5-sonnet-20241022": ModelContext("Claude 3.5 Sonnet", 200000, "200K"),
    "claude-3-haiku-20240307": ModelContext("Claude 3 Haiku", 200000, "200K"),
    "claude-3-opus-20240229": ModelContext("Claude 3 Opus", 200000, "200K"),
}

DEFAULT_MODEL = "gpt-4.1"


@dataclass(frozen=True)
class TokenWarning:
    status: Literal["warning", "danger"]
    message: str
    tokens: str


@dataclass(frozen=True)
class TokenStats:
    tokens: int


TokenObserver = Callable[[TokenStats], Any]


def estimate_tokens(text: str) -> int:
    """Approximate a token count without a tokenizer.

    Roughly 0.75 tokens per word, but never fewer than one token per four
    characters.
    """
    if not text:
        return 0
    words = len(text.split())
    return max(math.ceil(words * 0.75), math.ceil(len(text) / 4))


def get_model_context(model_id: str) -> ModelContext:
    """Context window for ``model_id``; unknown ids use the default model's."""
    return MODEL_CONTEXTS.get(model_id, MODEL_CONTEXTS[DEFAULT_MODEL])


def classify(token_count: int, model_id: str) -> list[TokenWarning]:
    """Compare a token count against a model's context window.

    Args:
        token_count: Estimated prompt size.
        model_id: Model the prompt targets.

    Returns:
        An empty list, or a single ``danger`` (above 95% of the limit) or
        ``warning`` (above 80%) entry.
    """
    context = get_model_context(model_id)
    usage = f"{token_count:,}/{context.limit:,}"
    if token_count > context.limit * DANGER_RATIO:
        return [TokenWarning("danger", f"⚠️ Very close to {context.formatted_limit} limit", usage)]
    if token_count > context.limit * WARNING_RATIO:
        return [TokenWarning("warning", f"⚡ Approaching {context.formatted_limit} limit", usage)]
    return []


class TokenEstimator:
    """Token counter that notifies observers after every estimate.

    Uses the tiktoken encoding for ``encoding_model`` when it can be loaded and
    the word/character heuristic otherwise. Pass ``encoding_model=None`` to
    always use the heuristic.
    """

    def __init__(self, encoding_model: str | None = "gpt-4") -> None:
        self._encoding_model = encoding_model
        self._encoding: tiktoken.Encoding | None = None
        self._encoding_loaded = encoding_model is None
        self._observers: list[TokenObserver] = []
        self._stats = TokenStats(tokens=0)

    def _get_encoding(self) -> tiktoken.Encoding | None:
        if not self._encoding_loaded:
            self._encoding_loaded = True
            try:
                self._encoding = tiktoken.encoding_for_model(self._encoding_model)
                logger.info("tiktoken_encoding_loaded", model=self._encoding_model)
            except Exception as exc:
                logger.warning("tiktoken_unavailable", model=self._encoding_model, error=str(exc))
                self._encoding = None
        return self._encoding

    def on_update(self, callback: TokenObserver) -> None:
        self._observers.append(callback)

    def count(self, text: str) -> int:
        """Count tokens in ``text`` without notifying observers."""
        encoding = self._get_encoding()
        if encoding is None:
            return estimate_tokens(text)
        try:
            return len(encoding.encode(text))
        except Exception as exc:
            logger.warning("token_encoding_failed", error=str(exc))
            return estimate_tokens(text)

    def estimate(self, text: str) -> int:
        """Count tokens in ``text`` and push the result to every observer.

        Observers run in registration order; one that raises is logged and
        does not stop the rest.
        """
        self._stats = TokenStats(tokens=self.count(text))
        for callback in self._observers:
            try:
                callback(self._stats)
            except Exception:
                logger.exception("token_observer_failed")
        return self._stats.tokens

    @property
    def current_count(self) -> int:
        return self._stats.tokens
