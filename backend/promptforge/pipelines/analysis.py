from __future__ import annotations

import html
import unicodedata
from dataclasses import dataclass, field

import structlog

from promptforge.config import settings

logger = structlog.get_logger()

NO_SPECIAL_CHARS = "None detected"

CRITIQUE_MAX_TOKENS = 2000
QUICK_CRITIQUE_MAX_TOKENS = 500


@dataclass(frozen=True)
class PromptMetrics:
    characters: int
    words: int
    lines: int
    special_chars: list[str] = field(default_factory=list)


def calculate_metrics(prompt: str) -> PromptMetrics:
    """Count characters, words and lines, and collect punctuation and symbols.

    Special characters are unique, in order of first appearance. When there
    are none the list holds the single entry ``"None detected"``.
    """
    special: list[str] = []
    for char in prompt:
        # Unicode punctuation (P*) and symbol (S*) categories
        if unicodedata.category(char)[0] in "PS" and char not in special:
            special.append(char)
    return PromptMetrics(
        characters=len(prompt),
        words=len(prompt.split()),
        lines=len(prompt.split("\n")),
        special_chars=special or [NO_SPECIAL_CHARS],
    )


def _metrics_block(metrics: PromptMetrics) -> str:
    specials = html.escape(", ".join(metrics.special_chars))
    return (
        '<div class="metrics">'
        f"<p><strong>Characters:</strong> {metrics.characters}</p>"
        f"<p><strong>Words:</strong> {metrics.words}</p>"
        f"<p><strong>Lines:</strong> {metrics.lines}</p>"
        f"<p><strong>Special Characters:</strong> {specials}</p>"
        "</div>"
    )


def _detailed_report(prompt: str, metrics: PromptMetrics) -> str:
    findings: list[str] = []
    if metrics.words < 10:
        findings.append("The prompt is very short; add context about the task, audience and expected output.")
    if metrics.lines == 1 and metrics.words > 60:
        findings.append("A single long paragraph is harder to follow; split instructions into separate lines.")
    if "{{" in prompt:
        findings.append("Template variables are present; make sure every one is filled before execution.")
    if not findings:
        findings.append("No structural issues detected by the local checks.")
    items = "".join(f"<li>{html.escape(f)}</li>" for f in findings)
    return (
        '<div class="analysis-section"><h2>Prompt Metrics</h2>'
        f"{_metrics_block(metrics)}</div>"
        '<div class="analysis-section"><h2>Structure Analysis</h2>'
        f"<ul>{items}</ul></div>"
        '<div class="recommendation"><p>Configure a provider API key to receive a full '
        "model-generated critique of task definition, context, audience and language.</p></div>"
    )


def _quick_report(metrics: PromptMetrics) -> str:
    return (
        '<div class="quick-analysis">'
        '<div class="score">Score: n/a</div>'
        f"<p><strong>Metrics:</strong> {metrics.characters} chars, {metrics.words} words, "
        f"{metrics.lines} lines</p>"
        "</div>"
    )


def critique_prompt(prompt: str, model: str = "") -> str:
    """Return a canned HTML critique built around the prompt's local metrics."""
    model = model or settings.DEFAULT_MODEL
    metrics = calculate_metrics(prompt)
    logger.info("canned_critique", model=model, max_tokens=CRITIQUE_MAX_TOKENS, words=metrics.words)
    return _detailed_report(prompt, metrics)


def dual_critique_prompt(prompt: str, model: str = "") -> dict[str, str]:
    """Return the quick and the detailed canned critique together.

    Metrics are computed once and shared by both reports.

    Args:
        prompt: The prompt under analysis.
        model: Requested model id, defaults to ``DEFAULT_MODEL``.

    Returns:
        A mapping with ``quick_report`` and ``detailed_report`` HTML.
    """
    model = model or settings.DEFAULT_MODEL
    metrics = calculate_metrics(prompt)
    logger.info(
        "canned_dual_critique",
        model=model,
        max_tokens=CRITIQUE_MAX_TOKENS,
        quick_max_tokens=QUICK_CRITIQUE_MAX_TOKENS,
        words=metrics.words,
    )
    return {"quick_report": _quick_report(metrics), "detailed_report": _detailed_report(prompt, metrics)}
