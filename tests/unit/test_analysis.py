from __future__ import annotations

from promptforge.pipelines.analysis import NO_SPECIAL_CHARS, calculate_metrics, critique_prompt, dual_critique_prompt


def test_metrics_count_characters_words_and_lines() -> None:
    metrics = calculate_metrics("Hello, world!\nHow are you?")

    assert (metrics.characters, metrics.words, metrics.lines) == (26, 5, 2)
    assert metrics.special_chars == [",", "!", "?"]


def test_special_characters_are_unique_in_order() -> None:
    """Punctuation and symbols are collected once each, in order of appearance."""
    metrics = calculate_metrics("Cost: $5 + {{tax}} = $?")

    assert metrics.special_chars == [":", "$", "+", "{", "}", "=", "?"]


def test_plain_prompt_has_no_special_characters() -> None:
    assert calculate_metrics("just some words").special_chars == [NO_SPECIAL_CHARS]


def test_empty_prompt_is_one_line() -> None:
    metrics = calculate_metrics("")
    assert (metrics.characters, metrics.words, metrics.lines) == (0, 0, 1)


def test_critique_embeds_metrics_as_html() -> None:
    report = critique_prompt("Summarize <this> & that")

    assert '<div class="metrics">' in report
    assert "<strong>Words:</strong> 4" in report
    assert "&lt;, &gt;, &amp;" in report


def test_dual_critique_returns_both_reports() -> None:
    reports = dual_critique_prompt("Write a haiku")

    assert set(reports) == {"quick_report", "detailed_report"}
    assert "13 chars, 3 words, 1 lines" in reports["quick_report"]
    assert reports["detailed_report"] == critique_prompt("Write a haiku")
