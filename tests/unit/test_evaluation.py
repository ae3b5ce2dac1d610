from __future__ import annotations

import json

from promptforge.pipelines.evaluation import (
    DEFAULT_SAMPLE_SIZE,
    build_criteria,
    canned_cases_reply,
    generate_eval_suite,
    parse_cases,
    parse_cases_from_text,
)


def test_criteria_weights_split_evenly() -> None:
    criteria = build_criteria(["robustness", "safety"])

    assert [c.name for c in criteria] == ["Robustness", "Safety & Alignment"]
    assert [c.weight for c in criteria] == [50, 50]


def test_criteria_weight_uses_integer_division() -> None:
    assert {c.weight for c in build_criteria(["robustness", "creativity", "accuracy"])} == {33}


def test_unknown_eval_type_is_skipped_but_counted() -> None:
    """Unknown types get no criterion, yet still share the weight budget."""
    [criterion] = build_criteria(["robustness", "tone"])
    assert (criterion.name, criterion.weight) == ("Robustness", 50)


def test_text_fallback_assigns_category_and_difficulty_by_line() -> None:
    cases = parse_cases_from_text("first case\n\nsecond case\nthird\nfourth", ["safety", "accuracy"])

    assert [(c.input, c.category, c.difficulty) for c in cases] == [
        ("first case", "safety", "easy"),
        ("second case", "safety", "hard"),
        ("third", "accuracy", "easy"),
        ("fourth", "safety", "medium"),
    ]


def test_text_fallback_reads_at_most_ten_lines() -> None:
    text = "\n".join(f"case {n}" for n in range(1, 13))
    assert len(parse_cases_from_text(text, ["robustness"])) == 10


def test_text_fallback_without_types_defaults_to_robustness() -> None:
    [case] = parse_cases_from_text("only case", [])
    assert case.category == "robustness"


def test_json_reply_is_decoded() -> None:
    reply = json.dumps([{"input": "x", "category": "safety", "difficulty": "hard", "expected": "refusal"}])

    [case] = parse_cases(reply, ["robustness"])

    assert (case.input, case.category, case.difficulty, case.expected) == ("x", "safety", "hard", "refusal")


def test_non_array_reply_falls_back_to_text() -> None:
    assert [c.input for c in parse_cases("Case one\nCase two", ["creativity"])] == ["Case one", "Case two"]
    assert [c.input for c in parse_cases('{"input": "x"}', ["creativity"])] == ['{"input": "x"}']


def test_canned_reply_cycles_types_and_mixed_difficulties() -> None:
    items = json.loads(canned_cases_reply("Summarize {{text}}", ["robustness", "creativity"], 5, "mixed"))

    assert [i["category"] for i in items] == ["robustness", "creativity", "robustness", "creativity", "robustness"]
    assert [i["difficulty"] for i in items] == ["easy", "medium", "hard", "adversarial", "easy"]
    assert all(i["input"].startswith("Summarize {{text}}") for i in items)


def test_suite_defaults() -> None:
    suite = generate_eval_suite("Write a poem", ["accuracy"])

    assert len(suite.test_cases) == DEFAULT_SAMPLE_SIZE
    assert suite.base_prompt == "Write a poem"
    assert (suite.metadata.model, suite.metadata.difficulty) == ("gpt-4.1", "mixed")
    assert suite.metadata.sample_size == DEFAULT_SAMPLE_SIZE
    assert [c.weight for c in suite.criteria] == [100]


def test_suite_fixed_difficulty() -> None:
    suite = generate_eval_suite("Write a poem", ["safety", "creativity"], sample_size=3, difficulty="hard")

    assert [c.difficulty for c in suite.test_cases] == ["hard", "hard", "hard"]
    assert suite.metadata.eval_types == ["safety", "creativity"]
