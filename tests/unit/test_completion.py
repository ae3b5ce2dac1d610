from __future__ import annotations

from unittest.mock import patch

from promptforge.pipelines.completion import approximate_tokens, engineer_prompt, execute_across_models


def test_engineer_prompt_uses_its_own_token_budget() -> None:
    """Prompt engineering falls back to the prompt-engineer model and budget."""
    with patch("promptforge.pipelines.completion.logger") as mock_logger:
        engineer_prompt([{"role": "user", "content": "hi"}])

    kwargs = mock_logger.info.call_args.kwargs
    assert (kwargs["model"], kwargs["temperature"], kwargs["max_tokens"]) == ("o3", 0.7, 2000)


def test_multi_model_runs_keep_request_order() -> None:
    runs = execute_across_models("Write a haiku", ["gpt-4", "o3"], temperature=0.2)

    assert [r.model for r in runs] == ["gpt-4", "o3"]
    assert all(r.success for r in runs)
    assert "Model: o3" in runs[1].response


def test_multi_model_token_usage_adds_up() -> None:
    [run] = execute_across_models("abcdefghi", ["gpt-4.1"])

    usage = run.token_usage
    assert usage.prompt_tokens == approximate_tokens("abcdefghi") == 3
    assert usage.completion_tokens == approximate_tokens(run.response)
    assert usage.total_tokens == usage.prompt_tokens + usage.completion_tokens
    assert run.execution_time_ms >= 0
