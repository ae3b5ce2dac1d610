from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from promptforge.workbench import LocalStateStore, TokenEstimator, Workbench, WorkbenchClient
from promptforge.workbench.client import Envelope
from promptforge.workbench.session import GREETING


def _workbench(  # type: ignore[no-untyped-def]
    client: WorkbenchClient, state_store: LocalStateStore, notifier=None
) -> Workbench:
    kwargs = {"notifier": notifier} if notifier else {}
    return Workbench(client, state_store, tokens=TokenEstimator(encoding_model=None), **kwargs)


@pytest.mark.anyio
async def test_run_test_records_one_history_entry(
    workbench_client: WorkbenchClient, state_store: LocalStateStore
) -> None:
    """A test execution returns the output and appends exactly one history record."""
    bench = _workbench(workbench_client, state_store)
    bench.set_prompt("Write a haiku about autumn")

    result = await bench.run_test(temperature=0.3, max_tokens=200)

    assert result.success is True
    assert "Model: gpt-4.1" in result.output
    records = await bench.history.list()
    assert len(records) == 1
    assert records[0].prompt == "Write a haiku about autumn"
    assert (records[0].model, records[0].temperature, records[0].max_tokens) == ("gpt-4.1", 0.3, 200)
    assert records[0].response == result.output


@pytest.mark.anyio
async def test_run_test_with_variables(workbench_client: WorkbenchClient, state_store: LocalStateStore) -> None:
    """Variables are substituted before sending; history keeps the template with a marker."""
    bench = _workbench(workbench_client, state_store)
    bench.set_prompt("Translate {{text}} into {{language}}")

    result = await bench.run_test({"text": "good morning", "language": "Greek"})

    assert result.processed_prompt == "Translate good morning into Greek"
    assert result.variables == {"text": "good morning", "language": "Greek"}
    [record] = await bench.history.list()
    assert record.prompt == "[Variables] Translate {{text}} into {{language}}"


@pytest.mark.anyio
async def test_run_test_rejects_missing_variables(
    workbench_client: WorkbenchClient, state_store: LocalStateStore, notifier, notifications: list
) -> None:
    bench = _workbench(workbench_client, state_store, notifier)
    bench.set_prompt("Translate {{text}} into {{language}}")

    result = await bench.run_test({"text": "hi"})

    assert result.success is False
    assert result.error == "Please fill in values for: language"
    assert notifications == [("error", "Please fill in values for: language")]
    assert await bench.history.list() == []


@pytest.mark.anyio
async def test_run_test_rejects_blank_prompt(workbench_client: WorkbenchClient, state_store: LocalStateStore) -> None:
    bench = _workbench(workbench_client, state_store)
    bench.set_prompt("   ")

    result = await bench.run_test()

    assert result.success is False
    assert await bench.history.list() == []


@pytest.mark.anyio
async def test_run_test_logical_failure_is_recorded(state_store: LocalStateStore) -> None:
    client = AsyncMock(spec=WorkbenchClient)
    client.execute.return_value = Envelope(success=False, error="Model overloaded")
    client.save_history.return_value = Envelope(success=True, data="ok")
    bench = _workbench(client, state_store)
    bench.set_prompt("Hello")

    result = await bench.run_test()

    assert result.error == "Model overloaded"
    record = client.save_history.await_args.args[0]
    assert record["success"] is False
    assert record["error_msg"] == "Model overloaded"
    assert record["response"] is None


@pytest.mark.anyio
async def test_run_test_survives_unreachable_server(
    failing_client: WorkbenchClient, state_store: LocalStateStore
) -> None:
    """Network failures become a failed result; the record lands in the fallback."""
    bench = _workbench(failing_client, state_store)
    bench.set_prompt("Hello")

    result = await bench.run_test()

    assert result.success is False
    assert result.error.startswith("Network error: ")
    [record] = bench.history.fallback
    assert record.success is False
    assert record.error_msg == result.error


@pytest.mark.anyio
async def test_send_message_appends_reply(workbench_client: WorkbenchClient, state_store: LocalStateStore) -> None:
    bench = _workbench(workbench_client, state_store)
    await bench.session.start()

    reply = await bench.send_message("Summarize support tickets")

    assert reply.role == "assistant"
    assert "Summarize support tickets" in reply.content
    roles = [m.role for m in bench.session.current.messages]
    assert roles == ["assistant", "user", "assistant"]


@pytest.mark.anyio
async def test_send_message_without_session_sends_nothing(state_store: LocalStateStore) -> None:
    client = AsyncMock(spec=WorkbenchClient)
    bench = _workbench(client, state_store)

    assert await bench.send_message("hello") is None
    client.prompt_engineer.assert_not_called()


@pytest.mark.anyio
async def test_send_message_logical_failure_appends_error(state_store: LocalStateStore) -> None:
    client = AsyncMock(spec=WorkbenchClient)
    client.save_conversation.return_value = Envelope(success=True, data="ok")
    client.prompt_engineer.return_value = Envelope(success=False, error="Quota exceeded")
    bench = _workbench(client, state_store)
    await bench.session.start()

    reply = await bench.send_message("hello")

    assert reply.content == "⚠️ **Error**: Quota exceeded\n\nRetry or refresh if the issue persists."
    messages, model, temperature = client.prompt_engineer.await_args.args
    assert messages[0]["role"] == "system"
    assert messages[-1] == {"role": "user", "content": "hello"}
    assert (model, temperature) == ("o3", 0.7)


@pytest.mark.anyio
async def test_send_message_network_failure_appends_error(
    failing_client: WorkbenchClient, state_store: LocalStateStore
) -> None:
    bench = _workbench(failing_client, state_store)
    await bench.session.start()

    reply = await bench.send_message("hello")

    assert reply.content.startswith("⚠️ **Error**: Network error: ")
    assert [m.content for m in bench.session.current.messages][:2] == [GREETING, "hello"]


@pytest.mark.anyio
async def test_load_prompt_fills_editor_and_notifies_observers(
    workbench_client: WorkbenchClient, state_store: LocalStateStore
) -> None:
    bench = _workbench(workbench_client, state_store)
    seen: list[int] = []
    bench.tokens.on_update(lambda stats: seen.append(stats.tokens))
    saved = await bench.library.create("Greeting", "abcdefgh")

    loaded = await bench.load_prompt(saved.id)

    assert loaded.usage_count == 1
    assert bench.prompt == "abcdefgh"
    assert seen == [2]


def test_apply_revised_prompt(state_store: LocalStateStore) -> None:
    bench = _workbench(AsyncMock(spec=WorkbenchClient), state_store)
    reply = "Better:\n\na. Revised prompt:\nYou are a poet. Write a sonnet.\n\nb. Questions:\n- Which theme?"

    assert bench.apply_revised_prompt(reply) is True
    assert bench.prompt == "You are a poet. Write a sonnet."
    assert bench.apply_revised_prompt("No structure here") is False
    assert bench.prompt == "You are a poet. Write a sonnet."


def test_token_warnings_use_selected_model(state_store: LocalStateStore) -> None:
    bench = _workbench(AsyncMock(spec=WorkbenchClient), state_store)
    bench.model = "gpt-4"
    bench.set_prompt("word " * 7000)

    [warning] = bench.token_warnings()
    assert warning.status == "danger"
