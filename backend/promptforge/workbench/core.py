from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from promptforge.config import settings
from promptforge.workbench.client import Envelope, WorkbenchClient, get_workbench_client
from promptforge.workbench.errors import TransportError
from promptforge.workbench.history import HistoryRecord, HistoryRecorder
from promptforge.workbench.library import PromptLibrary, SavedPrompt
from promptforge.workbench.notify import Notifier, log_notifier
from promptforge.workbench.parsing import parse_engineer_reply
from promptforge.workbench.session import Message, SessionManager
from promptforge.workbench.state import LocalStateStore
from promptforge.workbench.tokens import TokenEstimator, TokenWarning, classify
from promptforge.workbench.variables import extract_variables, missing_variables, substitute_variables

logger = structlog.get_logger()

VARIABLES_HISTORY_PREFIX = "[Variables] "


@dataclass(frozen=True)
class ExecutionResult:
    success: bool
    model: str
    temperature: float
    max_tokens: int
    processed_prompt: str = ""
    output: str | None = None
    error: str | None = None
    variables: dict[str, str] = field(default_factory=dict)


class Workbench:
    """Coordinates the editor buffer, the refinement session, history and the library.

    One instance owns the session object; callers drive it with discrete
    user actions (edit the prompt, run a test, send a message, load a saved
    prompt).
    """

    def __init__(
        self,
        client: WorkbenchClient | None = None,
        state_store: LocalStateStore | None = None,
        notifier: Notifier = log_notifier,
        tokens: TokenEstimator | None = None,
        model: str | None = None,
    ) -> None:
        self.client = client or get_workbench_client()
        self.notifier = notifier
        self.session = SessionManager(self.client, state_store or LocalStateStore(), notifier)
        self.history = HistoryRecorder(self.client)
        self.library = PromptLibrary(self.client, notifier)
        self.tokens = tokens or TokenEstimator()
        self.model = model or settings.DEFAULT_MODEL
        self.prompt = ""

    def set_prompt(self, text: str) -> int:
        """Replace the editor contents and re-estimate its token count."""
        self.prompt = text
        return self.tokens.estimate(text)

    def token_warnings(self) -> list[TokenWarning]:
        return classify(self.tokens.current_count, self.model)

    async def run_test(
        self,
        variables: dict[str, str] | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ExecutionResult:
        """Execute the editor prompt and record the attempt in history.

        ``{{name}}`` placeholders are filled from ``variables`` first. A blank
        prompt or an unfilled placeholder is rejected before anything is sent
        and nothing is recorded. Otherwise exactly one history record is
        written, whatever the outcome.

        Args:
            variables: Values for the prompt's placeholders.
            temperature: Sampling temperature, defaults to the configured one.
            max_tokens: Completion budget, defaults to the configured one.

        Returns:
            The outcome of the execution.
        """
        variables = variables or {}
        temperature = settings.DEFAULT_TEMPERATURE if temperature is None else temperature
        max_tokens = max_tokens or settings.DEFAULT_MAX_TOKENS
        prompt = self.prompt.strip()

        def rejected(message: str) -> ExecutionResult:
            self.notifier("error", message)
            return ExecutionResult(False, self.model, temperature, max_tokens, error=message)

        if not prompt:
            return rejected("Please enter a prompt first!")
        names = extract_variables(prompt)
        processed = prompt
        if names:
            missing = missing_variables(prompt, variables)
            if missing:
                return rejected(f"Please fill in values for: {', '.join(missing)}")
            processed = substitute_variables(prompt, variables)

        try:
            envelope = await self.client.execute(processed, self.model, temperature, max_tokens)
        except TransportError as exc:
            envelope = Envelope(success=False, error=f"Network error: {exc.detail}")

        await self.history.record(
            HistoryRecord(
                prompt=VARIABLES_HISTORY_PREFIX + prompt if names else prompt,
                model=self.model,
                temperature=temperature,
                max_tokens=max_tokens,
                success=envelope.success,
                response=envelope.data if envelope.success else None,
                error_msg=None if envelope.success else envelope.error,
            )
        )
        logger.info("prompt_test_executed", model=self.model, success=envelope.success, variables=len(names))
        return ExecutionResult(
            success=envelope.success,
            model=self.model,
            temperature=temperature,
            max_tokens=max_tokens,
            processed_prompt=processed,
            output=envelope.data if envelope.success else None,
            error=None if envelope.success else envelope.error or "Unknown error",
            variables={name: variables[name] for name in names},
        )

    async def send_message(self, text: str) -> Message | None:
        """Send one user turn to the prompt engineer and append its reply.

        Returns:
            The assistant message (a reply or an error placeholder), or None if
            nothing was sent because there is no active session or the text is
            blank.
        """
        if await self.session.append_user_message(text) is None:
            return None
        try:
            envelope = await self.client.prompt_engineer(
                self.session.request_messages(),
                settings.PROMPT_ENGINEER_MODEL,
                settings.DEFAULT_TEMPERATURE,
            )
        except TransportError as exc:
            return await self.session.append_assistant_error(f"Network error: {exc.detail}")
        if envelope.success:
            return await self.session.append_assistant_message(envelope.data)
        return await self.session.append_assistant_error(envelope.error or "Failed to get response from AI")

    async def load_prompt(self, prompt_id: int) -> SavedPrompt | None:
        """Load a saved prompt into the editor, counting it as used."""
        prompt = await self.library.use(prompt_id)
        if prompt is not None:
            self.set_prompt(prompt.content)
        return prompt

    def apply_revised_prompt(self, reply: str) -> bool:
        """Copy the revised prompt from a prompt-engineer reply into the editor."""
        parsed = parse_engineer_reply(reply)
        if parsed is None or not parsed.revised_prompt:
            return False
        self.set_prompt(parsed.revised_prompt)
        return True
