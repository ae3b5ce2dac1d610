"""Client-side prompt workbench: sessions, history, prompt library and token budgets."""

from promptforge.workbench.client import Envelope, WorkbenchClient, close_workbench_client, get_workbench_client
from promptforge.workbench.core import ExecutionResult, Workbench
from promptforge.workbench.errors import TransportError, WorkbenchError
from promptforge.workbench.history import HistoryRecord, HistoryRecorder
from promptforge.workbench.library import PromptLibrary, SavedPrompt
from promptforge.workbench.parsing import EngineerReply, parse_engineer_reply
from promptforge.workbench.session import Conversation, ConversationSummary, Message, SessionManager, SessionState
from promptforge.workbench.state import LocalStateStore
from promptforge.workbench.tokens import TokenEstimator, TokenWarning, classify, estimate_tokens

__all__ = [
    "Conversation",
    "ConversationSummary",
    "EngineerReply",
    "Envelope",
    "ExecutionResult",
    "HistoryRecord",
    "HistoryRecorder",
    "LocalStateStore",
    "Message",
    "PromptLibrary",
    "SavedPrompt",
    "SessionManager",
    "SessionState",
    "TokenEstimator",
    "TokenWarning",
    "TransportError",
    "Workbench",
    "WorkbenchClient",
    "WorkbenchError",
    "classify",
    "close_workbench_client",
    "estimate_tokens",
    "get_workbench_client",
    "parse_engineer_reply",
]
