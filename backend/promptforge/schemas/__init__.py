from promptforge.schemas.conversation import (
    ConversationDetail,
    ConversationSave,
    ConversationSummary,
    MessageIn,
    MessageResponse,
)
from promptforge.schemas.envelope import Envelope, ok
from promptforge.schemas.execution import (
    ChatMessage,
    CritiqueRequest,
    DualCritiqueResponse,
    EvalGenerateRequest,
    EvalSuiteResponse,
    ExecuteRequest,
    ModelRunResponse,
    MultiModelExecuteRequest,
    PromptEngineerRequest,
    ProvidersResponse,
)
from promptforge.schemas.health import HealthResponse, ServiceStatus
from promptforge.schemas.history import HistoryCreate, HistoryItemResponse
from promptforge.schemas.prompt import PromptWrite, SavedPromptResponse

__all__ = [
    "ChatMessage",
    "ConversationDetail",
    "ConversationSave",
    "ConversationSummary",
    "CritiqueRequest",
    "DualCritiqueResponse",
    "Envelope",
    "EvalGenerateRequest",
    "EvalSuiteResponse",
    "ExecuteRequest",
    "HealthResponse",
    "HistoryCreate",
    "HistoryItemResponse",
    "MessageIn",
    "MessageResponse",
    "ModelRunResponse",
    "MultiModelExecuteRequest",
    "PromptEngineerRequest",
    "PromptWrite",
    "ProvidersResponse",
    "SavedPromptResponse",
    "ServiceStatus",
    "ok",
]
