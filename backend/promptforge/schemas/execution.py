from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict


class ExecuteRequest(BaseModel):
    prompt: str = ""
    model: str = ""
    temperature: float = 0.0
    max_tokens: int = 0


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class PromptEngineerRequest(BaseModel):
    messages: list[ChatMessage] = []
    model: str = ""
    temperature: float = 0.0


class ProvidersResponse(BaseModel):
    default: str
    available: list[str]
    configured: dict[str, bool]


class CritiqueRequest(BaseModel):
    prompt: str = ""
    model: str = ""


class DualCritiqueResponse(BaseModel):
    quick_report: str
    detailed_report: str


class MultiModelExecuteRequest(BaseModel):
    prompt: str = ""
    models: list[str] = []
    temperature: float = 0.0
    max_tokens: int = 0


class TokenUsageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class ModelRunResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    model: str
    success: bool
    response: str
    execution_time_ms: float
    token_usage: TokenUsageResponse


class EvalGenerateRequest(BaseModel):
    """Request body for building an evaluation suite.

    ``sample_size`` of 0 or less, an empty ``model`` and an empty
    ``difficulty`` all mean "use the default".
    """

    prompt: str = ""
    eval_types: list[str] = []
    sample_size: int = 0
    model: str = ""
    difficulty: str = ""


class EvalCaseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    input: str
    category: str
    difficulty: str
    expected: str = ""


class EvalCriterionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    description: str
    weight: int


class EvalMetadataResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    generated_at: datetime
    model: str
    sample_size: int
    eval_types: list[str]
    difficulty: str


class EvalSuiteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    test_cases: list[EvalCaseResponse]
    criteria: list[EvalCriterionResponse]
    base_prompt: str
    metadata: EvalMetadataResponse
