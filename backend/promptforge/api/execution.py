from __future__ import annotations

import structlog
from fastapi import APIRouter

from promptforge.config import settings
from promptforge.exceptions import ValidationError
from promptforge.metrics import executions_total
from promptforge.pipelines.analysis import critique_prompt, dual_critique_prompt
from promptforge.pipelines.completion import PROVIDERS, engineer_prompt, execute_across_models, execute_prompt
from promptforge.pipelines.evaluation import generate_eval_suite
from promptforge.schemas import (
    CritiqueRequest,
    DualCritiqueResponse,
    Envelope,
    EvalGenerateRequest,
    EvalSuiteResponse,
    ExecuteRequest,
    ModelRunResponse,
    MultiModelExecuteRequest,
    PromptEngineerRequest,
    ProvidersResponse,
    ok,
)

logger = structlog.get_logger()
router = APIRouter(tags=["execution"])


@router.post("/execute", response_model=Envelope[str])
async def execute(body: ExecuteRequest) -> Envelope[str]:
    """Run a prompt test and return the completion text."""
    if not body.prompt.strip():
        raise ValidationError("Prompt is required")
    executions_total.labels(endpoint="execute").inc()
    return ok(execute_prompt(body.prompt, body.model, body.temperature, body.max_tokens))


@router.post("/prompt-engineer", response_model=Envelope[str])
async def prompt_engineer(body: PromptEngineerRequest) -> Envelope[str]:
    """Return the next prompt-engineering turn for a conversation transcript.

    Args:
        body: The outbound chat payload, system prompt first.

    Raises:
        ValidationError: If no messages were sent.

    Returns:
        Envelope wrapping the assistant reply text.
    """
    if not body.messages:
        raise ValidationError("At least one message is required")
    executions_total.labels(endpoint="prompt_engineer").inc()
    messages = [m.model_dump() for m in body.messages]
    return ok(engineer_prompt(messages, body.model, body.temperature))


@router.post("/critique", response_model=Envelope[str])
async def critique(body: CritiqueRequest) -> Envelope[str]:
    """Return an HTML critique of a prompt."""
    if not body.prompt.strip():
        raise ValidationError("Prompt is required")
    executions_total.labels(endpoint="critique").inc()
    return ok(critique_prompt(body.prompt, body.model))


@router.post("/dual-critique", response_model=Envelope[DualCritiqueResponse])
async def dual_critique(body: CritiqueRequest) -> Envelope[DualCritiqueResponse]:
    if not body.prompt.strip():
        raise ValidationError("Prompt is required")
    executions_total.labels(endpoint="dual_critique").inc()
    return ok(DualCritiqueResponse(**dual_critique_prompt(body.prompt, body.model)))


@router.post("/multi-model-execute", response_model=Envelope[list[ModelRunResponse]])
async def multi_model_execute(body: MultiModelExecuteRequest) -> Envelope[list[ModelRunResponse]]:
    """Run one prompt against every requested model, results in request order."""
    if not body.prompt.strip():
        raise ValidationError("Prompt is required")
    if not body.models:
        raise ValidationError("At least one model is required")
    executions_total.labels(endpoint="multi_model_execute").inc()
    runs = execute_across_models(body.prompt, body.models, body.temperature, body.max_tokens)
    return ok([ModelRunResponse.model_validate(run) for run in runs])


@router.post("/generate-eval", response_model=Envelope[EvalSuiteResponse])
async def generate_eval(body: EvalGenerateRequest) -> Envelope[EvalSuiteResponse]:
    """Build a test-case suite and weighted criteria for evaluating a prompt.

    Args:
        body: Prompt, evaluation types and optional sample size, model and difficulty.

    Raises:
        ValidationError: If the prompt is blank or no evaluation type was given.

    Returns:
        Envelope wrapping the generated suite.
    """
    if not body.prompt.strip():
        raise ValidationError("Prompt is required")
    if not body.eval_types:
        raise ValidationError("At least one evaluation type is required")
    executions_total.labels(endpoint="generate_eval").inc()
    suite = generate_eval_suite(body.prompt, body.eval_types, body.sample_size, body.model, body.difficulty)
    return ok(EvalSuiteResponse.model_validate(suite))


@router.get("/providers", response_model=ProvidersResponse)
async def providers() -> ProvidersResponse:
    return ProvidersResponse(
        default=settings.DEFAULT_PROVIDER,
        available=PROVIDERS,
        configured=settings.configured_providers,
    )
