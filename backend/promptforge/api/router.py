from __future__ import annotations

from fastapi import APIRouter

from promptforge.api.conversations import router as conversations_router
from promptforge.api.execution import router as execution_router
from promptforge.api.health import router as health_router
from promptforge.api.history import router as history_router
from promptforge.api.prompts import router as prompts_router

api_router = APIRouter(prefix="/api")
api_router.include_router(health_router, tags=["health"])
api_router.include_router(execution_router)
api_router.include_router(history_router)
api_router.include_router(conversations_router)
api_router.include_router(prompts_router)
