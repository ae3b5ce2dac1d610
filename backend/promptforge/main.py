from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from promptforge.api.router import api_router
from promptforge.config import settings
from promptforge.exceptions import AppError, app_error_handler
from promptforge.logging_config import setup_logging
from promptforge.middleware.logging import RequestLoggingMiddleware
from promptforge.middleware.rate_limit import limiter

setup_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: startup and shutdown hooks.

    In dev mode the tables are created directly from the ORM metadata so the
    API works against a fresh SQLite file without running migrations.

    Args:
        application: The FastAPI application instance (unused directly but
            required by the lifespan protocol).
    """
    from promptforge.database import engine

    if settings.ENVIRONMENT == "dev":
        from promptforge.models import Base

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    yield
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        A fully configured FastAPI instance with middleware and routers applied.
    """
    application = FastAPI(
        title="PromptForge",
        description="Prompt-engineering workbench persistence API",
        version="0.1.0",
        lifespan=lifespan,
    )

    Instrumentator().instrument(application).expose(application, endpoint="/metrics")

    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    application.add_exception_handler(AppError, app_error_handler)

    # Middleware: the last one added runs first
    application.add_middleware(SlowAPIMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",")],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Requested-With", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )
    application.add_middleware(RequestLoggingMiddleware)

    # Routers
    application.include_router(api_router)

    return application


app = create_app()
