from __future__ import annotations

from pathlib import Path

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from project root (parent of backend/)
_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=str(_ENV_FILE), env_file_encoding="utf-8", extra="ignore")

    # App
    ENVIRONMENT: str = "dev"
    LOG_LEVEL: str = "DEBUG"

    # CORS
    CORS_ORIGINS: str = "http://localhost:8080"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./promptforge.db"

    # History
    HISTORY_LIMIT: int = 50

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "120/minute"
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # Providers (only reported as configured / not configured)
    DEFAULT_PROVIDER: str = "anthropic"
    OPENAI_API_KEY: SecretStr | None = None
    ANTHROPIC_API_KEY: SecretStr | None = None
    AZURE_OPENAI_API_KEY: SecretStr | None = None

    # Execution defaults
    DEFAULT_MODEL: str = "gpt-4.1"
    PROMPT_ENGINEER_MODEL: str = "o3"
    DEFAULT_TEMPERATURE: float = 0.7
    DEFAULT_MAX_TOKENS: int = 1000
    PROMPT_ENGINEER_MAX_TOKENS: int = 2000

    # Workbench client
    WORKBENCH_API_BASE: str = "http://localhost:8080/api"
    WORKBENCH_TIMEOUT: float = 30.0
    WORKBENCH_STATE_PATH: str = str(Path.home() / ".promptforge" / "state.json")

    @property
    def configured_providers(self) -> dict[str, bool]:
        """Map each known provider to whether an API key is present."""
        return {
            "openai": self.OPENAI_API_KEY is not None,
            "azure-openai": self.AZURE_OPENAI_API_KEY is not None,
            "anthropic": self.ANTHROPIC_API_KEY is not None,
        }


settings = Settings()
