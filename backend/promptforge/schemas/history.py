from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, model_validator


class HistoryCreate(BaseModel):
    """Request body for recording one test execution."""

    prompt: str
    model: str = ""
    temperature: float = 0.0
    max_tokens: int | None = None
    success: bool
    response: str | None = None
    error_msg: str | None = None

    @model_validator(mode="after")
    def _outcome_is_exclusive(self) -> HistoryCreate:
        """Keep exactly one of response / error_msg, chosen by ``success``."""
        if self.success:
            self.response = self.response or ""
            self.error_msg = None
        else:
            self.error_msg = self.error_msg or "Unknown error"
            self.response = None
        return self


class HistoryItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    timestamp: datetime
    prompt: str
    model: str
    temperature: float
    max_tokens: int | None
    success: bool
    response: str | None
    error_msg: str | None
