from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Uniform response wrapper: ``{success, data?, error?}``."""

    success: bool = True
    data: T | None = None
    error: str | None = None


def ok(data: T) -> Envelope[T]:
    return Envelope(success=True, data=data)
