"""Diagnostic models describing lock state."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LockStatus(BaseModel):
    """Point-in-time view of one keyed lock."""

    model_config = ConfigDict(frozen=True)

    key: str
    locked: bool
    waiters: int = Field(default=0, ge=0)
