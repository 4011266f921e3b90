"""Sweep outcome model."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field


class SweepResult(BaseModel):
    """Summary of one clean or clear pass over a namespace."""

    operation: Literal["clean", "clear"] = Field(description="Which sweep ran")
    namespace: str | None = Field(default=None, description="Key prefix, escaped")
    windows_scanned: int = Field(default=0, description="Index range queries issued")
    keys_matched: int = Field(default=0, description="Keys under the namespace")
    deleted: int = Field(default=0, description="Keys hard-deleted")
    expired: int = Field(default=0, description="Keys soft-expired")
    skipped: int = Field(default=0, description="Keys gone before they were read")
    started_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="When the sweep began"
    )
    duration_seconds: float = Field(default=0.0, description="Wall-clock duration")
