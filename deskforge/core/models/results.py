"""
Batch result models — summaries returned to the CLI.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class BatchResult(BaseModel):
    """Outcome of a caller-driven batch of installs or removals.

    ``order`` is the sequence the batch attempted. ``errors`` maps a
    failed package name to the error dict of its ``PackageError``.
    """

    operation: str = "install"
    order: list[str] = Field(default_factory=list)
    succeeded: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    errors: dict[str, dict[str, Any]] = Field(default_factory=dict)
    duration_ms: int = 0
    timestamp: str = Field(default_factory=_now_iso)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()
