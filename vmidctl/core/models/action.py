"""
Action and Receipt models — the step contract.

Every step of a VMID change is an Action handed to an adapter, and
every adapter answers with a Receipt. Failures travel inside the
Receipt, never as exceptions, so the engine can keep going and
still tell the operator exactly what happened.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Action(BaseModel):
    """A single operation for one adapter (``qm stop 300``, a rename, ...)."""

    id: str                         # "<operation_id>:<step>"
    step: str = ""                  # stop, rename_config, rename_storage, verify, start
    adapter: str                    # qm, pct, filesystem
    params: dict[str, Any] = Field(default_factory=dict)


class Receipt(BaseModel):
    """Outcome of one adapter execution."""

    adapter: str
    action_id: str
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @classmethod
    def success(
        cls,
        adapter: str,
        action_id: str,
        output: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a success receipt."""
        return cls(
            adapter=adapter,
            action_id=action_id,
            status="ok",
            output=output,
            **kwargs,
        )

    @classmethod
    def failure(
        cls,
        adapter: str,
        action_id: str,
        error: str,
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt."""
        return cls(
            adapter=adapter,
            action_id=action_id,
            status="failed",
            error=error,
            **kwargs,
        )

    @classmethod
    def skip(
        cls,
        adapter: str,
        action_id: str,
        reason: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a skip receipt (nothing to do, not an error)."""
        return cls(
            adapter=adapter,
            action_id=action_id,
            status="skipped",
            output=reason,
            **kwargs,
        )
