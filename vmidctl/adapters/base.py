"""
Adapter base — the contract between the engine and the outside world.

The engine never shells out or touches the filesystem itself. It
hands an Action to an adapter and gets a Receipt back. Adapters for
``qm``/``pct`` and for file moves all implement this interface, so
tests can swap any of them for a MockAdapter.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from vmidctl.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """Everything an adapter needs to execute an action."""

    action: Action
    dry_run: bool = False
    timeout: int = 300
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def operation(self) -> str:
        return str(self.params.get("operation", ""))


class Adapter(ABC):
    """Abstract base class for all adapters.

    Adapters perform side effects and return receipts.
    They NEVER raise exceptions — failures are captured in the Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'qm', 'pct', 'filesystem')."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Validate that the action can be executed.

        Returns:
            (is_valid, error_message). error_message is empty if valid.
        """

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Execute the action and return a receipt.

        MUST never raise exceptions. All failures are captured
        in the Receipt with status='failed'.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
