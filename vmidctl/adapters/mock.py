"""
Mock adapter — test double for any adapter.

Registers under any name (``qm``, ``pct``, ``filesystem``) and records
every context it receives. Responses can be overridden per action ID,
per step name, or per operation.
"""

from __future__ import annotations

from vmidctl.adapters.base import Adapter, ExecutionContext
from vmidctl.core.models.action import Receipt


class MockAdapter(Adapter):
    """Universal mock adapter for testing.

    By default, returns success for everything.
    """

    def __init__(
        self,
        adapter_name: str = "mock",
        default_output: str = "[mock] executed",
    ):
        self._name = adapter_name
        self._default_output = default_output
        self._responses: dict[str, Receipt] = {}
        self._outputs: dict[str, str] = {}
        self._call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        """All execution contexts this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def calls(self) -> list[tuple[str, object]]:
        """(operation, vmid) pairs in call order, for guest-command assertions."""
        return [(c.operation, c.params.get("vmid")) for c in self._call_log]

    def set_response(self, key: str, receipt: Receipt) -> None:
        """Set a custom response for an action ID, step, or operation."""
        self._responses[key] = receipt

    def set_failure(self, key: str, error: str = "Mock failure") -> None:
        """Configure an action ID, step, or operation to fail."""
        self._responses[key] = Receipt.failure(
            adapter=self._name,
            action_id=key,
            error=error,
        )

    def set_output(self, operation: str, output: str) -> None:
        """Canned stdout for a successful operation (e.g. ``list``)."""
        self._outputs[operation] = output

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self._call_log.append(context)

        for key in (context.action.id, context.action.step, context.operation):
            if key and key in self._responses:
                return self._responses[key].model_copy(deep=True)

        return Receipt.success(
            adapter=self._name,
            action_id=context.action.id,
            output=self._outputs.get(context.operation, self._default_output),
            metadata={"mock": True},
        )

    def reset(self) -> None:
        """Clear call log and custom responses."""
        self._call_log.clear()
        self._responses.clear()
        self._outputs.clear()
