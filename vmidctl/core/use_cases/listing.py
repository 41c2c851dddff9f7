"""
Listing use case — show existing guests of one kind.

Informational only: nothing downstream parses or checks these rows
against the VMIDs the operator types next.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from vmidctl.adapters.pve.guest import parse_guest_list
from vmidctl.adapters.registry import AdapterRegistry
from vmidctl.core.models.action import Action
from vmidctl.core.models.guest import GuestKind, GuestSummary
from vmidctl.core.models.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class ListResult:
    """Guests of one kind, or why they could not be listed."""

    kind: GuestKind
    guests: list[GuestSummary] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        result: dict = {"kind": self.kind.value}
        if self.error:
            result["error"] = self.error
        result["guests"] = [g.model_dump() for g in self.guests]
        return result


def list_guests(
    kind: GuestKind,
    settings: Settings,
    registry: AdapterRegistry | None = None,
) -> ListResult:
    """Run ``qm list`` or ``pct list`` and parse the rows."""
    result = ListResult(kind=kind)
    paths = settings.paths_for(kind)

    if registry is None:
        from vmidctl.adapters import default_registry

        registry = default_registry(settings)

    receipt = registry.execute_action(
        Action(
            id=f"list:{kind.value}",
            step="list",
            adapter=paths.command,
            params={"operation": "list"},
        )
    )

    if not receipt.ok:
        logger.debug("%s list failed: %s", paths.command, receipt.error)
        result.error = receipt.error or f"{paths.command} list failed"
        return result

    result.guests = parse_guest_list(receipt.output, kind.list_column)
    return result
