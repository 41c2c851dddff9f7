"""
Guest tool adapter — ``qm`` and ``pct`` operations.

One adapter class serves both command families; an instance is bound
to one command name and registered under it. Uses the CLI tools, never
the Proxmox API.

    qm list / pct list           enumerate guests
    qm stop <vmid>               stop a guest
    qm start <vmid>              start a guest
    qm config <vmid>             print (and thereby validate) a config
"""

from __future__ import annotations

import logging
import subprocess
import time
from collections.abc import Callable

from vmidctl.adapters.base import Adapter, ExecutionContext
from vmidctl.core.models.action import Receipt
from vmidctl.core.models.guest import GuestSummary

logger = logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess]


class GuestToolAdapter(Adapter):
    """Run one Proxmox guest command family.

    Action params:
        operation (str): One of 'list', 'stop', 'start', 'config'.
        vmid (int): Target guest (all operations except 'list').
    """

    VALID_OPERATIONS = {"list", "stop", "start", "config"}

    def __init__(self, command: str, runner: Runner | None = None):
        self._command = command
        self._runner = runner or subprocess.run

    @property
    def name(self) -> str:
        return self._command

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.operation
        if not operation:
            return False, "Missing required param: 'operation'"

        if operation not in self.VALID_OPERATIONS:
            valid = ", ".join(sorted(self.VALID_OPERATIONS))
            return False, f"Unknown operation '{operation}'. Valid: {valid}"

        if operation != "list":
            vmid = context.params.get("vmid")
            if not isinstance(vmid, int) or isinstance(vmid, bool) or vmid <= 0:
                return False, f"Invalid or missing 'vmid' for {operation}: {vmid!r}"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        operation = context.operation
        args = [operation]
        if operation != "list":
            args.append(str(context.params["vmid"]))
        return self._run(context, args)

    def _run(self, ctx: ExecutionContext, args: list[str]) -> Receipt:
        argv = [self._command, *args]
        command = " ".join(argv)
        logger.debug("Executing: %s (timeout=%ss)", command, ctx.timeout)
        start = time.monotonic()

        try:
            result = self._runner(
                argv,
                capture_output=True,
                text=True,
                timeout=ctx.timeout,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"'{command}' timed out after {ctx.timeout}s",
                metadata={"command": command, "timeout": ctx.timeout},
            )
        except FileNotFoundError:
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"'{self._command}' not found; is this a Proxmox VE node?",
                metadata={"command": command},
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"Command execution error: {e}",
                metadata={"command": command},
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        output = (result.stdout or "").strip()
        stderr = (result.stderr or "").strip()

        if result.returncode == 0:
            return Receipt.success(
                adapter=self.name,
                action_id=ctx.action.id,
                output=output,
                duration_ms=elapsed_ms,
                metadata={"command": command, "return_code": 0, "stderr": stderr},
            )

        return Receipt.failure(
            adapter=self.name,
            action_id=ctx.action.id,
            error=stderr or f"'{command}' exited with code {result.returncode}",
            duration_ms=elapsed_ms,
            metadata={"command": command, "return_code": result.returncode, "stdout": output},
        )


def parse_guest_list(output: str, column: str) -> list[GuestSummary]:
    """Parse ``qm list`` / ``pct list`` output.

    The first non-blank line is the header. ``column`` names the field
    shown next to the VMID (case-insensitive). Rows whose first field
    is not a number are ignored.
    """
    lines = [line for line in output.splitlines() if line.strip()]
    if not lines:
        return []

    header = [h.upper() for h in lines[0].split()]
    try:
        vmid_idx = header.index("VMID")
    except ValueError:
        vmid_idx = 0
    try:
        label_idx = header.index(column.upper())
    except ValueError:
        label_idx = 1

    guests = []
    for line in lines[1:]:
        parts = line.split()
        if len(parts) <= vmid_idx or not parts[vmid_idx].isdigit():
            continue
        label = parts[label_idx] if len(parts) > label_idx else ""
        guests.append(GuestSummary(vmid=int(parts[vmid_idx]), label=label))
    return guests
