"""
Engine executor — the VMID change sequence.

A change is always the same five steps, run in order with no
transaction around them:

    stop → rename_config → rename_storage → verify → start

Each step is an Action dispatched through the adapter registry and
answered by a Receipt. Only two things stop the sequence early: a
failed configuration rename, and a failed stop when the stop policy
is "abort". Everything else is reported and the sequence moves on.

Flow:
    request → preconditions → plan → execute (report each step) → summary
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal

from vmidctl.adapters.registry import AdapterRegistry
from vmidctl.core.models.action import Action, Receipt
from vmidctl.core.models.guest import ChangeRequest, GuestKind
from vmidctl.core.models.settings import GuestPaths, Settings
from vmidctl.core.observability.reporter import Reporter

logger = logging.getLogger(__name__)

STEP_STOP = "stop"
STEP_RENAME_CONFIG = "rename_config"
STEP_RENAME_STORAGE = "rename_storage"
STEP_VERIFY = "verify"
STEP_START = "start"

STEPS = (STEP_STOP, STEP_RENAME_CONFIG, STEP_RENAME_STORAGE, STEP_VERIFY, STEP_START)

StopPolicy = Literal["warn", "abort"]


@dataclass
class ChangePlan:
    """The five actions for one request."""

    operation_id: str
    request: ChangeRequest
    paths: GuestPaths
    actions: list[Action] = field(default_factory=list)

    def action(self, step: str) -> Action:
        for action in self.actions:
            if action.step == step:
                return action
        raise KeyError(step)


@dataclass
class ChangeReport:
    """Aggregate outcome of a change, one receipt per executed step."""

    operation_id: str
    request: ChangeRequest
    receipts: dict[str, Receipt] = field(default_factory=dict)
    aborted_at: str | None = None
    abort_reason: str | None = None
    dry_run: bool = False

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.receipts.values() if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.receipts.values() if r.failed)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.receipts.values() if r.skipped)

    @property
    def aborted(self) -> bool:
        return self.aborted_at is not None

    @property
    def all_ok(self) -> bool:
        return not self.aborted and self.failed == 0

    @property
    def status(self) -> str:
        if self.aborted:
            return "aborted"
        if self.failed == 0:
            return "ok"
        if self.succeeded > 0:
            return "partial"
        return "failed"

    def receipt(self, step: str) -> Receipt | None:
        return self.receipts.get(step)


def generate_operation_id() -> str:
    """Generate a unique operation ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"op-{now}-{short}"


def build_plan(
    request: ChangeRequest,
    settings: Settings,
    operation_id: str,
) -> ChangePlan:
    """Lay out the five actions for a request."""
    paths = settings.paths_for(request.kind)
    old, new = request.old_vmid, request.new_vmid

    def _action(step: str, adapter: str, **params: object) -> Action:
        return Action(id=f"{operation_id}:{step}", step=step, adapter=adapter, params=params)

    plan = ChangePlan(operation_id=operation_id, request=request, paths=paths)
    plan.actions = [
        _action(STEP_STOP, paths.command, operation="stop", vmid=old),
        _action(
            STEP_RENAME_CONFIG,
            "filesystem",
            operation="move",
            source=str(paths.config_path(old)),
            target=str(paths.config_path(new)),
            required=True,
        ),
        _action(
            STEP_RENAME_STORAGE,
            "filesystem",
            operation="move",
            source=str(paths.storage_path(old)),
            target=str(paths.storage_path(new)),
            required=False,
        ),
        _action(STEP_VERIFY, paths.command, operation="config", vmid=new),
        _action(STEP_START, paths.command, operation="start", vmid=new),
    ]
    return plan


def check_preconditions(plan: ChangePlan, registry: AdapterRegistry) -> str | None:
    """Refuse a change that cannot work, before anything is touched.

    The old configuration file must exist and the new one must not.
    Runs even in dry-run mode, since it only reads.

    Returns:
        An error message, or None when the change may proceed.
    """
    req = plan.request
    rename = plan.action(STEP_RENAME_CONFIG)
    old_config = rename.params["source"]
    new_config = rename.params["target"]

    old_exists = _exists(registry, plan.operation_id, old_config)
    if old_exists is None:
        return f"Cannot check configuration file {old_config}."
    if not old_exists:
        return (
            f"Configuration file for {req.kind.label} {req.old_vmid} "
            f"not found at {old_config}."
        )

    new_exists = _exists(registry, plan.operation_id, new_config)
    if new_exists is None:
        return f"Cannot check configuration file {new_config}."
    if new_exists:
        return (
            f"VMID {req.new_vmid} is already in use: "
            f"configuration file {new_config} exists."
        )

    return None


def _exists(registry: AdapterRegistry, operation_id: str, path: str) -> bool | None:
    receipt = registry.execute_action(
        Action(
            id=f"{operation_id}:preflight",
            step="preflight",
            adapter="filesystem",
            params={"operation": "exists", "path": path},
        ),
    )
    if not receipt.ok:
        logger.debug("Existence check for %s failed: %s", path, receipt.error)
        return None
    return bool(receipt.metadata.get("exists"))


def execute_plan(
    plan: ChangePlan,
    registry: AdapterRegistry,
    reporter: Reporter,
    stop_failure: StopPolicy = "warn",
    dry_run: bool = False,
) -> ChangeReport:
    """Run the plan step by step, reporting each outcome.

    Args:
        plan: The execution plan.
        registry: Adapter registry for dispatch.
        reporter: Where status lines go.
        stop_failure: "warn" continues after a failed stop, "abort" halts.
        dry_run: If True, validate every action but execute none.

    Returns:
        ChangeReport with one receipt per step that ran.
    """
    req = plan.request
    report = ChangeReport(operation_id=plan.operation_id, request=req, dry_run=dry_run)

    reporter.info("Starting VMID change process...")

    for action in plan.actions:
        reporter.info(_announce(action.step, req))
        receipt = registry.execute_action(action, dry_run=dry_run)
        report.receipts[action.step] = receipt

        marker = "✓" if receipt.ok else "✗" if receipt.failed else "⊘"
        logger.info("%s %s → %s", marker, action.id, receipt.status)

        _report_outcome(action, receipt, req, reporter)

        if receipt.failed:
            reason = _abort_reason(action.step, receipt, stop_failure)
            if reason is not None:
                report.aborted_at = action.step
                report.abort_reason = reason
                reporter.error(reason)
                break

    return report


def summarize(report: ChangeReport, reporter: Reporter) -> None:
    """Render the closing summary from what actually happened."""
    req = report.request
    reporter.summary("Summary of Changes:")

    for step in STEPS:
        receipt = report.receipt(step)
        what = _describe(step, req)
        if receipt is None:
            reporter.summary(f"- Not run: {what}.")
        elif receipt.ok:
            reporter.summary(f"- {_done(step, req)}.")
        elif receipt.skipped:
            reporter.summary(f"- Skipped: {what} ({receipt.output}).")
        else:
            reporter.summary(f"- FAILED: {what} ({receipt.error}).")

    if report.aborted:
        reporter.error(f"VMID change aborted at step '{report.aborted_at}'.")
    elif report.dry_run:
        reporter.info("Dry run complete; nothing was changed.")
    elif report.all_ok:
        reporter.success(
            f"VMID change process completed successfully. New VMID: {req.new_vmid}"
        )
    else:
        reporter.error(
            f"VMID change process completed with {report.failed} failed step(s). "
            f"New VMID: {req.new_vmid}"
        )


# ── Step wording ────────────────────────────────────────────────


def _announce(step: str, req: ChangeRequest) -> str:
    if step == STEP_STOP:
        return f"Stopping {req.kind.label} with VMID {req.old_vmid}..."
    if step == STEP_RENAME_CONFIG:
        return f"Renaming configuration file from {req.old_vmid} to {req.new_vmid}..."
    if step == STEP_RENAME_STORAGE:
        return f"Renaming storage files for VMID {req.old_vmid}..."
    if step == STEP_VERIFY:
        return f"Verifying configuration for VMID {req.new_vmid}..."
    return f"Starting {req.kind.label} with new VMID {req.new_vmid}..."


def _describe(step: str, req: ChangeRequest) -> str:
    if step == STEP_STOP:
        return f"stop {req.kind.label} {req.old_vmid}"
    if step == STEP_RENAME_CONFIG:
        return f"rename configuration file {req.old_vmid} -> {req.new_vmid}"
    if step == STEP_RENAME_STORAGE:
        return f"rename {req.kind.storage_noun} {req.old_vmid} -> {req.new_vmid}"
    if step == STEP_VERIFY:
        return f"verify configuration for {req.new_vmid}"
    return f"start {req.kind.label} {req.new_vmid}"


def _done(step: str, req: ChangeRequest) -> str:
    if step == STEP_STOP:
        return f"Stopped {req.kind.label} with VMID {req.old_vmid}"
    if step == STEP_RENAME_CONFIG:
        return f"Configuration file renamed to VMID {req.new_vmid}"
    if step == STEP_RENAME_STORAGE:
        return f"{req.kind.storage_noun.capitalize()} renamed to VMID {req.new_vmid}"
    if step == STEP_VERIFY:
        return f"Verified configuration for {req.new_vmid}"
    return f"Started {req.kind.label} with new VMID {req.new_vmid}"


def _report_outcome(
    action: Action,
    receipt: Receipt,
    req: ChangeRequest,
    reporter: Reporter,
) -> None:
    step = action.step
    label = req.kind.label

    if receipt.skipped:
        if step == STEP_RENAME_STORAGE and receipt.metadata.get("missing"):
            reporter.info(
                f"No {req.kind.storage_noun} found at {action.params['source']}. "
                "Skipping storage rename."
            )
        else:
            reporter.info(receipt.output)
        return

    if receipt.ok:
        if step == STEP_STOP:
            reporter.success(f"{label} {req.old_vmid} stopped successfully.")
        elif step == STEP_RENAME_CONFIG:
            reporter.success(
                f"Configuration file renamed: {action.params['source']} -> "
                f"{action.params['target']}."
            )
        elif step == STEP_RENAME_STORAGE:
            what = "VM disk files" if req.kind is GuestKind.VM else "Container root filesystem"
            reporter.success(
                f"{what} renamed: {action.params['source']} -> {action.params['target']}."
            )
        elif step == STEP_VERIFY:
            reporter.success(f"{label} configuration verified successfully.")
        else:
            reporter.success(f"{label} {req.new_vmid} started successfully.")
        return

    error = receipt.error or "unknown error"
    if step == STEP_STOP:
        reporter.error(f"Failed to stop {label} {req.old_vmid}: {error}")
    elif step == STEP_RENAME_CONFIG:
        if receipt.metadata.get("missing"):
            reporter.error(
                f"Configuration file for {label} {req.old_vmid} not found at "
                f"{action.params['source']}."
            )
        else:
            reporter.error(f"Failed to rename configuration file: {error}")
    elif step == STEP_RENAME_STORAGE:
        reporter.error(f"Failed to rename {req.kind.storage_noun}: {error}")
    elif step == STEP_VERIFY:
        reporter.error(f"Failed to verify {label} configuration: {error}")
    else:
        reporter.error(f"Failed to start {label} {req.new_vmid}: {error}")


def _abort_reason(step: str, receipt: Receipt, stop_failure: StopPolicy) -> str | None:
    """Decide whether a failed step ends the run."""
    if step == STEP_RENAME_CONFIG:
        return "Configuration file was not renamed; stopping here."
    if step == STEP_STOP and stop_failure == "abort":
        return "Stop failed and stop_failure is 'abort'; no files were changed."
    return None
