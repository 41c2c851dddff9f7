"""
Change use case — move a guest from one VMID to another.

The full vertical slice from a validated request to a summarized,
logged run: preconditions, the five-step sequence, and the closing
summary rendered from the step receipts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from vmidctl.adapters.registry import AdapterRegistry
from vmidctl.core.engine.executor import (
    ChangePlan,
    ChangeReport,
    build_plan,
    check_preconditions,
    execute_plan,
    generate_operation_id,
    summarize,
)
from vmidctl.core.models.guest import ChangeRequest
from vmidctl.core.models.settings import Settings
from vmidctl.core.observability.reporter import Reporter

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_STEP_FAILED = 2


@dataclass
class ChangeResult:
    """Result of a VMID change."""

    request: ChangeRequest
    plan: ChangePlan | None = None
    report: ChangeReport | None = None
    error: str | None = None

    @property
    def exit_code(self) -> int:
        """0 all good, 1 refused or aborted, 2 ran to the end with failures."""
        if self.error is not None:
            return EXIT_FATAL
        if self.report is None or self.report.aborted:
            return EXIT_FATAL
        if self.report.failed > 0:
            return EXIT_STEP_FAILED
        return EXIT_OK


def change_vmid(
    request: ChangeRequest,
    settings: Settings,
    reporter: Reporter,
    registry: AdapterRegistry | None = None,
    dry_run: bool = False,
) -> ChangeResult:
    """Stop, rename config, rename storage, verify, start.

    Args:
        request: Kind plus old and new VMID.
        settings: Paths, timeout and stop policy.
        reporter: Receives every status line.
        registry: Optional pre-configured adapter registry.
        dry_run: If True, check and plan but change nothing.

    Returns:
        ChangeResult; ``error`` is set when the change was refused
        before any step ran.
    """
    result = ChangeResult(request=request)

    if registry is None:
        from vmidctl.adapters import default_registry

        registry = default_registry(settings)

    operation_id = generate_operation_id()
    plan = build_plan(request, settings, operation_id)
    result.plan = plan
    logger.debug("Planned %s as %s", request.describe(), operation_id)

    # ── Preconditions ────────────────────────────────────────────
    problem = check_preconditions(plan, registry)
    if problem is not None:
        reporter.error(problem)
        result.error = problem
        return result

    # ── Execute ──────────────────────────────────────────────────
    report = execute_plan(
        plan=plan,
        registry=registry,
        reporter=reporter,
        stop_failure=settings.stop_failure,
        dry_run=dry_run,
    )
    result.report = report

    summarize(report, reporter)
    logger.info(
        "%s finished: %s (%d ok, %d failed, %d skipped)",
        operation_id,
        report.status,
        report.succeeded,
        report.failed,
        report.skipped,
    )
    return result
