"""
vmidctl — CLI entrypoint.

Usage:
    python -m vmidctl.main --help
    python -m vmidctl.main change
    python -m vmidctl.main change --type ct --old 101 --new 205 --yes
    python -m vmidctl.main list --type vm
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from vmidctl import __version__
from vmidctl.core.observability.logging_config import setup_logging

KIND_CHOICE = click.Choice(["vm", "ct", "1", "2"], case_sensitive=False)


@click.group()
@click.version_option(version=__version__, prog_name="vmidctl")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose diagnostics.")
@click.option("--quiet", "-q", is_flag=True, help="Only show diagnostic errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option("--no-color", is_flag=True, help="Disable colored status lines.")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to vmidctl.yml (default: $VMIDCTL_CONFIG or /etc/vmidctl/vmidctl.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    no_color: bool,
    config_path: str | None,
) -> None:
    """vmidctl — change the VMID of a Proxmox VE VM or container."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["no_color"] = no_color
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("VMIDCTL_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("VMIDCTL_DEBUG_LOG"),
        log_file_level=os.environ.get("VMIDCTL_DEBUG_LOG_LEVEL"),
    )


def _load_settings(ctx: click.Context):
    """Load settings or exit 1 with the config error."""
    from vmidctl.core.config.loader import ConfigError, load_settings

    try:
        return load_settings(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)


@cli.command()
@click.option("--type", "kind", default=None, help="vm (QEMU) or ct (LXC); 1 and 2 also work.")
@click.option("--old", "old_vmid", default=None, help="Current VMID.")
@click.option("--new", "new_vmid", default=None, help="New VMID.")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Do not ask for confirmation.")
@click.option("--dry-run", is_flag=True, help="Check and plan, but change nothing.")
@click.pass_context
def change(
    ctx: click.Context,
    kind: str | None,
    old_vmid: str | None,
    new_vmid: str | None,
    assume_yes: bool,
    dry_run: bool,
) -> None:
    """Stop a guest, move it to a new VMID, and start it again.

    Prompts for anything not given as an option.

    Examples:

        vmidctl change

        vmidctl change --type ct --old 101 --new 205

        vmidctl change --type vm --old 300 --new 301 --dry-run --yes
    """
    from vmidctl.core.models.guest import InvalidInputError
    from vmidctl.core.observability.reporter import OperatorReporter
    from vmidctl.core.use_cases.change import EXIT_FATAL, EXIT_OK, change_vmid
    from vmidctl.ui.cli.prompts import ask_request, choose_kind, confirm

    settings = _load_settings(ctx)
    registry = ctx.obj.get("registry")
    reporter = OperatorReporter(settings.log_file, color=not ctx.obj.get("no_color"))

    try:
        try:
            guest_kind = choose_kind(kind)
            if old_vmid is None or new_vmid is None:
                _print_guests(guest_kind, settings, registry, reporter)
            request = ask_request(guest_kind, old_vmid, new_vmid)
        except InvalidInputError as e:
            reporter.error(str(e))
            sys.exit(EXIT_FATAL)

        reporter.info(
            f"You have selected to change {request.kind.label} VMID "
            f"from {request.old_vmid} to {request.new_vmid}."
        )
        if not confirm(assume_yes):
            reporter.error("Operation canceled by user.")
            sys.exit(EXIT_OK)

        result = change_vmid(
            request,
            settings=settings,
            reporter=reporter,
            registry=registry,
            dry_run=dry_run,
        )

        if reporter.log_file is not None:
            reporter.info(f"Detailed logs have been saved to {reporter.log_file}.")
    finally:
        reporter.close()

    sys.exit(result.exit_code)


def _print_guests(kind, settings, registry, reporter) -> None:
    """Show existing guests for reference; a failure never aborts."""
    from vmidctl.core.use_cases.listing import list_guests

    reporter.info(f"Fetching available {kind.plural}...")
    result = list_guests(kind, settings, registry=registry)
    if result.error:
        reporter.error(f"Failed to list {kind.plural}. ({result.error})")
        return
    for guest in result.guests:
        click.echo(f"{guest.vmid} {guest.label}")


@cli.command("list")
@click.option("--type", "kind", type=KIND_CHOICE, required=True, help="vm (QEMU) or ct (LXC).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_cmd(ctx: click.Context, kind: str, as_json: bool) -> None:
    """List existing VMs or containers."""
    from vmidctl.core.models.guest import parse_kind_choice
    from vmidctl.core.use_cases.listing import list_guests

    settings = _load_settings(ctx)
    guest_kind = parse_kind_choice(kind)
    result = list_guests(guest_kind, settings, registry=ctx.obj.get("registry"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error:
        click.secho(f"❌ Failed to list {guest_kind.plural}: {result.error}", fg="red", err=True)
        sys.exit(1)

    if not result.guests:
        click.secho(f"No {guest_kind.plural} found.", fg="yellow")
        return

    click.secho(f"{'VMID':>6}  {guest_kind.list_column}", bold=True)
    for guest in result.guests:
        click.echo(f"{guest.vmid:>6}  {guest.label}")


if __name__ == "__main__":
    cli()
