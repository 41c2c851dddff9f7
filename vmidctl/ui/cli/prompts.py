"""
Interactive input for ``vmidctl change``.

One attempt per question: an invalid answer raises InvalidInputError
and the command exits. Values already given as CLI options are
validated the same way and never prompted for.
"""

from __future__ import annotations

import click

from vmidctl.core.models.guest import (
    MENU_CHOICES,
    ChangeRequest,
    GuestKind,
    parse_kind_choice,
    parse_menu_choice,
)


def _ask(text: str) -> str:
    # default="" so an empty answer is returned instead of re-prompting
    return click.prompt(text, default="", show_default=False)


def choose_kind(preset: str | None = None) -> GuestKind:
    """Numbered menu: 1) VM, 2) Container."""
    if preset is not None:
        return parse_kind_choice(preset)

    click.secho("Select the type of resource to change VMID:", fg="yellow", bold=True)
    for number, kind in MENU_CHOICES.items():
        click.echo(f"{number}) {kind.menu_label}")
    return parse_menu_choice(_ask("Enter your choice (1 or 2)"))


def ask_request(
    kind: GuestKind,
    old: str | None = None,
    new: str | None = None,
) -> ChangeRequest:
    """Collect both VMIDs and validate them together."""
    if old is None:
        old = _ask("Enter the current VMID")
    if new is None:
        new = _ask("Enter the new VMID")
    return ChangeRequest.from_input(kind, old, new)


def confirm(assume_yes: bool = False) -> bool:
    """Only the exact answer ``yes`` proceeds."""
    if assume_yes:
        return True
    return _ask("Do you want to proceed? (yes/no)") == "yes"
