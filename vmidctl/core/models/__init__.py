"""
Domain models — Pydantic types for vmidctl.

    from vmidctl.core.models import Action, Receipt, ChangeRequest, GuestKind, Settings
"""

from vmidctl.core.models.action import Action, Receipt
from vmidctl.core.models.guest import (
    ChangeRequest,
    GuestKind,
    GuestSummary,
    InvalidInputError,
    parse_kind_choice,
    parse_menu_choice,
    parse_vmid,
)
from vmidctl.core.models.settings import GuestPaths, Settings

__all__ = [
    # action.py
    "Action",
    "Receipt",
    # guest.py
    "ChangeRequest",
    "GuestKind",
    "GuestSummary",
    "InvalidInputError",
    "parse_kind_choice",
    "parse_menu_choice",
    "parse_vmid",
    # settings.py
    "GuestPaths",
    "Settings",
]
