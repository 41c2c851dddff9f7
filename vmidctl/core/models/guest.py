"""
Guest models — what kind of guest we touch and which VMIDs are involved.

A guest is either a QEMU virtual machine (managed with ``qm``) or an
LXC container (managed with ``pct``). A VMID is a positive integer,
unique per node at any point in time.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, model_validator


class InvalidInputError(ValueError):
    """Raised when operator input cannot describe a valid change."""


class GuestKind(StrEnum):
    """The two guest families on a Proxmox VE node."""

    VM = "vm"
    CT = "ct"

    @property
    def label(self) -> str:
        """Singular label used in status lines ("VM 300 stopped")."""
        return "VM" if self is GuestKind.VM else "Container"

    @property
    def plural(self) -> str:
        return "VMs" if self is GuestKind.VM else "Containers"

    @property
    def storage_noun(self) -> str:
        """What the storage artifact is called for this kind."""
        return "disk files" if self is GuestKind.VM else "root filesystem"

    @property
    def list_column(self) -> str:
        """Header of the column shown next to the VMID when listing."""
        return "NAME" if self is GuestKind.VM else "STATUS"

    @property
    def menu_label(self) -> str:
        return "Virtual Machine (QEMU)" if self is GuestKind.VM else "Container (LXC)"


# Menu order matters: "1" is always VM, "2" always CT.
MENU_CHOICES: dict[str, GuestKind] = {
    "1": GuestKind.VM,
    "2": GuestKind.CT,
}


def parse_menu_choice(choice: str) -> GuestKind:
    """Map an interactive menu answer to a GuestKind; only ``1`` or ``2``."""
    choice = (choice or "").strip()
    if choice not in MENU_CHOICES:
        raise InvalidInputError("Invalid choice. Exiting.")
    return MENU_CHOICES[choice]


def parse_kind_choice(choice: str) -> GuestKind:
    """Map a ``--type`` value (``1``/``2`` or a kind name) to a GuestKind."""
    choice = (choice or "").strip().lower()
    if choice in MENU_CHOICES:
        return MENU_CHOICES[choice]
    try:
        return GuestKind(choice)
    except ValueError:
        raise InvalidInputError("Invalid choice. Exiting.") from None


def parse_vmid(raw: str | int | None) -> int:
    """Parse a VMID typed by the operator.

    Only ASCII digits are accepted, and the value must be positive.

    Raises:
        InvalidInputError: empty, non-numeric, or zero.
    """
    if isinstance(raw, int) and not isinstance(raw, bool):
        text = str(raw)
    else:
        text = (raw or "").strip()

    if not text or not text.isascii() or not text.isdigit():
        raise InvalidInputError(
            "Both OLD_VMID and NEW_VMID must be numeric and specified. Exiting."
        )

    vmid = int(text)
    if vmid <= 0:
        raise InvalidInputError(f"VMID must be a positive integer, got '{text}'. Exiting.")
    return vmid


class ChangeRequest(BaseModel):
    """One requested VMID change, passed explicitly through every step."""

    model_config = ConfigDict(frozen=True)

    kind: GuestKind
    old_vmid: int
    new_vmid: int

    @model_validator(mode="after")
    def _check_vmids(self) -> ChangeRequest:
        if self.old_vmid <= 0 or self.new_vmid <= 0:
            raise ValueError("VMIDs must be positive integers")
        if self.old_vmid == self.new_vmid:
            raise ValueError(f"Old and new VMID are both {self.old_vmid}")
        return self

    @classmethod
    def from_input(cls, kind: GuestKind | str, old: str | int, new: str | int) -> ChangeRequest:
        """Build a request from raw operator input.

        Raises:
            InvalidInputError: if any part of the input is unusable.
        """
        if not isinstance(kind, GuestKind):
            kind = parse_kind_choice(kind)
        old_vmid = parse_vmid(old)
        new_vmid = parse_vmid(new)
        if old_vmid == new_vmid:
            raise InvalidInputError(
                f"OLD_VMID and NEW_VMID are both {old_vmid}; nothing to change. Exiting."
            )
        return cls(kind=kind, old_vmid=old_vmid, new_vmid=new_vmid)

    def describe(self) -> str:
        return f"{self.kind.label} {self.old_vmid} → {self.new_vmid}"


class GuestSummary(BaseModel):
    """One row of ``qm list`` / ``pct list``, for the operator's reference."""

    vmid: int
    label: str = ""
