"""
Settings model — where things live on the node and how strict to be.

Defaults match a stock Proxmox VE installation, so the tool works
without any settings file at all.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from vmidctl.core.models.guest import GuestKind

DEFAULT_LOG_FILE = "/var/log/proxmox_vmid_change.log"


class GuestPaths(BaseModel):
    """Command family and on-disk layout for one guest kind."""

    command: str
    config_dir: str
    config_suffix: str = ".conf"
    storage_root: str

    def config_path(self, vmid: int) -> Path:
        return Path(self.config_dir) / f"{vmid}{self.config_suffix}"

    def storage_path(self, vmid: int) -> Path:
        return Path(self.storage_root) / str(vmid)


def _default_vm_paths() -> GuestPaths:
    return GuestPaths(
        command="qm",
        config_dir="/etc/pve/qemu-server",
        storage_root="/var/lib/vz/images",
    )


def _default_ct_paths() -> GuestPaths:
    return GuestPaths(
        command="pct",
        config_dir="/etc/pve/lxc",
        storage_root="/var/lib/lxc",
    )


class Settings(BaseModel):
    """Runtime settings, loaded from vmidctl.yml or left at defaults."""

    log_file: str = DEFAULT_LOG_FILE
    command_timeout: int = Field(default=300, gt=0)    # seconds, per qm/pct call
    stop_failure: Literal["warn", "abort"] = "warn"

    vm: GuestPaths = Field(default_factory=_default_vm_paths)
    ct: GuestPaths = Field(default_factory=_default_ct_paths)

    def paths_for(self, kind: GuestKind) -> GuestPaths:
        """Return the layout for a guest kind."""
        return self.vm if kind is GuestKind.VM else self.ct
