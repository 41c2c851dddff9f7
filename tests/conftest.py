"""
Shared test fixtures and configuration.

Every test runs against a fake node laid out under tmp_path, with the
same directory structure a Proxmox VE host has under /.
"""

import logging
from pathlib import Path

import pytest

from vmidctl.adapters.mock import MockAdapter
from vmidctl.adapters.registry import AdapterRegistry
from vmidctl.adapters.shell.filesystem import FilesystemAdapter
from vmidctl.core.models.settings import GuestPaths, Settings
from vmidctl.core.observability.logging_config import OPERATOR_LOGGER, close_operator_log
from vmidctl.core.observability.reporter import MemoryReporter

QM_LIST = """\
      VMID NAME                 STATUS     MEM(MB)    BOOTDISK(GB) PID
       100 web01                running    2048              32.00 1234
       300 db01                 stopped    4096              64.00 0
"""

PCT_LIST = """\
VMID       Status     Lock         Name
101        running                 proxy
102        stopped    backup       cache
"""


@pytest.fixture(autouse=True)
def _detach_operator_log():
    """Never leak an open operator log between tests."""
    yield
    close_operator_log(logging.getLogger(OPERATOR_LOGGER))


@pytest.fixture
def node_root(tmp_path: Path) -> Path:
    """A fake node filesystem with empty config and storage directories."""
    root = tmp_path / "node"
    for sub in (
        "etc/pve/qemu-server",
        "etc/pve/lxc",
        "var/lib/vz/images",
        "var/lib/lxc",
        "var/log",
    ):
        (root / sub).mkdir(parents=True)
    return root


@pytest.fixture
def settings(node_root: Path) -> Settings:
    """Settings pointing at the fake node."""
    return Settings(
        log_file=str(node_root / "var/log/proxmox_vmid_change.log"),
        command_timeout=5,
        vm=GuestPaths(
            command="qm",
            config_dir=str(node_root / "etc/pve/qemu-server"),
            storage_root=str(node_root / "var/lib/vz/images"),
        ),
        ct=GuestPaths(
            command="pct",
            config_dir=str(node_root / "etc/pve/lxc"),
            storage_root=str(node_root / "var/lib/lxc"),
        ),
    )


@pytest.fixture
def qm() -> MockAdapter:
    mock = MockAdapter(adapter_name="qm")
    mock.set_output("list", QM_LIST)
    return mock


@pytest.fixture
def pct() -> MockAdapter:
    mock = MockAdapter(adapter_name="pct")
    mock.set_output("list", PCT_LIST)
    return mock


@pytest.fixture
def registry(qm: MockAdapter, pct: MockAdapter) -> AdapterRegistry:
    """Mocked guest commands, real filesystem."""
    reg = AdapterRegistry(timeout=5)
    reg.register(qm)
    reg.register(pct)
    reg.register(FilesystemAdapter())
    return reg


@pytest.fixture
def reporter() -> MemoryReporter:
    return MemoryReporter()


@pytest.fixture
def write_config():
    """Create ``<vmid>.conf`` for a kind in the fake node."""

    def _write(settings: Settings, kind, vmid: int, content: str = "memory: 2048\n") -> Path:
        path = settings.paths_for(kind).config_path(vmid)
        path.write_text(content)
        return path

    return _write
