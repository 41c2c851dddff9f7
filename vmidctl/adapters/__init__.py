"""Adapters — bindings for qm, pct and the filesystem.

Public re-exports for convenient access.
"""

from vmidctl.adapters.base import Adapter, ExecutionContext
from vmidctl.adapters.mock import MockAdapter
from vmidctl.adapters.pve.guest import GuestToolAdapter, parse_guest_list
from vmidctl.adapters.registry import AdapterRegistry
from vmidctl.adapters.shell.filesystem import FilesystemAdapter
from vmidctl.core.models.settings import Settings


def default_registry(settings: Settings) -> AdapterRegistry:
    """Registry with the real adapters for both guest kinds."""
    registry = AdapterRegistry(timeout=settings.command_timeout)
    registry.register(GuestToolAdapter(settings.vm.command))
    registry.register(GuestToolAdapter(settings.ct.command))
    registry.register(FilesystemAdapter())
    return registry


__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "FilesystemAdapter",
    "GuestToolAdapter",
    "MockAdapter",
    "default_registry",
    "parse_guest_list",
]
