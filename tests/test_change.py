"""
Tests for the change and listing use cases — the end-to-end properties
of a VMID change against a fake node.
"""

import pytest

from vmidctl.adapters.mock import MockAdapter
from vmidctl.adapters.registry import AdapterRegistry
from vmidctl.adapters.shell.filesystem import FilesystemAdapter
from vmidctl.core.models.guest import ChangeRequest, GuestKind
from vmidctl.core.use_cases.change import (
    EXIT_FATAL,
    EXIT_OK,
    EXIT_STEP_FAILED,
    change_vmid,
)
from vmidctl.core.use_cases.listing import list_guests


class TestChangeVmid:
    @pytest.mark.parametrize(
        "kind, old, new",
        [(GuestKind.VM, 100, 900), (GuestKind.CT, 101, 205), (GuestKind.VM, 9999, 100000)],
    )
    def test_config_moves_with_content(self, settings, registry, reporter, write_config, kind, old, new):
        original = write_config(settings, kind, old, f"# guest {old}\ncores: 2\n")
        request = ChangeRequest(kind=kind, old_vmid=old, new_vmid=new)

        result = change_vmid(request, settings, reporter, registry=registry)

        assert result.exit_code == EXIT_OK
        assert not original.exists()
        moved = settings.paths_for(kind).config_path(new)
        assert moved.read_text() == f"# guest {old}\ncores: 2\n"

    def test_container_scenario_without_storage(self, settings, registry, pct, reporter, write_config):
        write_config(settings, GuestKind.CT, 101)
        request = ChangeRequest(kind=GuestKind.CT, old_vmid=101, new_vmid=205)

        result = change_vmid(request, settings, reporter, registry=registry)

        assert result.exit_code == EXIT_OK
        assert not settings.ct.config_path(101).exists()
        assert settings.ct.config_path(205).exists()
        assert reporter.contains("No root filesystem found", "info")
        assert pct.calls == [("stop", 101), ("config", 205), ("start", 205)]
        assert not settings.ct.storage_path(205).exists()

    def test_vm_scenario_missing_config(self, settings, registry, qm, reporter):
        request = ChangeRequest(kind=GuestKind.VM, old_vmid=300, new_vmid=301)

        result = change_vmid(request, settings, reporter, registry=registry)

        assert result.exit_code == EXIT_FATAL
        assert "not found" in result.error
        assert result.report is None
        assert qm.call_count == 0
        assert not settings.vm.config_path(301).exists()
        assert reporter.contains("Configuration file for VM 300 not found", "error")

    def test_storage_moves(self, settings, registry, reporter, write_config):
        write_config(settings, GuestKind.CT, 101)
        rootfs = settings.ct.storage_path(101)
        (rootfs / "rootfs" / "etc").mkdir(parents=True)
        (rootfs / "rootfs" / "etc" / "hostname").write_text("proxy\n")
        request = ChangeRequest(kind=GuestKind.CT, old_vmid=101, new_vmid=205)

        change_vmid(request, settings, reporter, registry=registry)

        assert not rootfs.exists()
        assert (settings.ct.storage_path(205) / "rootfs" / "etc" / "hostname").read_text() == "proxy\n"
        assert reporter.contains("Container root filesystem renamed", "success")

    def test_storage_as_single_file(self, settings, registry, reporter, write_config):
        write_config(settings, GuestKind.VM, 300)
        settings.vm.storage_path(300).write_text("raw image")
        request = ChangeRequest(kind=GuestKind.VM, old_vmid=300, new_vmid=301)

        change_vmid(request, settings, reporter, registry=registry)

        assert settings.vm.storage_path(301).read_text() == "raw image"

    def test_target_taken_is_fatal_before_stop(self, settings, registry, qm, reporter, write_config):
        write_config(settings, GuestKind.VM, 300, "a")
        write_config(settings, GuestKind.VM, 301, "b")
        request = ChangeRequest(kind=GuestKind.VM, old_vmid=300, new_vmid=301)

        result = change_vmid(request, settings, reporter, registry=registry)

        assert result.exit_code == EXIT_FATAL
        assert qm.call_count == 0
        assert settings.vm.config_path(300).read_text() == "a"
        assert settings.vm.config_path(301).read_text() == "b"

    def test_dangling_symlink_target_refused_before_stop(
        self, settings, registry, qm, reporter, write_config
    ):
        write_config(settings, GuestKind.VM, 300)
        settings.vm.config_path(301).symlink_to(settings.vm.config_path(999))
        request = ChangeRequest(kind=GuestKind.VM, old_vmid=300, new_vmid=301)

        result = change_vmid(request, settings, reporter, registry=registry)

        assert result.exit_code == EXIT_FATAL
        assert "already in use" in result.error
        assert result.report is None
        assert qm.call_count == 0
        assert settings.vm.config_path(300).exists()

    def test_step_failure_exit_code(self, settings, registry, qm, reporter, write_config):
        write_config(settings, GuestKind.VM, 300)
        qm.set_failure("start", error="no quorum")
        request = ChangeRequest(kind=GuestKind.VM, old_vmid=300, new_vmid=301)

        result = change_vmid(request, settings, reporter, registry=registry)

        assert result.exit_code == EXIT_STEP_FAILED
        assert result.report.status == "partial"
        assert settings.vm.config_path(301).exists()
        assert reporter.contains("- FAILED: start VM 301 (no quorum).", "summary")

    def test_stop_abort_policy_exit_code(self, settings, registry, qm, reporter, write_config):
        write_config(settings, GuestKind.VM, 300)
        qm.set_failure("stop")
        strict = settings.model_copy(update={"stop_failure": "abort"})
        request = ChangeRequest(kind=GuestKind.VM, old_vmid=300, new_vmid=301)

        result = change_vmid(request, strict, reporter, registry=registry)

        assert result.exit_code == EXIT_FATAL
        assert settings.vm.config_path(300).exists()

    def test_dry_run(self, settings, registry, qm, reporter, write_config):
        write_config(settings, GuestKind.VM, 300)
        request = ChangeRequest(kind=GuestKind.VM, old_vmid=300, new_vmid=301)

        result = change_vmid(request, settings, reporter, registry=registry, dry_run=True)

        assert result.exit_code == EXIT_OK
        assert settings.vm.config_path(300).exists()
        assert qm.call_count == 0
        assert reporter.contains("Dry run complete", "info")


class TestListGuests:
    def test_vm_names(self, settings, registry):
        result = list_guests(GuestKind.VM, settings, registry=registry)
        assert result.error is None
        assert [(g.vmid, g.label) for g in result.guests] == [(100, "web01"), (300, "db01")]

    def test_ct_status(self, settings, registry):
        result = list_guests(GuestKind.CT, settings, registry=registry)
        assert [g.label for g in result.guests] == ["running", "stopped"]

    def test_failure_is_reported_not_raised(self, settings):
        registry = AdapterRegistry()
        broken = MockAdapter(adapter_name="qm")
        broken.set_failure("list", error="permission denied")
        registry.register(broken)
        registry.register(FilesystemAdapter())

        result = list_guests(GuestKind.VM, settings, registry=registry)

        assert result.guests == []
        assert result.error == "permission denied"
        assert result.to_dict()["error"] == "permission denied"
