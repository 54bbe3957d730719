"""Tests for ForgeModule: identity, expected version, status and sync."""

from unittest.mock import MagicMock, call, patch

import pytest

from conftest import FakeCatalog, RecordingInstaller, write_metadata
from exceptions import InvalidIdentityError, ReleaseInstallError, UnresolvableVersionError
from module.forge import ForgeModule
from module.metadata_file import ModuleMetadata
from module.status import ModuleStatus, SyncAction
from versioning.models import LATEST

TITLE = "branan/eight_hundred"


def make_module(moduledir, requested="8.0.0", catalog=None, installer=None):
    return ForgeModule(
        TITLE,
        moduledir,
        requested,
        catalog=catalog or FakeCatalog(),
        installer=installer or RecordingInstaller(),
    )


class TestIdentity:
    """Test title handling."""

    @pytest.mark.parametrize("title", ["branan/eight_hundred", "branan-eight_hundred"])
    def test_implements(self, title):
        assert ForgeModule.implements(title) is True

    @pytest.mark.parametrize("title", ["branan!eight_hundred", "branan", "a/b/c", "/name", "owner/", ""])
    def test_does_not_implement(self, title):
        assert ForgeModule.implements(title) is False

    def test_invalid_title_raises(self, moduledir):
        with pytest.raises(InvalidIdentityError):
            ForgeModule("branan!eight_hundred", moduledir, "8.0.0", catalog=FakeCatalog())

    def test_attributes(self, moduledir):
        module = make_module(moduledir)
        assert module.owner == "branan"
        assert module.name == "eight_hundred"
        assert module.title == TITLE
        assert module.dirname == moduledir
        assert module.path == moduledir / "eight_hundred"


class TestExpectedVersion:
    """Test target version resolution on the module record."""

    def test_explicit_version(self, moduledir):
        assert make_module(moduledir, "8.0.0").expected_version == "8.0.0"

    def test_latest(self, moduledir):
        module = make_module(moduledir, LATEST, catalog=FakeCatalog(latest="8.8.8"))
        assert module.expected_version == "8.8.8"

    def test_installed_version_satisfies_range(self, moduledir):
        write_metadata(moduledir / "eight_hundred", "branan-eight_hundred", "8.1.0")
        module = make_module(moduledir, ">= 8.0.0")
        assert module.expected_version == "8.1.0"

    def test_latest_satisfies_range(self, moduledir):
        write_metadata(moduledir / "eight_hundred", "branan-eight_hundred", "8.0.0")
        module = make_module(moduledir, ">= 8.1.0", catalog=FakeCatalog(latest="8.8.8"))
        assert module.expected_version == "8.8.8"

    def test_lower_version_with_upper_bound(self, moduledir):
        write_metadata(moduledir / "eight_hundred", "branan-eight_hundred", "8.0.0")
        catalog = FakeCatalog(latest="8.2.0", versions=["8.0.0", "8.1.0", "8.1.1", "8.1.2", "8.2.0"])
        module = make_module(moduledir, ">= 8.1.0 < 8.2.0", catalog=catalog)
        assert module.expected_version == "8.1.2"

    def test_resolved_once_per_record(self, moduledir):
        catalog = FakeCatalog(latest="8.8.8")
        module = make_module(moduledir, LATEST, catalog=catalog)
        assert module.expected_version == "8.8.8"
        catalog.latest = "9.0.0"
        assert module.expected_version == "8.8.8"
        assert catalog.latest_calls == 1

    def test_no_request_pins_installed_version(self, moduledir):
        write_metadata(moduledir / "eight_hundred", "branan-eight_hundred", "7.0.0")
        catalog = FakeCatalog(latest="8.8.8")
        module = make_module(moduledir, None, catalog=catalog)
        assert module.expected_version == "7.0.0"
        assert catalog.calls == 0

    def test_no_request_and_nothing_installed_tracks_latest(self, moduledir):
        module = make_module(moduledir, None, catalog=FakeCatalog(latest="8.8.8"))
        assert module.requested is LATEST
        assert module.expected_version == "8.8.8"

    def test_foreign_module_version_is_not_the_installed_version(self, moduledir):
        write_metadata(moduledir / "eight_hundred", "blargh-blargh", "1.0.0")
        installer = RecordingInstaller()
        module = make_module(
            moduledir, "1.x", catalog=FakeCatalog(latest="1.9.0", versions=["1.0.0", "1.9.0"]), installer=installer
        )
        assert module.status() is ModuleStatus.MISMATCHED
        assert module.expected_version == "1.9.0"
        assert module.sync() is SyncAction.REINSTALL
        assert installer.calls[0][1] == "1.9.0"

    def test_no_request_ignores_foreign_module_version(self, moduledir):
        write_metadata(moduledir / "eight_hundred", "blargh-blargh", "7.0.0")
        module = make_module(moduledir, None, catalog=FakeCatalog(latest="8.8.8"))
        assert module.requested is LATEST
        assert module.expected_version == "8.8.8"

    def test_malformed_foreign_version_does_not_break_resolution(self, moduledir):
        write_metadata(moduledir / "eight_hundred", "blargh-blargh", "banana")
        module = make_module(moduledir, "8.x", catalog=FakeCatalog(latest="8.8.8"))
        assert module.status() is ModuleStatus.MISMATCHED
        assert module.properties() == {"expected": "8.8.8", "actual": "banana", "type": "forge"}


class TestProperties:
    """Test the properties summary."""

    def test_properties(self, moduledir):
        write_metadata(moduledir / "eight_hundred", "branan-eight_hundred", "0.8.0")
        assert make_module(moduledir).properties() == {
            "expected": "8.0.0",
            "actual": "0.8.0",
            "type": "forge",
        }

    def test_actual_is_none_when_absent(self, moduledir):
        assert make_module(moduledir).properties()["actual"] is None


class TestStatus:
    """Test status against a real directory."""

    def test_absent(self, moduledir):
        catalog = FakeCatalog()
        module = make_module(moduledir, LATEST, catalog=catalog)
        assert module.status() is ModuleStatus.ABSENT
        assert catalog.calls == 0

    def test_mismatched_without_metadata(self, moduledir):
        (moduledir / "eight_hundred").mkdir()
        assert make_module(moduledir).status() is ModuleStatus.MISMATCHED

    def test_mismatched_with_unparseable_metadata(self, moduledir):
        path = moduledir / "eight_hundred"
        path.mkdir()
        (path / "metadata.json").write_text("{not json", encoding="utf-8")
        assert make_module(moduledir).status() is ModuleStatus.MISMATCHED

    def test_mismatched_author(self, moduledir):
        write_metadata(moduledir / "eight_hundred", "blargh-blargh", "8.0.0")
        assert make_module(moduledir).status() is ModuleStatus.MISMATCHED

    def test_outdated(self, moduledir):
        write_metadata(moduledir / "eight_hundred", "branan-eight_hundred", "7.0.0")
        assert make_module(moduledir).status() is ModuleStatus.OUTDATED

    def test_insync(self, moduledir):
        write_metadata(moduledir / "eight_hundred", "branan-eight_hundred", "8.0.0")
        module = make_module(moduledir)
        assert module.status() is ModuleStatus.INSYNC
        assert module.insync() is True

    def test_read_only_metadata_store(self, moduledir):
        (moduledir / "eight_hundred").mkdir()
        store = MagicMock(spec=["read"])
        store.read.return_value = ModuleMetadata(full_module_name="branan-eight_hundred", version="8.0.0")
        module = ForgeModule(TITLE, moduledir, "8.0.0", catalog=FakeCatalog(), metadata=store)
        assert module.status() is ModuleStatus.INSYNC
        assert module.properties()["actual"] == "8.0.0"

    def test_status_is_recomputed(self, moduledir):
        module = make_module(moduledir)
        assert module.status() is ModuleStatus.ABSENT
        write_metadata(moduledir / "eight_hundred", "branan-eight_hundred", "8.0.0")
        assert module.status() is ModuleStatus.INSYNC


class TestSyncDispatch:
    """Test that sync() dispatches on status."""

    @pytest.mark.parametrize(
        "status,method,action",
        [
            (ModuleStatus.ABSENT, "install", SyncAction.INSTALL),
            (ModuleStatus.OUTDATED, "upgrade", SyncAction.UPGRADE),
            (ModuleStatus.MISMATCHED, "reinstall", SyncAction.REINSTALL),
        ],
    )
    def test_dispatch(self, moduledir, status, method, action):
        module = make_module(moduledir)
        with patch.object(module, "status", return_value=status), \
                patch.object(module, method) as target:
            assert module.sync() is action
        target.assert_called_once_with()

    def test_insync_does_nothing(self, moduledir):
        module = make_module(moduledir)
        with patch.object(module, "status", return_value=ModuleStatus.INSYNC), \
                patch.object(module, "install") as install, \
                patch.object(module, "upgrade") as upgrade, \
                patch.object(module, "reinstall") as reinstall:
            assert module.sync() is SyncAction.NOOP
        install.assert_not_called()
        upgrade.assert_not_called()
        reinstall.assert_not_called()

    def test_mismatched_uninstalls_then_installs_once(self, moduledir):
        (moduledir / "eight_hundred").mkdir()
        module = make_module(moduledir)
        manager = MagicMock()
        with patch.object(module, "uninstall", manager.uninstall), \
                patch.object(module, "install", manager.install):
            assert module.sync() is SyncAction.REINSTALL
        assert manager.mock_calls == [call.uninstall(), call.install()]


class TestSyncEndToEnd:
    """Sync against a real directory with a recording installer."""

    def test_absent_installs(self, moduledir):
        installer = RecordingInstaller()
        module = make_module(moduledir, installer=installer)
        assert module.sync() is SyncAction.INSTALL
        assert installer.calls == [(TITLE, "8.0.0", moduledir / "eight_hundred", False)]
        assert module.insync()

    def test_install_creates_missing_parent(self, tmp_path):
        installer = RecordingInstaller()
        module = make_module(tmp_path / "deep" / "modules", installer=installer)
        module.install()
        assert (tmp_path / "deep" / "modules" / "eight_hundred" / "metadata.json").is_file()

    def test_outdated_upgrades_in_place(self, moduledir):
        write_metadata(moduledir / "eight_hundred", "branan-eight_hundred", "7.0.0")
        installer = RecordingInstaller()
        module = make_module(moduledir, installer=installer)
        assert module.sync() is SyncAction.UPGRADE
        assert installer.calls[0][3] is True
        assert module.current_version == "8.0.0"

    def test_mismatched_removes_foreign_module(self, moduledir):
        path = moduledir / "eight_hundred"
        write_metadata(path, "blargh-blargh", "1.0.0")
        (path / "stray.txt").write_text("x", encoding="utf-8")
        installer = RecordingInstaller()
        module = make_module(moduledir, installer=installer)
        assert module.sync() is SyncAction.REINSTALL
        assert installer.calls[0][3] is False
        assert not (path / "stray.txt").exists()
        assert module.status() is ModuleStatus.INSYNC

    def test_insync_is_noop(self, moduledir):
        write_metadata(moduledir / "eight_hundred", "branan-eight_hundred", "8.0.0")
        installer = RecordingInstaller()
        assert make_module(moduledir, installer=installer).sync() is SyncAction.NOOP
        assert installer.calls == []

    def test_installer_failure_propagates(self, moduledir):
        installer = RecordingInstaller(fail_with=ReleaseInstallError("boom"))
        with pytest.raises(ReleaseInstallError):
            make_module(moduledir, installer=installer).sync()

    def test_unresolvable_install_raises(self, moduledir):
        catalog = FakeCatalog(latest="3.0.0", versions=["3.0.0"])
        installer = RecordingInstaller()
        module = make_module(moduledir, "2.x", catalog=catalog, installer=installer)
        with pytest.raises(UnresolvableVersionError):
            module.sync()
        assert installer.calls == []

    def test_unresolvable_but_present_is_left_alone(self, moduledir):
        write_metadata(moduledir / "eight_hundred", "branan-eight_hundred", "1.0.0")
        installer = RecordingInstaller()
        module = make_module(moduledir, "not a constraint", installer=installer)
        assert module.sync() is SyncAction.NOOP
        assert module.expected_version is None


class TestUninstall:
    """Test removal of the module directory."""

    def test_removes_tree(self, moduledir):
        path = moduledir / "eight_hundred"
        write_metadata(path, "branan-eight_hundred", "8.0.0")
        (path / "manifests").mkdir()
        (path / "manifests" / "init.pp").write_text("class x {}", encoding="utf-8")
        make_module(moduledir).uninstall()
        assert not path.exists()

    def test_missing_path_is_success(self, moduledir):
        module = make_module(moduledir)
        module.uninstall()
        module.uninstall()
        assert not module.path.exists()

    def test_removes_plain_file(self, moduledir):
        (moduledir / "eight_hundred").write_text("oops", encoding="utf-8")
        make_module(moduledir).uninstall()
        assert not (moduledir / "eight_hundred").exists()

    def test_reinstall_order(self, moduledir):
        module = make_module(moduledir)
        manager = MagicMock()
        with patch.object(module, "uninstall", manager.uninstall), \
                patch.object(module, "install", manager.install):
            module.reinstall()
        assert manager.mock_calls == [call.uninstall(), call.install()]
