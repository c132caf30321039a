"""
Tests for adapter ports, registry, mock, and shell command adapters.
"""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from conftest import make_package
from deskforge.adapters import InstallerRegistry, MockInstaller, PackageInstaller, StaticDetector
from deskforge.adapters.shell.command import (
    CommandInstaller,
    error_for_output,
    run_command,
)
from deskforge.core.config.loader import MethodCommands
from deskforge.core.context import OperationContext
from deskforge.core.errors import (
    AlreadyInstalledError,
    CancelledError,
    DeadlineExceededError,
    InsufficientSpaceError,
    NetworkFailureError,
    NoDesktopEnvironmentError,
    NoPackageManagerError,
    NotInstalledError,
    PackageNotFoundError,
    PermissionDeniedError,
    UnsupportedInstallMethodError,
    UnsupportedRemoveMethodError,
)
from deskforge.core.models.package import InstallMethod
from deskforge.core.models.system import SystemInfo

# ── Mock Installer Tests ─────────────────────────────────────────────


class TestMockInstaller:
    def test_default_success(self, ctx):
        mock = MockInstaller(installer_name="test-mock")
        result = mock.install(ctx, make_package("git"))
        assert result.success
        assert mock.call_count == 1
        assert mock.name == "test-mock"

    def test_idempotent_install(self, ctx):
        mock = MockInstaller()
        mock.install(ctx, make_package("git"))
        with pytest.raises(AlreadyInstalledError) as exc_info:
            mock.install(ctx, make_package("git"))
        assert exc_info.value.package == "git"

    def test_remove(self, ctx):
        mock = MockInstaller(installed=[make_package("git")])
        assert mock.remove(ctx, make_package("git")).success
        assert not mock.is_installed(ctx, "git")

    def test_remove_absent(self, ctx):
        with pytest.raises(NotInstalledError):
            MockInstaller().remove(ctx, make_package("git"))

    def test_set_failure(self, ctx):
        mock = MockInstaller()
        mock.set_failure("git", PermissionDeniedError(package="git"))
        with pytest.raises(PermissionDeniedError):
            mock.install(ctx, make_package("git"))
        assert not mock.is_installed(ctx, "git")

    def test_call_log(self, ctx):
        mock = MockInstaller()
        for name in ("a", "b", "c"):
            mock.install(ctx, make_package(name))
        mock.list(ctx)
        assert mock.call_count == 4
        assert mock.call_log[0] == ("install", "a")
        assert mock.call_log[-1] == ("list", "")

    def test_reset(self, ctx):
        mock = MockInstaller()
        mock.set_failure("a", NetworkFailureError())
        mock.install(ctx, make_package("b"))
        mock.reset()
        assert mock.call_count == 0
        assert mock.list(ctx) == []
        assert mock.install(ctx, make_package("a")).success

    def test_cancelled(self):
        ctx = OperationContext()
        ctx.cancel()
        mock = MockInstaller()
        with pytest.raises(CancelledError):
            mock.install(ctx, make_package("git"))
        assert not mock.is_installed(OperationContext(), "git")

    def test_best_method(self):
        assert MockInstaller(default_method=InstallMethod.PACMAN).get_best_method("x") is InstallMethod.PACMAN


class TestStaticDetector:
    def test_default_system(self, ctx):
        detector = StaticDetector()
        info = detector.detect_system(ctx)
        assert info.is_debian_based()
        assert info.is_gnome()
        assert detector.detect_package_manager(ctx).command == "apt"
        assert detector.call_count == 1

    def test_missing_parts(self, ctx):
        detector = StaticDetector(SystemInfo())
        with pytest.raises(NoDesktopEnvironmentError):
            detector.detect_desktop_environment(ctx)
        with pytest.raises(NoPackageManagerError):
            detector.detect_package_manager(ctx)
        assert detector.detect_distribution(ctx).family == "unknown"


# ── Registry Tests ───────────────────────────────────────────────────


class TestInstallerRegistry:
    def test_is_an_installer(self):
        assert isinstance(InstallerRegistry(), PackageInstaller)

    def test_dispatch_by_method(self, ctx):
        apt, flatpak = MockInstaller("apt"), MockInstaller("flatpak")
        registry = InstallerRegistry()
        registry.register(InstallMethod.APT, apt)
        registry.register("flatpak", flatpak)

        registry.install(ctx, make_package("git"))
        registry.install(ctx, make_package("code", method="flatpak"))

        assert apt.call_log == [("install", "git")]
        assert flatpak.call_log == [("install", "code")]

    def test_unknown_method(self, ctx):
        registry = InstallerRegistry()
        with pytest.raises(UnsupportedInstallMethodError) as exc_info:
            registry.install(ctx, make_package("x", method="homebrew"))
        assert exc_info.value.package == "x"
        with pytest.raises(UnsupportedRemoveMethodError):
            registry.remove(ctx, make_package("x", method="homebrew"))

    def test_errors_propagate_unchanged(self, ctx):
        apt = MockInstaller("apt")
        error = NetworkFailureError()
        apt.set_failure("git", error)
        registry = InstallerRegistry()
        registry.register("apt", apt)
        with pytest.raises(NetworkFailureError) as exc_info:
            registry.install(ctx, make_package("git"))
        assert exc_info.value is error

    def test_list_merges_distinct_installers(self, ctx):
        shared = MockInstaller("shared", installed=[make_package("git")])
        other = MockInstaller("other", installed=[make_package("git"), make_package("code")])
        registry = InstallerRegistry()
        registry.register(["apt", "deb"], shared)
        registry.register("flatpak", other)

        assert sorted(p.name for p in registry.list(ctx)) == ["code", "git"]
        assert shared.call_log.count(("list", "")) == 1

    def test_is_installed_any(self, ctx):
        registry = InstallerRegistry()
        registry.register("apt", MockInstaller())
        registry.register("snap", MockInstaller(installed=[make_package("lxd", method="snap")]))
        assert registry.is_installed(ctx, "lxd")
        assert not registry.is_installed(ctx, "git")

    def test_unregister_and_status(self):
        registry = InstallerRegistry()
        registry.register(["apt", "flatpak"], MockInstaller("m"))
        registry.unregister("apt")
        assert registry.methods() == ["flatpak"]
        assert registry.get("apt") is None
        assert registry.status()["flatpak"]["installer"] == "m"

    @pytest.mark.parametrize("source,method", [
        ("https://github.com/cli/cli", InstallMethod.GITHUB),
        ("https://example.com/chrome.deb", InstallMethod.DEB),
        ("https://example.com/tool.rpm", InstallMethod.RPM),
        ("flathub:org.gimp.GIMP", InstallMethod.FLATPAK),
        ("snap:lxd", InstallMethod.SNAP),
        ("htop", InstallMethod.DNF),
    ])
    def test_best_method(self, source, method):
        assert InstallerRegistry(default_method=InstallMethod.DNF).get_best_method(source) is method


# ── Shell Command Tests ──────────────────────────────────────────────


def fake_popen(returncode=0, stdout="", stderr=""):
    proc = MagicMock()
    proc.communicate.return_value = (stdout, stderr)
    proc.returncode = returncode
    return proc


APT = {
    "apt": MethodCommands(
        install="sudo apt-get install -y {source}",
        remove="sudo apt-get remove -y {source}",
        list="dpkg-query -W -f=${binary:Package}\\n",
        check="dpkg -s {source}",
    ),
}


class TestRunCommand:
    @patch("deskforge.adapters.shell.command.subprocess.Popen")
    def test_success(self, mock_popen, ctx):
        mock_popen.return_value = fake_popen(stdout="ok\n")
        outcome = run_command(ctx, ["echo", "ok"])
        assert outcome.ok
        assert outcome.stdout == "ok"
        assert mock_popen.call_args[0][0] == ["echo", "ok"]

    @patch("deskforge.adapters.shell.command.subprocess.Popen")
    def test_missing_executable(self, mock_popen, ctx):
        mock_popen.side_effect = FileNotFoundError("nope")
        with pytest.raises(PackageNotFoundError):
            run_command(ctx, ["nope"])

    @patch("deskforge.adapters.shell.command.subprocess.Popen")
    def test_cancelled_before_start(self, mock_popen):
        ctx = OperationContext()
        ctx.cancel()
        with pytest.raises(CancelledError):
            run_command(ctx, ["sleep", "10"])
        mock_popen.assert_not_called()

    @patch("deskforge.adapters.shell.command.subprocess.Popen")
    def test_timeout_kills_process(self, mock_popen, ctx):
        proc = MagicMock()
        proc.communicate.side_effect = [
            subprocess.TimeoutExpired("sleep", 0.2),
            ("", ""),
        ]
        mock_popen.return_value = proc

        with pytest.raises(DeadlineExceededError) as exc_info:
            run_command(ctx, ["sleep", "10"], default_timeout=0)
        assert "timed out" in str(exc_info.value)
        proc.kill.assert_called_once()

    @patch("deskforge.adapters.shell.command.subprocess.Popen")
    def test_cancel_while_running(self, mock_popen):
        ctx = OperationContext()
        proc = MagicMock()

        def communicate(timeout=None):
            if timeout is None:
                return ("", "")
            ctx.cancel("abort")
            raise subprocess.TimeoutExpired("sleep", timeout)

        proc.communicate.side_effect = communicate
        mock_popen.return_value = proc

        with pytest.raises(CancelledError) as exc_info:
            run_command(ctx, ["sleep", "10"])
        assert not isinstance(exc_info.value, DeadlineExceededError)
        proc.kill.assert_called_once()


class TestErrorForOutput:
    @pytest.mark.parametrize("text,cls", [
        ("E: Could not open lock file (13: Permission denied)", PermissionDeniedError),
        ("Could not resolve host: connection failed", NetworkFailureError),
        ("E: Unable to locate package fooo", PackageNotFoundError),
        ("E: You don't have enough free space in /var/cache/apt/archives/. no space left", InsufficientSpaceError),
    ])
    def test_mapped(self, text, cls):
        err = error_for_output(text, "fooo")
        assert isinstance(err, cls)
        assert err.package == "fooo"

    def test_unrecognised(self):
        assert error_for_output("exit status 100", "fooo") is None


class TestCommandInstaller:
    @patch("deskforge.adapters.shell.command.subprocess.Popen")
    def test_install(self, mock_popen, ctx):
        mock_popen.side_effect = [fake_popen(returncode=1), fake_popen(stdout="done")]
        result = CommandInstaller(APT).install(ctx, make_package("htop"))
        assert result.success
        assert result.output == "done"
        assert mock_popen.call_args_list[0][0][0] == ["dpkg", "-s", "htop"]
        assert mock_popen.call_args_list[1][0][0] == ["sudo", "apt-get", "install", "-y", "htop"]

    @patch("deskforge.adapters.shell.command.subprocess.Popen")
    def test_install_already_installed(self, mock_popen, ctx):
        mock_popen.return_value = fake_popen(returncode=0)
        with pytest.raises(AlreadyInstalledError):
            CommandInstaller(APT).install(ctx, make_package("htop"))
        assert mock_popen.call_count == 1

    @patch("deskforge.adapters.shell.command.subprocess.Popen")
    def test_remove_not_installed(self, mock_popen, ctx):
        mock_popen.return_value = fake_popen(returncode=1)
        with pytest.raises(NotInstalledError):
            CommandInstaller(APT).remove(ctx, make_package("htop"))

    @patch("deskforge.adapters.shell.command.subprocess.Popen")
    def test_install_failure_mapped(self, mock_popen, ctx):
        mock_popen.side_effect = [
            fake_popen(returncode=1),
            fake_popen(returncode=100, stderr="E: Unable to locate package htopp"),
        ]
        with pytest.raises(PackageNotFoundError):
            CommandInstaller(APT).install(ctx, make_package("htopp"))

    @patch("deskforge.adapters.shell.command.subprocess.Popen")
    def test_install_failure_unrecognised(self, mock_popen, ctx):
        mock_popen.side_effect = [
            fake_popen(returncode=1),
            fake_popen(returncode=100, stderr="exit status 100"),
        ]
        result = CommandInstaller(APT).install(ctx, make_package("htop"))
        assert not result.success
        assert result.error == "exit status 100"

    def test_unsupported_method(self, ctx):
        with pytest.raises(UnsupportedInstallMethodError):
            CommandInstaller(APT).install(ctx, make_package("code", method="flatpak"))
        with pytest.raises(UnsupportedRemoveMethodError):
            CommandInstaller(APT).remove(ctx, make_package("code", method="flatpak"))

    @patch("deskforge.adapters.shell.command.subprocess.Popen")
    def test_version_template(self, mock_popen, ctx):
        mock_popen.return_value = fake_popen()
        commands = {"apt": MethodCommands(install="apt-get install -y {source}={version}")}
        pkg = make_package("htop").model_copy(update={"version": "3.3.0-4"})
        CommandInstaller(commands).install(ctx, pkg)
        assert mock_popen.call_args[0][0] == ["apt-get", "install", "-y", "htop=3.3.0-4"]

    @patch("deskforge.adapters.shell.command.subprocess.Popen")
    def test_list(self, mock_popen, ctx):
        mock_popen.return_value = fake_popen(stdout="git\ncurl\n\ngit")
        found = CommandInstaller(APT).list(ctx)
        assert [p.name for p in found] == ["git", "curl"]
        assert all(p.method == "apt" for p in found)

    @patch("deskforge.adapters.shell.command.subprocess.Popen")
    def test_is_installed_by_name(self, mock_popen, ctx):
        mock_popen.return_value = fake_popen(returncode=0)
        assert CommandInstaller(APT).is_installed(ctx, "git")
        assert mock_popen.call_args[0][0] == ["dpkg", "-s", "git"]
