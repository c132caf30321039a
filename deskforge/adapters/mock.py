"""
Mock adapters — in-memory test doubles for the installer and detector.

Used by tests and by ``deskforge --mock`` to exercise the full flow
without touching the machine. Configurable to fail specific packages.
"""

from __future__ import annotations

import threading
import time

from deskforge.adapters.base import PackageInstaller, SystemDetector
from deskforge.core.context import OperationContext
from deskforge.core.errors import (
    AlreadyInstalledError,
    NoDesktopEnvironmentError,
    NoPackageManagerError,
    NotInstalledError,
    PackageError,
)
from deskforge.core.models.package import InstallationResult, InstallMethod, Package
from deskforge.core.models.system import (
    DesktopEnvironment,
    Distribution,
    PackageManager,
    SystemInfo,
)


class MockInstaller(PackageInstaller):
    """Universal mock installer.

    By default every install succeeds once; a repeat raises
    ``AlreadyInstalledError`` and removing an absent package raises
    ``NotInstalledError``. Thread-safe, so concurrent callers see
    exactly one success per package.
    """

    def __init__(
        self,
        installer_name: str = "mock",
        installed: list[Package] | None = None,
        default_method: InstallMethod = InstallMethod.APT,
        delay: float = 0.0,
    ):
        self._name = installer_name
        self._default_method = default_method
        self._delay = delay
        self._lock = threading.Lock()
        self._installed: dict[str, Package] = {p.name: p for p in installed or []}
        self._failures: dict[str, PackageError] = {}
        self._call_log: list[tuple[str, str]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[tuple[str, str]]:
        """``(operation, package_name)`` for every call received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def set_failure(self, package_name: str, error: PackageError) -> None:
        """Make every operation on ``package_name`` raise ``error``."""
        self._failures[package_name] = error

    def _record(self, operation: str, name: str) -> None:
        with self._lock:
            self._call_log.append((operation, name))

    def install(self, ctx: OperationContext, package: Package) -> InstallationResult:
        self._record("install", package.name)
        ctx.check()
        if package.name in self._failures:
            raise self._failures[package.name]

        start = time.monotonic()
        if self._delay:
            ctx.wait(self._delay)
            ctx.check()

        with self._lock:
            if package.name in self._installed:
                raise AlreadyInstalledError(package=package.name)
            self._installed[package.name] = package

        return InstallationResult(
            package=package,
            success=True,
            duration_ms=int((time.monotonic() - start) * 1000),
            output=f"[mock] installed {package.name}",
        )

    def remove(self, ctx: OperationContext, package: Package) -> InstallationResult:
        self._record("remove", package.name)
        ctx.check()
        if package.name in self._failures:
            raise self._failures[package.name]

        with self._lock:
            if self._installed.pop(package.name, None) is None:
                raise NotInstalledError(package=package.name)

        return InstallationResult(
            package=package,
            success=True,
            output=f"[mock] removed {package.name}",
        )

    def list(self, ctx: OperationContext) -> list[Package]:
        self._record("list", "")
        ctx.check()
        with self._lock:
            return list(self._installed.values())

    def is_installed(self, ctx: OperationContext, name: str) -> bool:
        self._record("is_installed", name)
        ctx.check()
        with self._lock:
            return name in self._installed

    def get_best_method(self, source: str) -> InstallMethod:
        return self._default_method

    def reset(self) -> None:
        """Clear call log, failures and installed state."""
        with self._lock:
            self._call_log.clear()
            self._failures.clear()
            self._installed.clear()


def default_system() -> SystemInfo:
    """An Ubuntu/GNOME machine with apt."""
    return SystemInfo(
        distribution=Distribution(
            name="Ubuntu", id="ubuntu", version="24.04", codename="noble", family="debian",
        ),
        desktop_environment=DesktopEnvironment(name="GNOME", session="ubuntu"),
        package_manager=PackageManager(name="APT", method="apt", command="apt"),
        architecture="x86_64",
        kernel="6.8.0-mock",
    )


class StaticDetector(SystemDetector):
    """Detector returning a fixed ``SystemInfo``."""

    def __init__(self, system: SystemInfo | None = None):
        self._system = system if system is not None else default_system()
        self.call_count = 0

    def detect_system(self, ctx: OperationContext) -> SystemInfo:
        self.call_count += 1
        ctx.check()
        return self._system

    def detect_distribution(self, ctx: OperationContext) -> Distribution:
        ctx.check()
        return self._system.distribution or Distribution(
            name="Unknown", id="unknown", family="unknown",
        )

    def detect_desktop_environment(self, ctx: OperationContext) -> DesktopEnvironment:
        ctx.check()
        if self._system.desktop_environment is None:
            raise NoDesktopEnvironmentError()
        return self._system.desktop_environment

    def detect_package_manager(self, ctx: OperationContext) -> PackageManager:
        ctx.check()
        if self._system.package_manager is None:
            raise NoPackageManagerError()
        return self._system.package_manager
