"""
Adapter base — the port contracts between the core and backends.

The core only talks to package managers, system probes and terminals
through these abstract classes, never directly.

Unlike fire-and-forget tooling, installer ports report failure by
raising the domain errors in ``deskforge.core.errors`` so callers can
branch on the category (``AlreadyInstalledError`` etc.).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from deskforge.core.context import OperationContext
from deskforge.core.models.package import InstallationResult, InstallMethod, Package
from deskforge.core.models.system import (
    DesktopEnvironment,
    Distribution,
    PackageManager,
    SystemInfo,
)


class PackageInstaller(ABC):
    """Installs and removes packages through one or more package managers.

    To create a new installer:
        1. Subclass PackageInstaller
        2. Implement install, remove, list, is_installed, get_best_method
        3. Register it in an InstallerRegistry (or use it directly)

    Implementations must check ``ctx`` before starting irreversible work
    and must be idempotent: a second install of the same package raises
    ``AlreadyInstalledError`` instead of repeating the work.
    """

    @property
    def name(self) -> str:
        """Identifier used in logs (e.g. 'apt', 'flatpak', 'mock')."""
        return self.__class__.__name__

    @abstractmethod
    def install(self, ctx: OperationContext, package: Package) -> InstallationResult:
        """Install a package."""

    @abstractmethod
    def remove(self, ctx: OperationContext, package: Package) -> InstallationResult:
        """Remove a package."""

    @abstractmethod
    def list(self, ctx: OperationContext) -> list[Package]:
        """Return installed packages."""

    @abstractmethod
    def is_installed(self, ctx: OperationContext, name: str) -> bool:
        """Check whether a package is installed."""

    @abstractmethod
    def get_best_method(self, source: str) -> InstallMethod:
        """Pick an install method for a source locator."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class SystemDetector(ABC):
    """Read-only probes of the target machine."""

    @abstractmethod
    def detect_system(self, ctx: OperationContext) -> SystemInfo:
        """Full system snapshot."""

    @abstractmethod
    def detect_distribution(self, ctx: OperationContext) -> Distribution:
        """Linux distribution information."""

    @abstractmethod
    def detect_desktop_environment(self, ctx: OperationContext) -> DesktopEnvironment:
        """Desktop environment. Raises ``NoDesktopEnvironmentError``."""

    @abstractmethod
    def detect_package_manager(self, ctx: OperationContext) -> PackageManager:
        """Primary package manager. Raises ``NoPackageManagerError``."""


class OutputPort(ABC):
    """Presents results to a human. Consumed by callers, never the core."""

    @abstractmethod
    def success(self, message: str, data: Any = None) -> None: ...

    @abstractmethod
    def error(self, message: str) -> None: ...

    @abstractmethod
    def info(self, message: str) -> None: ...

    @abstractmethod
    def progress(self, message: str) -> None: ...

    @abstractmethod
    def table(self, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> None: ...

    @abstractmethod
    def is_quiet(self) -> bool: ...
