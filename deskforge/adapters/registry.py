"""
Installer registry — dispatch packages to per-method installers.

The registry is itself a ``PackageInstaller``: the service talks to it
as a single port, and it forwards each package to the installer
registered for the package's method. Errors from the chosen installer
propagate unchanged.
"""

from __future__ import annotations

import logging
from typing import Any

from deskforge.adapters.base import PackageInstaller
from deskforge.core.context import OperationContext
from deskforge.core.errors import (
    UnsupportedInstallMethodError,
    UnsupportedRemoveMethodError,
)
from deskforge.core.models.package import InstallationResult, InstallMethod, Package

logger = logging.getLogger(__name__)


class InstallerRegistry(PackageInstaller):
    """Central registry and dispatcher for installers.

    Features:
        - Register installers for one or more install methods
        - Route install/remove by ``package.method``
        - Merge ``list`` output across distinct installers
        - Guess a method for a bare source locator
    """

    def __init__(self, default_method: InstallMethod = InstallMethod.APT):
        self._installers: dict[str, PackageInstaller] = {}
        self._default_method = default_method

    @property
    def name(self) -> str:
        return "registry"

    @property
    def default_method(self) -> InstallMethod:
        return self._default_method

    def register(
        self,
        methods: list[InstallMethod | str] | InstallMethod | str,
        installer: PackageInstaller,
    ) -> None:
        """Register ``installer`` for one or more methods."""
        if isinstance(methods, (str, InstallMethod)):
            methods = [methods]
        for method in methods:
            key = _key(method)
            if key in self._installers:
                logger.warning("Overwriting installer for method: %s", key)
            self._installers[key] = installer
            logger.debug("Registered installer %s for method %s", installer.name, key)

    def unregister(self, method: InstallMethod | str) -> None:
        self._installers.pop(_key(method), None)

    def get(self, method: InstallMethod | str) -> PackageInstaller | None:
        return self._installers.get(_key(method))

    def methods(self) -> list[str]:
        """All registered method names."""
        return list(self._installers.keys())

    def status(self) -> dict[str, dict[str, Any]]:
        return {
            method: {"method": method, "installer": inst.name, "type": inst.__class__.__name__}
            for method, inst in self._installers.items()
        }

    def _distinct(self) -> list[PackageInstaller]:
        seen: list[PackageInstaller] = []
        for inst in self._installers.values():
            if not any(inst is s for s in seen):
                seen.append(inst)
        return seen

    # ── PackageInstaller ─────────────────────────────────────────

    def install(self, ctx: OperationContext, package: Package) -> InstallationResult:
        installer = self.get(package.method)
        if installer is None:
            raise UnsupportedInstallMethodError(package.method, package=package.name)
        logger.info("Installing %s via %s", package.name, installer.name)
        return installer.install(ctx, package)

    def remove(self, ctx: OperationContext, package: Package) -> InstallationResult:
        installer = self.get(package.method)
        if installer is None:
            raise UnsupportedRemoveMethodError(package.method, package=package.name)
        logger.info("Removing %s via %s", package.name, installer.name)
        return installer.remove(ctx, package)

    def list(self, ctx: OperationContext) -> list[Package]:
        merged: dict[str, Package] = {}
        for installer in self._distinct():
            ctx.check()
            for pkg in installer.list(ctx):
                merged.setdefault(pkg.name, pkg)
        return list(merged.values())

    def is_installed(self, ctx: OperationContext, name: str) -> bool:
        for installer in self._distinct():
            ctx.check()
            if installer.is_installed(ctx, name):
                return True
        return False

    def get_best_method(self, source: str) -> InstallMethod:
        """Guess a method from the shape of a source locator."""
        if "github.com" in source:
            return InstallMethod.GITHUB
        if source.endswith(".deb"):
            return InstallMethod.DEB
        if source.endswith(".rpm"):
            return InstallMethod.RPM
        if "flatpak" in source or "flathub" in source:
            return InstallMethod.FLATPAK
        if "snap" in source:
            return InstallMethod.SNAP
        return self._default_method


def _key(method: InstallMethod | str) -> str:
    if isinstance(method, InstallMethod):
        return method.value
    return str(method).strip()
