"""
Package service — the façade between callers and the installer port.

The service validates packages and forwards to the injected installer.
It holds no mutable state of its own, so one instance can be shared by
concurrent callers as long as the injected adapters allow it.

It does NOT retry, roll back, or reinterpret errors: whatever the
installer raises reaches the caller with its class intact.
"""

from __future__ import annotations

import logging

from deskforge.adapters.base import PackageInstaller, SystemDetector
from deskforge.core.context import OperationContext
from deskforge.core.errors import InvalidPackageError
from deskforge.core.models.package import (
    InstallationResult,
    InstallMethod,
    Package,
    is_valid_package,
)
from deskforge.core.models.system import SystemInfo

logger = logging.getLogger(__name__)


class PackageService:
    """Core package operations over an installer and a system detector."""

    def __init__(self, installer: PackageInstaller, detector: SystemDetector):
        self._installer = installer
        self._detector = detector

    @property
    def installer(self) -> PackageInstaller:
        return self._installer

    @property
    def detector(self) -> SystemDetector:
        return self._detector

    def _gate(self, ctx: OperationContext, package: Package | None) -> Package:
        ctx.check()
        if package is None:
            logger.debug("Rejected missing package")
            raise InvalidPackageError()
        if not is_valid_package(package):
            logger.debug("Rejected invalid package: %r", package.name)
            raise InvalidPackageError(package=package.name or None)
        return package

    def install(self, ctx: OperationContext, package: Package | None) -> InstallationResult:
        """Install a package.

        Raises:
            CancelledError: ``ctx`` was already cancelled or expired.
            InvalidPackageError: the package failed validation; the
                installer is not called.
            PackageError: anything the installer raises, unchanged.
        """
        pkg = self._gate(ctx, package)
        logger.debug("Install %s (%s:%s)", pkg.name, pkg.method, pkg.source)
        return self._installer.install(ctx, pkg)

    def remove(self, ctx: OperationContext, package: Package | None) -> InstallationResult:
        """Remove a package. Same validation gate as ``install``."""
        pkg = self._gate(ctx, package)
        logger.debug("Remove %s (%s:%s)", pkg.name, pkg.method, pkg.source)
        return self._installer.remove(ctx, pkg)

    def list(self, ctx: OperationContext) -> list[Package]:
        """Installed packages, straight from the installer."""
        ctx.check()
        return self._installer.list(ctx)

    def is_installed(self, ctx: OperationContext, name: str) -> bool:
        ctx.check()
        return self._installer.is_installed(ctx, name)

    def best_method(self, source: str) -> InstallMethod:
        return self._installer.get_best_method(source)

    def system_info(self, ctx: OperationContext) -> SystemInfo:
        ctx.check()
        return self._detector.detect_system(ctx)
