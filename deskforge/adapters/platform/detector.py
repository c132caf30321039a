"""
Linux system detector — distribution, desktop and package manager probes.

Read-only. Distribution data comes from the ``distro`` library
(os-release / lsb-release parsing); the desktop comes from the session
environment; the package manager is the first known CLI on PATH.
"""

from __future__ import annotations

import logging
import os
import platform
import shutil
from collections.abc import Callable, Mapping

import distro

from deskforge.adapters.base import SystemDetector
from deskforge.core.context import OperationContext
from deskforge.core.errors import NoDesktopEnvironmentError, NoPackageManagerError
from deskforge.core.models.package import InstallMethod
from deskforge.core.models.system import (
    DesktopEnvironment,
    Distribution,
    PackageManager,
    SystemInfo,
)

logger = logging.getLogger(__name__)

# Substring of the distribution id → family. Checked in order.
_FAMILIES: tuple[tuple[str, str], ...] = (
    ("ubuntu", "debian"),
    ("debian", "debian"),
    ("mint", "debian"),
    ("pop", "debian"),
    ("fedora", "rhel"),
    ("rhel", "rhel"),
    ("centos", "rhel"),
    ("rocky", "rhel"),
    ("alma", "rhel"),
    ("arch", "arch"),
    ("manjaro", "arch"),
    ("endeavouros", "arch"),
    ("opensuse", "suse"),
    ("suse", "suse"),
)

# Probed in order of preference.
_PACKAGE_MANAGERS: tuple[tuple[str, str, InstallMethod], ...] = (
    ("APT", "apt", InstallMethod.APT),
    ("DNF", "dnf", InstallMethod.DNF),
    ("YUM", "yum", InstallMethod.YUM),
    ("Pacman", "pacman", InstallMethod.PACMAN),
    ("Zypper", "zypper", InstallMethod.ZYPPER),
)


def determine_family(distribution_id: str, like: str = "") -> str:
    """Map a distribution id (or its ID_LIKE list) to a family name."""
    for candidate in [distribution_id, *like.split()]:
        lowered = candidate.lower()
        for needle, family in _FAMILIES:
            if needle in lowered:
                return family
    return "unknown"


class LinuxSystemDetector(SystemDetector):
    """SystemDetector for Linux hosts.

    Args:
        environ: Environment mapping (default: ``os.environ``).
        which: PATH lookup (default: ``shutil.which``).
    """

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        which: Callable[[str], str | None] = shutil.which,
    ):
        self._environ = os.environ if environ is None else environ
        self._which = which

    def detect_system(self, ctx: OperationContext) -> SystemInfo:
        """Full snapshot. The desktop is optional; the rest is required."""
        ctx.check()
        distribution = self.detect_distribution(ctx)

        try:
            desktop: DesktopEnvironment | None = self.detect_desktop_environment(ctx)
        except NoDesktopEnvironmentError:
            logger.info("No desktop environment detected")
            desktop = None

        package_manager = self.detect_package_manager(ctx)

        return SystemInfo(
            distribution=distribution,
            desktop_environment=desktop,
            package_manager=package_manager,
            architecture=platform.machine(),
            kernel=platform.release() or "unknown",
        )

    def detect_distribution(self, ctx: OperationContext) -> Distribution:
        ctx.check()
        dist_id = distro.id()
        if not dist_id:
            logger.warning("Could not determine Linux distribution")
            return Distribution(name="Unknown", id="unknown", family="unknown")

        info = Distribution(
            name=distro.name(),
            id=dist_id,
            version=distro.version(),
            codename=distro.codename(),
            family=determine_family(dist_id, distro.like()),
        )
        logger.debug("Detected distribution: %s (%s)", info.id, info.family)
        return info

    def detect_desktop_environment(self, ctx: OperationContext) -> DesktopEnvironment:
        ctx.check()
        current = self._environ.get("XDG_CURRENT_DESKTOP", "")
        if current:
            return DesktopEnvironment(
                name=current,
                session=self._environ.get("XDG_SESSION_DESKTOP", ""),
            )

        session = self._environ.get("DESKTOP_SESSION", "")
        if session:
            return DesktopEnvironment(name=session, session=session)

        raise NoDesktopEnvironmentError()

    def detect_package_manager(self, ctx: OperationContext) -> PackageManager:
        ctx.check()
        for name, command, method in _PACKAGE_MANAGERS:
            if self._which(command):
                return PackageManager(name=name, method=method.value, command=command)
        raise NoPackageManagerError()
