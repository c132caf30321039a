"""
System models — read-only snapshots of the target machine.

Populated by a ``SystemDetector`` adapter. The core only reads the
identifying fields (distribution id/family, desktop name).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Distribution(BaseModel):
    """A Linux distribution."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    id: str = ""
    version: str = ""
    codename: str = ""
    family: str = ""             # debian, rhel, arch, suse, unknown

    @property
    def major_version(self) -> int | None:
        """Leading integer of ``version`` ("8.6" -> 8), if any."""
        digits = ""
        for ch in self.version.strip():
            if not ch.isdigit():
                break
            digits += ch
        return int(digits) if digits else None


class DesktopEnvironment(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    session: str = ""
    version: str = ""


class PackageManager(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    method: str = ""             # InstallMethod value
    command: str = ""


# Distribution ids with a read-only base system.
IMMUTABLE_DISTRIBUTION_IDS = frozenset({"fedora-silverblue"})


class SystemInfo(BaseModel):
    """Everything the core may ask about the target machine."""

    model_config = ConfigDict(frozen=True)

    distribution: Distribution | None = None
    desktop_environment: DesktopEnvironment | None = None
    package_manager: PackageManager | None = None
    architecture: str = ""
    kernel: str = ""

    def is_debian_based(self) -> bool:
        d = self.distribution
        return d is not None and (d.id == "ubuntu" or d.family == "debian")

    def is_fedora(self) -> bool:
        d = self.distribution
        return d is not None and (d.id == "fedora" or d.family == "rhel")

    def is_arch(self) -> bool:
        d = self.distribution
        return d is not None and (d.id == "arch" or d.family == "arch")

    def is_gnome(self) -> bool:
        de = self.desktop_environment
        return de is not None and "GNOME" in de.name.upper().split(":")

    def is_immutable(self) -> bool:
        d = self.distribution
        return d is not None and d.id in IMMUTABLE_DISTRIBUTION_IDS
