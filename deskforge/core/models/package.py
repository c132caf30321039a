"""
Package model — one installable unit and its validity rule.

Packages are declared in packages.yml (or built by the CLI) and are
never mutated afterwards. The service and the dependency graph only
read them.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InstallMethod(str, Enum):
    """Install mechanisms known to the core."""

    APT = "apt"
    DNF = "dnf"              # Fedora
    YUM = "yum"              # RHEL/CentOS
    PACMAN = "pacman"        # Arch
    ZYPPER = "zypper"        # openSUSE
    SNAP = "snap"
    FLATPAK = "flatpak"
    GITHUB = "github"
    GITHUB_BINARY = "github-binary"
    GITHUB_BUNDLE = "github-bundle"
    GITHUB_JAVA = "github-java"
    DEB = "deb"
    RPM = "rpm"
    SCRIPT = "script"
    BINARY = "binary"
    AQUA = "aqua"
    MISE = "mise"


class Package(BaseModel):
    """A software package to be installed.

    ``method`` is a plain string so that malformed input can still be
    represented and rejected by the service; well-formed values are
    ``InstallMethod`` members. An empty ``version`` means "latest".
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    group: str = ""
    description: str = ""
    method: str = ""
    source: str = ""
    version: str = ""
    dependencies: tuple[str, ...] = Field(default_factory=tuple)

    @field_validator("method", mode="before")
    @classmethod
    def _method_value(cls, v: Any) -> Any:
        if isinstance(v, Enum):
            return v.value
        return v

    @field_validator("dependencies", mode="before")
    @classmethod
    def _no_dependencies(cls, v: Any) -> Any:
        return () if v is None else v

    def is_valid(self) -> bool:
        """Name, method and source must be non-blank."""
        return bool(
            self.name.strip()
            and self.method.strip()
            and self.source.strip()
        )

    @property
    def install_method(self) -> InstallMethod | None:
        """The method as an enum member, or None for unknown values."""
        try:
            return InstallMethod(self.method.strip())
        except ValueError:
            return None

    @property
    def display_version(self) -> str:
        return self.version or "latest"


def is_valid_package(package: Package | None) -> bool:
    """Validity gate used by the service. ``None`` is never valid."""
    return package is not None and package.is_valid()


class InstallationResult(BaseModel):
    """Outcome of one adapter call. Produced by adapters, forwarded as-is."""

    package: Package
    success: bool = False
    error: str | None = None
    duration_ms: int = 0
    output: str = ""
