"""Adapters — backends behind the core's ports.

Public re-exports for convenient access.
"""

from deskforge.adapters.base import OutputPort, PackageInstaller, SystemDetector
from deskforge.adapters.mock import MockInstaller, StaticDetector
from deskforge.adapters.registry import InstallerRegistry

__all__ = [
    "InstallerRegistry",
    "MockInstaller",
    "OutputPort",
    "PackageInstaller",
    "StaticDetector",
    "SystemDetector",
]
