"""
Domain models — Pydantic types for packages and target systems.

All models are re-exported here for convenient access:

    from deskforge.core.models import Package, InstallMethod, SystemInfo
"""

from deskforge.core.models.package import (
    InstallationResult,
    InstallMethod,
    Package,
    is_valid_package,
)
from deskforge.core.models.results import BatchResult
from deskforge.core.models.system import (
    DesktopEnvironment,
    Distribution,
    PackageManager,
    SystemInfo,
)

__all__ = [
    # results.py
    "BatchResult",
    # system.py
    "DesktopEnvironment",
    "Distribution",
    # package.py
    "InstallMethod",
    "InstallationResult",
    "Package",
    "PackageManager",
    "SystemInfo",
    "is_valid_package",
]
