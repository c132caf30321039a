"""
L1 Domain — Install method compatibility and ranking (pure).

Decides which install methods can run on a machine and which one to
prefer. Lower priority values are preferred.
No I/O, no subprocess.
"""

from __future__ import annotations

from collections.abc import Iterable

from deskforge.core.models.package import InstallMethod
from deskforge.core.models.system import SystemInfo

UNKNOWN_PRIORITY = 999

# Work on any distribution.
UNIVERSAL_METHODS = frozenset({
    InstallMethod.SNAP,
    InstallMethod.FLATPAK,
    InstallMethod.BINARY,
    InstallMethod.SCRIPT,
})

_PRIORITIES: dict[InstallMethod, int] = {
    # Native package managers
    InstallMethod.APT: 1,
    InstallMethod.DNF: 1,
    InstallMethod.PACMAN: 1,
    InstallMethod.ZYPPER: 1,
    InstallMethod.YUM: 2,        # legacy, behind DNF
    # Containerized stores
    InstallMethod.FLATPAK: 3,
    InstallMethod.SNAP: 4,
    # Package files
    InstallMethod.DEB: 5,
    InstallMethod.RPM: 5,
    # Script / binary
    InstallMethod.SCRIPT: 6,
    InstallMethod.BINARY: 6,
}


def _coerce(method: InstallMethod | str) -> InstallMethod | None:
    try:
        return InstallMethod(method)
    except ValueError:
        return None


def is_method_compatible(method: InstallMethod | str, info: SystemInfo) -> bool:
    """Whether ``method`` can run on the described machine.

    Universal methods are always compatible. Native methods need a
    matching distribution; without a distribution record nothing but
    the universal methods is compatible.
    """
    m = _coerce(method)
    if m in UNIVERSAL_METHODS:
        return True

    distro = info.distribution
    if distro is None or m is None:
        return False

    if m is InstallMethod.APT:
        return distro.family == "debian"
    if m is InstallMethod.DNF:
        major = distro.major_version
        return distro.id == "fedora" or (
            distro.family == "rhel" and major is not None and major >= 8
        )
    if m is InstallMethod.YUM:
        return distro.family == "rhel"
    if m is InstallMethod.PACMAN:
        return distro.family == "arch"
    if m is InstallMethod.ZYPPER:
        return distro.family == "suse"
    return False


def get_method_priority(
    method: InstallMethod | str,
    info: SystemInfo | None = None,
) -> int:
    """Rank of ``method`` on the machine (lower = preferred).

    Immutable systems prefer Flatpak over everything else. Unknown
    methods get ``UNKNOWN_PRIORITY``.
    """
    m = _coerce(method)
    if m is InstallMethod.FLATPAK and info is not None and info.is_immutable():
        return 0
    if m is None:
        return UNKNOWN_PRIORITY
    return _PRIORITIES.get(m, UNKNOWN_PRIORITY)


def rank_methods(
    methods: Iterable[InstallMethod | str],
    info: SystemInfo,
) -> list[InstallMethod]:
    """Compatible methods, best first. Ties keep their input order."""
    candidates: list[InstallMethod] = []
    for method in methods:
        m = _coerce(method)
        if m is not None and m not in candidates and is_method_compatible(m, info):
            candidates.append(m)
    return sorted(candidates, key=lambda m: get_method_priority(m, info))


def best_method(
    methods: Iterable[InstallMethod | str],
    info: SystemInfo,
) -> InstallMethod | None:
    """The preferred compatible method, or None."""
    ranked = rank_methods(methods, info)
    return ranked[0] if ranked else None
