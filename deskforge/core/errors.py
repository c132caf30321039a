"""
Domain errors — the sentinel taxonomy for package operations.

Every failure the core or an adapter can report is a subclass of
``PackageError`` tagged with an ``ErrorKind``. Callers test the
category with ``isinstance`` (or ``err.kind``) no matter how many
layers the error crossed:

    try:
        service.install(ctx, pkg)
    except AlreadyInstalledError:
        ...

Context such as the offending package name is attached as attributes.
The class is never swapped for a generic one on the way up.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure categories."""

    INVALID_PACKAGE = "invalid_package"
    PACKAGE_NOT_FOUND = "package_not_found"
    UNSUPPORTED_INSTALL_METHOD = "unsupported_install_method"
    UNSUPPORTED_REMOVE_METHOD = "unsupported_remove_method"
    INSUFFICIENT_SPACE = "insufficient_space"
    NETWORK_FAILURE = "network_failure"
    PERMISSION_DENIED = "permission_denied"
    ALREADY_INSTALLED = "already_installed"
    NOT_INSTALLED = "not_installed"
    DEPENDENCY_MISSING = "dependency_missing"
    CIRCULAR_DEPENDENCY = "circular_dependency"
    NO_PACKAGE_MANAGER = "no_package_manager"
    NO_DESKTOP_ENVIRONMENT = "no_desktop_environment"
    CANCELLED = "cancelled"
    DEADLINE_EXCEEDED = "deadline_exceeded"


class PackageError(Exception):
    """Base class for all domain failures.

    Args:
        detail: Extra text appended to the category message.
        package: Name of the package the failure concerns, if any.
    """

    kind: ErrorKind
    default_message: str = "package operation failed"

    def __init__(self, detail: str = "", *, package: str | None = None):
        self.detail = detail
        self.package = package
        message = self.default_message
        if package:
            message = f"{message}: {package}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)

    def to_dict(self) -> dict[str, str | None]:
        return {
            "kind": self.kind.value,
            "message": str(self),
            "package": self.package,
        }


class InvalidPackageError(PackageError):
    kind = ErrorKind.INVALID_PACKAGE
    default_message = "invalid package"


class PackageNotFoundError(PackageError):
    kind = ErrorKind.PACKAGE_NOT_FOUND
    default_message = "package not found"


class UnsupportedInstallMethodError(PackageError):
    kind = ErrorKind.UNSUPPORTED_INSTALL_METHOD
    default_message = "unsupported installation method"


class UnsupportedRemoveMethodError(PackageError):
    kind = ErrorKind.UNSUPPORTED_REMOVE_METHOD
    default_message = "unsupported removal method"


class InsufficientSpaceError(PackageError):
    kind = ErrorKind.INSUFFICIENT_SPACE
    default_message = "insufficient disk space"


class NetworkFailureError(PackageError):
    kind = ErrorKind.NETWORK_FAILURE
    default_message = "network failure"


class PermissionDeniedError(PackageError):
    kind = ErrorKind.PERMISSION_DENIED
    default_message = "permission denied"


class AlreadyInstalledError(PackageError):
    kind = ErrorKind.ALREADY_INSTALLED
    default_message = "already installed"


class NotInstalledError(PackageError):
    kind = ErrorKind.NOT_INSTALLED
    default_message = "not installed"


class DependencyMissingError(PackageError):
    kind = ErrorKind.DEPENDENCY_MISSING
    default_message = "dependency missing"


class CircularDependencyError(PackageError):
    """Raised by graph resolution. ``cycle`` holds the closed cycle path."""

    kind = ErrorKind.CIRCULAR_DEPENDENCY
    default_message = "circular dependency detected"

    def __init__(self, cycle: list[str] | tuple[str, ...] = ()):
        self.cycle = list(cycle)
        super().__init__(" -> ".join(self.cycle))

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["cycle"] = self.cycle
        return data


class NoPackageManagerError(PackageError):
    kind = ErrorKind.NO_PACKAGE_MANAGER
    default_message = "no supported package manager found"


class NoDesktopEnvironmentError(PackageError):
    kind = ErrorKind.NO_DESKTOP_ENVIRONMENT
    default_message = "no desktop environment detected"


class CancelledError(PackageError):
    """The caller's operation context was cancelled."""

    kind = ErrorKind.CANCELLED
    default_message = "operation cancelled"


class DeadlineExceededError(CancelledError):
    kind = ErrorKind.DEADLINE_EXCEEDED
    default_message = "deadline exceeded"
