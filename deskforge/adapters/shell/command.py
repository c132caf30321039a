"""
Shell command installer — run configured package-manager commands.

The command lines come from the ``methods:`` section of packages.yml,
one template per operation, e.g.::

    methods:
      apt:
        install: "sudo apt-get install -y {source}"
        remove: "sudo apt-get remove -y {source}"
        list: "dpkg-query -W -f=${binary:Package}\\n"
        check: "dpkg -s {source}"

Templates are formatted with ``{name}``, ``{source}`` and ``{version}``
and split with ``shlex`` (no shell). Recognisable failures are raised as
domain errors; anything else comes back as an unsuccessful
``InstallationResult``.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
import time
from dataclasses import dataclass

from deskforge.adapters.base import PackageInstaller
from deskforge.core.config.loader import MethodCommands
from deskforge.core.context import OperationContext
from deskforge.core.errors import (
    AlreadyInstalledError,
    DeadlineExceededError,
    DependencyMissingError,
    InsufficientSpaceError,
    NetworkFailureError,
    NotInstalledError,
    PackageError,
    PackageNotFoundError,
    PermissionDeniedError,
    UnsupportedInstallMethodError,
    UnsupportedRemoveMethodError,
)
from deskforge.core.models.package import InstallationResult, InstallMethod, Package
from deskforge.core.services.install.domain.error_analysis import classify_error

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 600.0
_POLL_INTERVAL = 0.2

_CATEGORY_ERRORS: dict[str, type[PackageError]] = {
    "permission": PermissionDeniedError,
    "network": NetworkFailureError,
    "not_found": PackageNotFoundError,
    "already_installed": AlreadyInstalledError,
    "not_installed": NotInstalledError,
    "dependency": DependencyMissingError,
}

_NO_SPACE = ("no space left", "not enough free space", "insufficient disk space")


@dataclass
class CommandOutcome:
    """Captured result of one command run."""

    argv: list[str]
    returncode: int
    stdout: str
    stderr: str
    elapsed_ms: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def run_command(
    ctx: OperationContext,
    argv: list[str],
    default_timeout: float = DEFAULT_TIMEOUT,
) -> CommandOutcome:
    """Run ``argv``, killing it if ``ctx`` is cancelled or expires.

    Raises:
        CancelledError / DeadlineExceededError: via ``ctx.check()``.
        PackageNotFoundError: the executable does not exist.
    """
    ctx.check()
    remaining = ctx.remaining()
    timeout = default_timeout if remaining is None else min(remaining, default_timeout)

    logger.debug("Executing: %s (timeout=%.0fs)", shlex.join(argv), timeout)
    start = time.monotonic()
    try:
        proc = subprocess.Popen(
            argv,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except FileNotFoundError as e:
        raise PackageNotFoundError(f"command not found: {argv[0]}") from e

    while True:
        try:
            stdout, stderr = proc.communicate(timeout=_POLL_INTERVAL)
            break
        except subprocess.TimeoutExpired:
            if ctx.done or time.monotonic() - start >= timeout:
                proc.kill()
                proc.communicate()
                logger.warning("Killed %s after %.1fs", argv[0], time.monotonic() - start)
                ctx.check()
                raise DeadlineExceededError(f"command timed out after {timeout:.0f}s")

    elapsed_ms = int((time.monotonic() - start) * 1000)
    return CommandOutcome(argv, proc.returncode, stdout.strip(), stderr.strip(), elapsed_ms)


def error_for_output(text: str, package: str) -> PackageError | None:
    """Map failed-command output to a domain error, if recognisable."""
    lowered = text.lower()
    if any(p in lowered for p in _NO_SPACE):
        return InsufficientSpaceError(text, package=package)
    cls = _CATEGORY_ERRORS.get(classify_error(text))
    return cls(text, package=package) if cls else None


class CommandInstaller(PackageInstaller):
    """Installer driven by command templates, one set per method."""

    def __init__(
        self,
        commands: dict[str, MethodCommands],
        default_method: InstallMethod = InstallMethod.APT,
        default_timeout: float = DEFAULT_TIMEOUT,
    ):
        self._commands = dict(commands)
        self._default_method = default_method
        self._default_timeout = default_timeout

    @property
    def name(self) -> str:
        return "shell"

    @property
    def methods(self) -> list[str]:
        return list(self._commands)

    def _argv(self, template: str, package: Package) -> list[str]:
        return shlex.split(template.format(
            name=package.name,
            source=package.source,
            version=package.version,
        ))

    def _run(self, ctx: OperationContext, template: str, package: Package) -> InstallationResult:
        outcome = run_command(ctx, self._argv(template, package), self._default_timeout)
        if outcome.ok:
            return InstallationResult(
                package=package,
                success=True,
                duration_ms=outcome.elapsed_ms,
                output=outcome.stdout,
            )

        text = outcome.stderr or outcome.stdout
        err = error_for_output(text, package.name)
        if err is not None:
            raise err
        return InstallationResult(
            package=package,
            success=False,
            error=text or f"command exited with code {outcome.returncode}",
            duration_ms=outcome.elapsed_ms,
            output=outcome.stdout,
        )

    def install(self, ctx: OperationContext, package: Package) -> InstallationResult:
        commands = self._commands.get(package.method)
        if commands is None or not commands.install:
            raise UnsupportedInstallMethodError(package.method, package=package.name)
        if commands.check and self.is_installed(ctx, package.name, package=package):
            raise AlreadyInstalledError(package=package.name)
        return self._run(ctx, commands.install, package)

    def remove(self, ctx: OperationContext, package: Package) -> InstallationResult:
        commands = self._commands.get(package.method)
        if commands is None or not commands.remove:
            raise UnsupportedRemoveMethodError(package.method, package=package.name)
        if commands.check and not self.is_installed(ctx, package.name, package=package):
            raise NotInstalledError(package=package.name)
        return self._run(ctx, commands.remove, package)

    def list(self, ctx: OperationContext) -> list[Package]:
        found: dict[str, Package] = {}
        for method, commands in self._commands.items():
            if not commands.list:
                continue
            outcome = run_command(ctx, shlex.split(commands.list), self._default_timeout)
            if not outcome.ok:
                logger.warning("List command for %s failed: %s", method, outcome.stderr)
                continue
            for line in outcome.stdout.splitlines():
                name = line.strip()
                if name and name not in found:
                    found[name] = Package(name=name, method=method, source=name)
        return list(found.values())

    def is_installed(
        self,
        ctx: OperationContext,
        name: str,
        package: Package | None = None,
    ) -> bool:
        """Run the ``check`` template; exit code 0 means installed.

        Without a ``package`` every method with a check template is tried,
        using ``name`` as the source.
        """
        if package is not None:
            candidates = [(package.method, package)]
        else:
            candidates = [
                (method, Package(name=name, method=method, source=name))
                for method in self._commands
            ]
        for method, pkg in candidates:
            commands = self._commands.get(method)
            if commands is None or not commands.check:
                continue
            if run_command(ctx, self._argv(commands.check, pkg), self._default_timeout).ok:
                return True
        return False

    def get_best_method(self, source: str) -> InstallMethod:
        return self._default_method
