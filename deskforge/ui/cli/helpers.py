"""
Shared CLI helpers — manifest loading, service wiring, error exits.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import NoReturn

import click

from deskforge.adapters.base import PackageInstaller, SystemDetector
from deskforge.adapters.mock import MockInstaller, StaticDetector
from deskforge.adapters.platform.detector import LinuxSystemDetector
from deskforge.adapters.registry import InstallerRegistry
from deskforge.adapters.shell.command import CommandInstaller
from deskforge.core.config.loader import ConfigError, Manifest, load_manifest
from deskforge.core.context import OperationContext
from deskforge.core.errors import CircularDependencyError, PackageError
from deskforge.core.services.install.domain.dag import DependencyGraph
from deskforge.core.services.install.domain.error_analysis import format_error_message
from deskforge.core.services.install.service import PackageService
from deskforge.ui.cli.output import ClickOutput


def output_for(ctx: click.Context, as_json: bool = False) -> ClickOutput:
    return ClickOutput(quiet=ctx.obj.get("quiet", False), as_json=as_json)


def manifest_for(ctx: click.Context, out: ClickOutput, as_json: bool = False) -> Manifest:
    """Load the manifest named by --config (or found upward), or exit 1."""
    config_path: Path | None = ctx.obj.get("config_path")
    try:
        return load_manifest(config_path)
    except ConfigError as e:
        fail(out, str(e), as_json=as_json)


def graph_for(manifest: Manifest) -> DependencyGraph:
    return DependencyGraph.from_packages(manifest.packages)


def build_installer(ctx: click.Context, manifest: Manifest) -> PackageInstaller:
    if ctx.obj.get("mock"):
        return MockInstaller(default_method=manifest.default_method)

    registry = InstallerRegistry(default_method=manifest.default_method)
    if manifest.methods:
        shell = CommandInstaller(manifest.methods, default_method=manifest.default_method)
        registry.register(list(manifest.methods), shell)
    return registry


def build_detector(ctx: click.Context) -> SystemDetector:
    if ctx.obj.get("mock"):
        return StaticDetector()
    return LinuxSystemDetector()


def service_for(ctx: click.Context, manifest: Manifest) -> PackageService:
    return PackageService(build_installer(ctx, manifest), build_detector(ctx))


def operation_context(ctx: click.Context) -> OperationContext:
    return OperationContext(timeout=ctx.obj.get("timeout"))


def fail(out: ClickOutput, message: str, as_json: bool = False, payload: dict | None = None) -> NoReturn:
    """Report an error and exit 1."""
    if as_json:
        out.emit(payload or {"error": message})
    else:
        out.error(message)
    sys.exit(1)


def fail_with(
    ctx: click.Context,
    out: ClickOutput,
    err: PackageError,
    package: str = "",
    operation: str = "install",
    as_json: bool = False,
) -> NoReturn:
    """Render a domain error through the classifier and exit 1."""
    if isinstance(err, CircularDependencyError):
        message = f"✗ Circular dependency: {' → '.join(err.cycle)}"
    else:
        message = format_error_message(
            err, package, verbose=ctx.obj.get("verbose", False), operation=operation,
        )
    fail(out, message, as_json=as_json, payload={"error": err.to_dict()})
