"""
CLI commands for package operations — install, remove, list, groups, methods.

Thin wrappers over ``PackageService`` and the batch orchestrator.
"""

from __future__ import annotations

import click

from deskforge.core.config.loader import ConfigError, Manifest
from deskforge.core.errors import PackageError
from deskforge.core.models.results import BatchResult
from deskforge.core.services.install.domain.error_analysis import format_error_message
from deskforge.ui.cli.helpers import (
    build_detector,
    fail,
    fail_with,
    graph_for,
    manifest_for,
    operation_context,
    output_for,
    service_for,
)
from deskforge.ui.cli.output import ClickOutput


_PROGRESS = {"install": "Installing", "remove": "Removing"}


@click.group()
def packages() -> None:
    """Packages — install, remove, list, groups, compare methods."""


def _report(ctx: click.Context, out: ClickOutput, result: BatchResult, as_json: bool) -> None:
    if as_json:
        out.emit(result.to_dict())
        if not result.ok:
            ctx.exit(1)
        return

    verbose = ctx.obj.get("verbose", False)
    verb = "Installed" if result.operation == "install" else "Removed"

    for name in result.succeeded:
        out.success(f"{verb} {name}")
    for name in result.skipped:
        out.info(f"Skipped {name}")
    for name in result.failed:
        err = result.errors.get(name, {})
        out.error(format_error_message(
            err.get("message") or "operation failed", name,
            verbose=verbose, operation=result.operation,
        ))

    click.echo()
    click.echo(
        f"   {len(result.succeeded)} {verb.lower()}, "
        f"{len(result.skipped)} skipped, {len(result.failed)} failed "
        f"in {result.duration_ms} ms"
    )
    if not result.ok:
        ctx.exit(1)


def _targets(out: ClickOutput, manifest: Manifest, names: tuple[str, ...],
             groups: tuple[str, ...], as_json: bool) -> list[str]:
    """Explicit names followed by group members, first occurrence kept."""
    targets = list(names)
    for group in groups:
        try:
            members = manifest.group(group)
        except ConfigError as e:
            fail(out, str(e), as_json=as_json)
        targets.extend(m for m in members if m not in targets)

    if not targets:
        fail(out, "Nothing to do: give package names or --group", as_json=as_json)
    return targets


def _batch(ctx: click.Context, names: tuple[str, ...], groups: tuple[str, ...],
           operation: str, stop_on_error: bool, as_json: bool) -> None:
    from deskforge.core.services.install.orchestration import (
        install_in_order,
        remove_in_order,
    )

    out = output_for(ctx, as_json)
    manifest = manifest_for(ctx, out, as_json)
    targets = _targets(out, manifest, names, groups, as_json)
    service = service_for(ctx, manifest)
    run = install_in_order if operation == "install" else remove_in_order

    try:
        result = run(
            service,
            graph_for(manifest),
            targets,
            operation_context(ctx),
            stop_on_error=stop_on_error,
            on_progress=lambda op, name: out.progress(f"{_PROGRESS[op]} {name}..."),
        )
    except PackageError as e:
        fail_with(ctx, out, e, package=e.package or "", operation=operation, as_json=as_json)

    _report(ctx, out, result, as_json)


@packages.command()
@click.argument("names", nargs=-1)
@click.option("--group", "-g", "groups", multiple=True, help="Also install every package in GROUP.")
@click.option("--stop-on-error", is_flag=True, help="Stop at the first failure.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(ctx: click.Context, names: tuple[str, ...], groups: tuple[str, ...],
            stop_on_error: bool, as_json: bool) -> None:
    """Install NAMES and their dependencies, dependencies first."""
    _batch(ctx, names, groups, "install", stop_on_error, as_json)


@packages.command()
@click.argument("names", nargs=-1)
@click.option("--group", "-g", "groups", multiple=True, help="Also remove every package in GROUP.")
@click.option("--stop-on-error", is_flag=True, help="Stop at the first failure.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def remove(ctx: click.Context, names: tuple[str, ...], groups: tuple[str, ...],
           stop_on_error: bool, as_json: bool) -> None:
    """Remove exactly NAMES, dependents first. Dependencies are kept."""
    _batch(ctx, names, groups, "remove", stop_on_error, as_json)


@packages.command("groups")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def groups_cmd(ctx: click.Context, as_json: bool) -> None:
    """List package groups declared in the manifest."""
    out = output_for(ctx, as_json)
    found = manifest_for(ctx, out, as_json).groups()

    if as_json:
        out.emit({"groups": found})
        return

    if not found:
        click.secho("⚠️  No groups declared", fg="yellow")
        return

    out.table(
        ["GROUP", "PACKAGES"],
        [[name, ", ".join(members)] for name, members in found.items()],
    )


@packages.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_cmd(ctx: click.Context, as_json: bool) -> None:
    """List installed packages."""
    out = output_for(ctx, as_json)
    manifest = manifest_for(ctx, out, as_json)
    service = service_for(ctx, manifest)

    try:
        installed = service.list(operation_context(ctx))
    except PackageError as e:
        fail_with(ctx, out, e, operation="list", as_json=as_json)

    if as_json:
        out.emit({"packages": [p.model_dump() for p in installed], "total": len(installed)})
        return

    if not installed:
        click.secho("⚠️  No installed packages reported", fg="yellow")
        return

    out.table(
        ["NAME", "METHOD", "VERSION"],
        [[p.name, p.method, p.display_version] for p in installed],
    )


@packages.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def methods(ctx: click.Context, as_json: bool) -> None:
    """Rank install methods for this machine."""
    from deskforge.core.models.package import InstallMethod
    from deskforge.core.services.install.domain.method_priority import (
        get_method_priority,
        is_method_compatible,
    )

    out = output_for(ctx, as_json)

    try:
        info = build_detector(ctx).detect_system(operation_context(ctx))
    except PackageError as e:
        fail_with(ctx, out, e, operation="detect", as_json=as_json)

    rows = sorted(
        (
            {
                "method": m.value,
                "compatible": is_method_compatible(m, info),
                "priority": get_method_priority(m, info),
            }
            for m in InstallMethod
        ),
        key=lambda r: (not r["compatible"], r["priority"]),
    )

    if as_json:
        out.emit({"methods": rows})
        return

    out.table(
        ["METHOD", "COMPATIBLE", "PRIORITY"],
        [[r["method"], "yes" if r["compatible"] else "no", str(r["priority"])] for r in rows],
    )
