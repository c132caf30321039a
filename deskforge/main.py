"""
deskforge — CLI entrypoint.

Usage:
    python -m deskforge.main --help
    deskforge detect
    deskforge graph resolve webapp
    deskforge --mock packages install webapp
    deskforge --mock packages install --group services
"""

from __future__ import annotations

from pathlib import Path

import click

from deskforge import __version__
from deskforge.core.observability.logging_config import resolve_level, setup_from_env


@click.group()
@click.version_option(version=__version__, prog_name="deskforge")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to packages.yml (default: auto-detect).",
)
@click.option("--mock", is_flag=True, help="Use in-memory adapters (no system changes).")
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Overall deadline in seconds for the operation.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    mock: bool,
    timeout: float | None,
) -> None:
    """deskforge — bootstrap a desktop from a declarative package list."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["mock"] = mock
    ctx.obj["timeout"] = timeout

    # ── Logging setup (once, at process start) ──────────────────
    setup_from_env(
        resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        quiet_third_party=not debug,
    )


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def detect(ctx: click.Context, as_json: bool) -> None:
    """Show the detected distribution, desktop and package manager."""
    from deskforge.core.errors import PackageError
    from deskforge.ui.cli.helpers import build_detector, fail_with, operation_context, output_for

    out = output_for(ctx, as_json)
    try:
        info = build_detector(ctx).detect_system(operation_context(ctx))
    except PackageError as e:
        fail_with(ctx, out, e, operation="detect", as_json=as_json)

    if as_json:
        out.emit(info.model_dump())
        return

    distro = info.distribution
    desktop = info.desktop_environment
    pm = info.package_manager

    click.secho("\n🖥️  System", fg="cyan", bold=True)
    if distro:
        version = f" {distro.version}" if distro.version else ""
        click.echo(f"   Distribution: {distro.name or distro.id}{version} ({distro.family})")
        if info.is_immutable():
            click.secho("   Immutable base: yes (Flatpak preferred)", fg="yellow")
    click.echo(f"   Desktop:      {desktop.name if desktop else '—'}")
    click.echo(f"   Packages:     {pm.name + ' (' + pm.command + ')' if pm else '—'}")
    click.echo(f"   Arch/kernel:  {info.architecture} / {info.kernel}")
    click.echo()


# ── Register sub-command groups from deskforge/ui/cli/ ─────────────

from deskforge.ui.cli.graph import graph  # noqa: E402
from deskforge.ui.cli.packages import packages  # noqa: E402

cli.add_command(graph)
cli.add_command(packages)


if __name__ == "__main__":
    cli()
