"""
CLI commands for the dependency graph — resolve, check, deps.

Thin wrappers over ``deskforge.core.services.install.domain.dag``.
"""

from __future__ import annotations

import click

from deskforge.core.errors import CircularDependencyError
from deskforge.ui.cli.helpers import fail_with, graph_for, manifest_for, output_for


@click.group()
def graph() -> None:
    """Dependency graph — resolve order, find cycles, list deps."""


@graph.command()
@click.argument("names", nargs=-1, required=True)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def resolve(ctx: click.Context, names: tuple[str, ...], as_json: bool) -> None:
    """Show the installation order for NAMES."""
    from deskforge.core.services.install.orchestration import plan_order

    out = output_for(ctx, as_json)
    manifest = manifest_for(ctx, out, as_json)
    dep_graph = graph_for(manifest)

    try:
        order = plan_order(dep_graph, names)
    except CircularDependencyError as e:
        fail_with(ctx, out, e, as_json=as_json)

    if as_json:
        out.emit({"targets": list(names), "order": order})
        return

    click.secho(f"📦 Install order for {', '.join(names)}:", fg="cyan", bold=True)
    for i, name in enumerate(order, 1):
        pkg = dep_graph.get(name)
        label = f"  ({pkg.method}: {pkg.source})" if pkg else "  (not declared)"
        click.echo(f"   {i:>2}. {name}{label}")


@graph.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(ctx: click.Context, as_json: bool) -> None:
    """Check the manifest for circular and missing dependencies."""
    out = output_for(ctx, as_json)
    manifest = manifest_for(ctx, out, as_json)
    dep_graph = graph_for(manifest)

    has_cycle, cycle = dep_graph.has_circular_dependency()
    missing = dep_graph.missing_dependencies()

    if as_json:
        out.emit({
            "packages": len(dep_graph),
            "has_cycle": has_cycle,
            "cycle": cycle,
            "missing": missing,
        })
        if has_cycle:
            ctx.exit(1)
        return

    if has_cycle:
        click.secho(f"❌ Circular dependency: {' → '.join(cycle)}", fg="red")
    else:
        click.secho(f"✅ No circular dependencies ({len(dep_graph)} packages)", fg="green")

    if missing:
        click.secho("⚠️  Optional (undeclared) dependencies:", fg="yellow")
        for name, deps in missing.items():
            click.echo(f"   {name} → {', '.join(deps)}")

    if has_cycle:
        ctx.exit(1)


@graph.command()
@click.argument("name")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def deps(ctx: click.Context, name: str, as_json: bool) -> None:
    """List every package NAME depends on, directly or not."""
    out = output_for(ctx, as_json)
    manifest = manifest_for(ctx, out, as_json)
    found = graph_for(manifest).get_all_dependencies(name)

    if as_json:
        out.emit({"package": name, "dependencies": found})
        return

    if not found:
        click.echo(f"   {name} has no dependencies")
        return

    click.secho(f"🔗 {name} depends on ({len(found)}):", fg="cyan", bold=True)
    for dep in found:
        click.echo(f"   • {dep}")
