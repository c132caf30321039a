"""
Terminal output — the CLI's implementation of ``OutputPort``.

Human mode writes coloured lines with click. In JSON mode the human
lines are suppressed and each command prints its single document via
``emit`` so stdout stays machine-readable.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

import click

from deskforge.adapters.base import OutputPort


class ClickOutput(OutputPort):
    """OutputPort backed by ``click.echo`` / ``click.secho``."""

    def __init__(self, quiet: bool = False, as_json: bool = False):
        self._quiet = quiet
        self._as_json = as_json

    def is_quiet(self) -> bool:
        return self._quiet

    def success(self, message: str, data: Any = None) -> None:
        if self._as_json:
            return
        click.secho(f"✅ {message}", fg="green")

    def error(self, message: str) -> None:
        if self._as_json:
            return
        click.secho(message, fg="red", err=True)

    def info(self, message: str) -> None:
        if self._as_json or self._quiet:
            return
        click.echo(f"   {message}")

    def progress(self, message: str) -> None:
        if self._as_json or self._quiet:
            return
        click.secho(f"⏳ {message}", fg="cyan")

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
        if self._as_json:
            return

        widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row):
                widths[i] = max(widths[i], len(str(cell)))

        def line(cells: Sequence[str]) -> str:
            return "   " + "  ".join(str(c).ljust(w) for c, w in zip(cells, widths))

        click.secho(line(headers), bold=True)
        click.echo("   " + "  ".join("─" * w for w in widths))
        for row in rows:
            click.echo(line(row))

    def emit(self, payload: Any) -> None:
        """Print a JSON document (JSON mode only)."""
        click.echo(json.dumps(payload, indent=2, default=str))
