"""Checksum verification command for downloaded archives."""

from __future__ import annotations

import json
from pathlib import Path

import click
from rich.console import Console

from patchchain.core.config import AppConfig
from patchchain.core.errors import FileReadError
from patchchain.core.integrity import compute_digest, verify_checksum


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--hash", "expected", help="Expected SHA-256 (hex)")
@click.pass_context
def verify(ctx: click.Context, path: Path, expected: str | None) -> None:
    """Compute the SHA-256 of PATH and compare it with --hash."""
    config: AppConfig = ctx.obj["config"]
    console: Console = ctx.obj["console"]

    try:
        actual = compute_digest(path)
        matches = verify_checksum(path, expected)
    except FileReadError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise click.ClickException(str(e)) from e

    if config.output_format == "json":
        print(json.dumps({
            "path": str(path),
            "sha256": actual,
            "expected": expected,
            "valid": matches,
        }, indent=2))
    else:
        console.print(f"SHA-256: {actual}")
        if not expected:
            console.print("[yellow]No expected hash given, not verified[/yellow]")
        elif matches:
            console.print("[green]✓[/green] Checksum matches")
        else:
            console.print(f"[red]✗[/red] Checksum mismatch (expected {expected})")

    if not matches:
        ctx.exit(1)
