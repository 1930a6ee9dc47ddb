"""Update planning commands: latest version, update plan, archive probe."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import click
import structlog
from rich.console import Console
from rich.table import Table

from patchchain.core.catalog import ManifestClient
from patchchain.core.config import AppConfig
from patchchain.core.discovery import VersionDiscovery, VersionLookup
from patchchain.core.errors import PatchChainError
from patchchain.core.install_state import LocalConfigStore
from patchchain.core.planner import PatchPlanner
from patchchain.core.types import UpdateDecision

logger = structlog.get_logger()


def _get_context_objects(ctx: click.Context) -> tuple[AppConfig, Console, bool]:
    """Extract common context objects."""
    config: AppConfig = ctx.obj["config"]
    console: Console = ctx.obj["console"]
    verbose: bool = ctx.obj["verbose"]
    return config, console, verbose


def _create_client(config: AppConfig) -> ManifestClient:
    """Create the manifest client for a command invocation."""
    return ManifestClient(config=config.provider)


def _output_json(data: dict[str, Any]) -> None:
    """Output data as JSON."""
    print(json.dumps(data, indent=2, default=str))


def _decision_to_dict(decision: UpdateDecision) -> dict[str, Any]:
    return {
        "strategy": decision.strategy.value,
        "current_build": decision.current_build,
        "target_build": decision.target_build,
        "up_to_date": decision.up_to_date,
        "plan_item": decision.plan_item.model_dump(),
        "downloads": [
            {
                "build": d.build_number,
                "url": d.url,
                "expected_hash": d.expected_hash,
                "is_delta": d.is_delta,
            }
            for d in decision.downloads
        ],
    }


async def _discover_latest(config: AppConfig, branch: str) -> VersionLookup:
    async with _create_client(config) as client:
        return await VersionDiscovery.default(client).latest_version(branch)


async def _plan(
    config: AppConfig, current: str | None, target: str | None, branch: str
) -> UpdateDecision:
    async with _create_client(config) as client:
        if target is None:
            target = await VersionDiscovery.default(client).require_latest_version(branch)
        planner = PatchPlanner(client, config.planner)
        return await planner.plan_update(current, target, branch)


async def _probe(
    config: AppConfig,
    start: str | None,
    branch: str,
    max_probe: int | None,
    concurrency: int | None,
) -> tuple[str, list[str]]:
    async with _create_client(config) as client:
        if start is None:
            start = await VersionDiscovery.default(client).require_latest_version(branch)
        planner = PatchPlanner(client, config.planner)
        available = await planner.probe_available_archives(
            start, branch, max_probe=max_probe, concurrency=concurrency
        )
        return start, available


@click.command()
@click.option("--branch", "-b", help="Release branch (default from config)")
@click.pass_context
def latest(ctx: click.Context, branch: str | None) -> None:
    """Show the latest client version of a branch."""
    config, console, verbose = _get_context_objects(ctx)
    branch = branch or config.branch

    lookup = asyncio.run(_discover_latest(config, branch))
    if not lookup.ok:
        console.print(f"[red]Error:[/red] {lookup.error}")
        raise click.ClickException(f"Failed to resolve latest version for {branch}")

    if config.output_format == "json":
        _output_json({"branch": branch, "version": lookup.version, "source": lookup.source})
        return

    console.print(f"{branch}: [green]{lookup.version}[/green]")
    if verbose:
        console.print(f"Source: {lookup.source}")


@click.command()
@click.argument("target", required=False)
@click.option("--branch", "-b", help="Release branch (default from config)")
@click.option("--current", help="Installed version (default: read from launcher config)")
@click.option("--fresh-install", is_flag=True, help="Plan as if nothing is installed")
@click.pass_context
def plan(
    ctx: click.Context,
    target: str | None,
    branch: str | None,
    current: str | None,
    fresh_install: bool,
) -> None:
    """Plan the downloads needed to reach TARGET (default: latest)."""
    config, console, verbose = _get_context_objects(ctx)
    branch = branch or config.branch

    if fresh_install:
        current = None
    elif current is None:
        current = LocalConfigStore(config.launcher_config).load_installed_version()

    try:
        decision = asyncio.run(_plan(config, current, target, branch))
    except PatchChainError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise click.ClickException(f"Failed to plan update: {e}") from e

    if config.output_format == "json":
        _output_json(_decision_to_dict(decision))
        return

    item = decision.plan_item
    if decision.up_to_date:
        console.print(f"[green]✓[/green] Already at {item.build_name}")
        return

    table = Table(title=f"Update plan: {current or 'none'} → {item.version} ({decision.strategy.value})")
    table.add_column("Build", style="cyan")
    table.add_column("Kind", style="yellow")
    table.add_column("URL", style="green")
    table.add_column("SHA-256", style="magenta")

    for download in decision.downloads:
        table.add_row(
            str(download.build_number),
            "delta" if download.is_delta else "full",
            download.url,
            download.expected_hash or "-",
        )

    console.print(table)
    if verbose and item.release_notes:
        console.print(f"Release notes: {item.release_notes}")


@click.command()
@click.option("--from", "start", help="Version to scan down from (default: latest)")
@click.option("--branch", "-b", help="Release branch (default from config)")
@click.option("--max-probe", "-m", type=int, help="Builds to scan below the start")
@click.option("--concurrency", "-j", type=click.IntRange(min=1), help="Probes in flight")
@click.pass_context
def probe(
    ctx: click.Context,
    start: str | None,
    branch: str | None,
    max_probe: int | None,
    concurrency: int | None,
) -> None:
    """Probe which full archives are downloadable."""
    config, console, verbose = _get_context_objects(ctx)
    branch = branch or config.branch

    try:
        start, available = asyncio.run(
            _probe(config, start, branch, max_probe, concurrency)
        )
    except PatchChainError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise click.ClickException(f"Failed to probe archives: {e}") from e

    if config.output_format == "json":
        _output_json({"branch": branch, "from": start, "available": available})
        return

    if not available:
        console.print(f"No archives found below {start}")
        return

    table = Table(title=f"Available archives ({branch}, from {start})")
    table.add_column("Archive", style="cyan")
    for name in available:
        table.add_row(name)
    console.print(table)
