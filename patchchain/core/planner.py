"""Update planning from an installed build to a target build.

An installation moves to the target in one of three ways:

- no installed version: download the target's full archive
- installed build equals the delta's source build: download the single
  differential patch
- otherwise: download every full archive after the installed build up to and
  including the target, applied in ascending order. Each step uses the
  manifest's ``original_url`` for its build when listed, else the canonical
  archive URL

Deltas are never chained. A delta is only used when the installed build is
exactly the build the manifest says it was produced from.

When the manifest entry does not name a source build, the delta source
defaults to the previous build. That default is not verified against
anything: an entry that marks a delta but omits ``from`` is treated as a
delta from ``target - 1``.
"""

from __future__ import annotations

import asyncio

import structlog

from patchchain.core.catalog import ManifestClient
from patchchain.core.config import PlannerConfig
from patchchain.core.types import (
    PatchManifestEntry,
    PlannedDownload,
    UpdateDecision,
    UpdatePlanItem,
    UpdateStrategy,
)
from patchchain.core.versions import format_archive_name, parse_build_number

logger = structlog.get_logger()


def can_apply_delta(current_version: str | None, plan_item: UpdatePlanItem | None) -> bool:
    """Check whether a plan item's delta applies to the installed version.

    Args:
        current_version: Installed version, None if nothing is installed
        plan_item: Described transition to the target

    Returns:
        True only if the item has a delta URL, is marked as a proper delta,
        a current version is known and its build equals the delta source
    """
    if plan_item is None:
        return False
    if not plan_item.delta_url:
        return False
    if not plan_item.is_delta:
        return False
    if not current_version:
        return False

    current_build = parse_build_number(current_version)
    expected_source = parse_build_number(plan_item.source_version)
    return current_build == expected_source


def plan_intermediate_steps(current_version: str | None, target_version: str) -> list[str]:
    """List the full archives needed to walk from current to target.

    Archive existence is not checked.

    Args:
        current_version: Installed version, None if nothing is installed
        target_version: Version to reach

    Returns:
        Archive names for builds after current up to target, ascending;
        empty when no current version is known
    """
    if not current_version:
        return []

    current = parse_build_number(current_version)
    target = parse_build_number(target_version)
    return [format_archive_name(build) for build in range(current + 1, target + 1)]


class PatchPlanner:
    """Plans patch downloads against the manifest provider.

    Args:
        client: Manifest client used for manifest lookups and probes
        config: Planner policy
    """

    def __init__(self, client: ManifestClient, config: PlannerConfig | None = None):
        self.client = client
        self.config = config or PlannerConfig()

    async def describe_transition(
        self, target_version: str, branch: str = "release"
    ) -> UpdatePlanItem:
        """Describe the download options for a target version.

        Args:
            target_version: Version to describe
            branch: Release branch

        Returns:
            Plan item; without a manifest entry it points at the canonical
            full archive and carries no delta
        """
        manifest = await self.client.fetch_patch_manifest(branch)
        return self._describe(target_version, branch, manifest)

    def _full_url(
        self, build_number: int, branch: str, manifest: dict[int, PatchManifestEntry]
    ) -> str:
        """Manifest full archive URL of a build, else the canonical one."""
        entry = manifest.get(build_number)
        if entry is not None and entry.original_url:
            return entry.original_url
        return self.client.archive_url(build_number, branch)

    def _describe(
        self,
        target_version: str,
        branch: str,
        manifest: dict[int, PatchManifestEntry],
    ) -> UpdatePlanItem:
        build_number = parse_build_number(target_version)
        previous_build = build_number - 1
        entry = manifest.get(build_number)

        if entry is not None and entry.from_build is not None:
            source_version: str | None = format_archive_name(entry.from_build)
        elif previous_build > 0:
            source_version = format_archive_name(previous_build)
        else:
            source_version = None

        item = UpdatePlanItem(
            version=target_version,
            build_number=build_number,
            build_name=f"{self.client.config.build_name_prefix}-{build_number}",
            full_url=self._full_url(build_number, branch, manifest),
            delta_url=entry.patch_url if entry else None,
            checksum=entry.patch_hash if entry else None,
            source_version=source_version,
            is_delta=bool(entry and entry.is_proper_delta),
            release_notes=entry.release_notes if entry else None,
        )
        logger.debug(
            "transition_described",
            target=build_number,
            has_entry=entry is not None,
            is_delta=item.is_delta,
        )
        return item

    async def probe_available_archives(
        self,
        latest_known_version: str,
        branch: str = "release",
        max_probe: int | None = None,
        concurrency: int | None = None,
    ) -> list[str]:
        """Scan downward from the latest build for downloadable archives.

        Every build from the latest down to ``max(1, latest - max_probe)`` is
        probed; gaps do not stop the scan.

        Args:
            latest_known_version: Version to start from
            branch: Release branch
            max_probe: Builds to scan below the latest, config default if None
            concurrency: Probes in flight at once, config default if None

        Returns:
            Archive names of present builds, highest first
        """
        latest = parse_build_number(latest_known_version)
        if max_probe is None:
            max_probe = self.config.max_probe
        if concurrency is None:
            concurrency = self.config.probe_concurrency

        floor = max(1, latest - max_probe)
        candidates = list(range(latest, floor - 1, -1))

        if concurrency <= 1:
            results: list[bool] = []
            for build in candidates:
                results.append(await self.client.archive_exists(build, branch))
        else:
            semaphore = asyncio.Semaphore(concurrency)

            async def probe(build: int) -> bool:
                async with semaphore:
                    return await self.client.archive_exists(build, branch)

            results = list(await asyncio.gather(*(probe(b) for b in candidates)))

        available = [
            format_archive_name(build)
            for build, present in zip(candidates, results, strict=True)
            if present
        ]
        logger.info(
            "archives_probed",
            branch=branch,
            latest=latest,
            probed=len(candidates),
            available=len(available),
        )
        return available

    async def plan_update(
        self,
        current_version: str | None,
        target_version: str,
        branch: str = "release",
    ) -> UpdateDecision:
        """Decide which files bring the installation to the target version.

        Args:
            current_version: Installed version, None if nothing is installed
            target_version: Version to reach
            branch: Release branch

        Returns:
            Decision with the chosen strategy and downloads in apply order
        """
        manifest = await self.client.fetch_patch_manifest(branch)
        item = self._describe(target_version, branch, manifest)
        target_build = item.build_number

        if not current_version:
            decision = UpdateDecision(
                strategy=UpdateStrategy.full_archive,
                plan_item=item,
                current_build=None,
                target_build=target_build,
                downloads=[PlannedDownload(build_number=target_build, url=item.full_url)],
            )
        elif can_apply_delta(current_version, item) and item.delta_url:
            decision = UpdateDecision(
                strategy=UpdateStrategy.delta,
                plan_item=item,
                current_build=parse_build_number(current_version),
                target_build=target_build,
                downloads=[
                    PlannedDownload(
                        build_number=target_build,
                        url=item.delta_url,
                        expected_hash=item.checksum,
                        is_delta=True,
                    )
                ],
            )
        else:
            downloads: list[PlannedDownload] = []
            for archive_name in plan_intermediate_steps(current_version, target_version):
                build = parse_build_number(archive_name)
                url = self._full_url(build, branch, manifest)
                downloads.append(PlannedDownload(build_number=build, url=url))
            decision = UpdateDecision(
                strategy=UpdateStrategy.full_chain,
                plan_item=item,
                current_build=parse_build_number(current_version),
                target_build=target_build,
                downloads=downloads,
            )

        logger.info(
            "update_planned",
            strategy=decision.strategy.value,
            current=decision.current_build,
            target=target_build,
            downloads=len(decision.downloads),
        )
        return decision
