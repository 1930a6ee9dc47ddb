"""Latest-version discovery with ordered fallback sources.

Sources are tried in order until one yields a version:

1. ``catalog`` - highest build listed in the primary catalog
2. ``legacy`` - the legacy ``version_client`` endpoint
3. ``pinned`` - the configured last known good version

Every failing source is logged and skipped, so discovery only fails when all
of them do.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

import httpx
import structlog

from patchchain.core.catalog import ManifestClient
from patchchain.core.errors import PatchChainError, ProviderUnavailable
from patchchain.core.versions import format_version_tag

logger = structlog.get_logger()


@dataclass(frozen=True)
class VersionLookup:
    """Outcome of asking one source for the latest version."""

    source: str
    version: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Whether the source produced a version."""
        return self.version is not None


VersionSource = Callable[[str], Awaitable[VersionLookup]]


def catalog_source(client: ManifestClient) -> VersionSource:
    """Source backed by the primary catalog."""

    async def lookup(branch: str) -> VersionLookup:
        try:
            build = await client.resolve_latest_build(branch)
        except PatchChainError as e:
            return VersionLookup(source="catalog", error=str(e))
        return VersionLookup(source="catalog", version=format_version_tag(build))

    return lookup


def legacy_source(client: ManifestClient) -> VersionSource:
    """Source backed by the legacy version endpoint."""

    async def lookup(branch: str) -> VersionLookup:
        try:
            version = await client.fetch_legacy_version(branch)
        except (PatchChainError, httpx.HTTPError, ValueError) as e:
            return VersionLookup(source="legacy", error=str(e))
        return VersionLookup(source="legacy", version=version)

    return lookup


def pinned_source(version: str | None) -> VersionSource:
    """Source that always answers with a fixed version."""

    async def lookup(branch: str) -> VersionLookup:
        if not version:
            return VersionLookup(source="pinned", error="No pinned version configured")
        return VersionLookup(source="pinned", version=version)

    return lookup


class VersionDiscovery:
    """Resolve the latest version of a branch from ordered sources.

    Args:
        sources: Sources in priority order
    """

    def __init__(self, sources: Sequence[VersionSource]):
        if not sources:
            raise ValueError("At least one version source is required")
        self.sources = list(sources)

    @classmethod
    def default(cls, client: ManifestClient) -> VersionDiscovery:
        """Catalog, then legacy endpoint, then the configured pinned version."""
        return cls([
            catalog_source(client),
            legacy_source(client),
            pinned_source(client.config.fallback_version),
        ])

    async def latest_version(self, branch: str = "release") -> VersionLookup:
        """Return the first successful lookup.

        Returns:
            Successful lookup, or the last failure if every source failed
        """
        lookup = VersionLookup(source="none", error="No sources tried")
        for source in self.sources:
            lookup = await source(branch)
            if lookup.ok:
                logger.info(
                    "version_source_selected",
                    branch=branch,
                    source=lookup.source,
                    version=lookup.version,
                )
                return lookup
            logger.warning(
                "version_source_failed",
                branch=branch,
                source=lookup.source,
                error=lookup.error,
            )

        logger.error("version_discovery_exhausted", branch=branch)
        return lookup

    async def require_latest_version(self, branch: str = "release") -> str:
        """Return the latest version, raising once every source failed.

        Raises:
            ProviderUnavailable: If no source produced a version
        """
        lookup = await self.latest_version(branch)
        if lookup.version is None:
            raise ProviderUnavailable(
                f"No version source answered for branch {branch}: {lookup.error}"
            )
        return lookup.version
