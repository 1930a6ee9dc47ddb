"""Catalog and patch manifest client with a time-bounded catalog cache.

The primary provider publishes one JSON catalog for every branch and
operating system::

    {"hytale": {"release": {"windows": {"v8-windows-amd64.pwr": "<url>"}}}}

The catalog is cached in a :class:`CatalogCache` owned by the caller. A
snapshot is served without refetching for ``catalog_ttl`` seconds. When a
refetch fails the previous snapshot is served stale instead of failing.

The cache has no lock. Two callers that both find it expired will both
refetch and the last response written wins.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from patchchain.core.config import ProviderConfig
from patchchain.core.errors import (
    NoArchivesFound,
    NoDataForBranch,
    ProviderUnavailable,
    UrlNotFound,
)
from patchchain.core.host_platform import detect_platform
from patchchain.core.locator import (
    build_archive_url,
    build_platform_file_name,
    catalog_os_key,
)
from patchchain.core.types import (
    CatalogSnapshot,
    OperatingSystem,
    PatchManifestEntry,
    PlatformInfo,
)
from patchchain.core.versions import ARCHIVE_EXTENSION, parse_build_number

logger = structlog.get_logger()


class CatalogCache:
    """Single-cell cache for the catalog payload.

    Args:
        ttl: Seconds a snapshot is considered fresh
        clock: Monotonic time source
    """

    def __init__(
        self,
        ttl: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self.clock = clock
        self.snapshot: CatalogSnapshot | None = None

    def get_fresh(self) -> CatalogSnapshot | None:
        """Return the snapshot if it is younger than the TTL."""
        if self.snapshot is None:
            return None
        if self.snapshot.age(self.clock()) < self.ttl:
            return self.snapshot
        return None

    def store(self, data: dict[str, Any]) -> CatalogSnapshot:
        """Replace the cached snapshot."""
        self.snapshot = CatalogSnapshot(data=data, fetched_at=self.clock())
        return self.snapshot

    def clear(self) -> None:
        """Drop the cached snapshot."""
        self.snapshot = None


class ManifestClient:
    """Async client for the catalog, legacy version and patch manifest APIs.

    Args:
        config: Provider endpoints and timeouts
        platform: Platform to resolve archives for, detected if None
        cache: Catalog cache, a private one is created if None
        transport: Optional httpx transport (used by tests)
    """

    def __init__(
        self,
        config: ProviderConfig | None = None,
        platform: PlatformInfo | None = None,
        cache: CatalogCache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or ProviderConfig()
        self.platform = platform or detect_platform()
        self.cache = cache or CatalogCache(ttl=self.config.catalog_ttl)
        self._transport = transport
        self._async_client: httpx.AsyncClient | None = None

    @property
    def async_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._async_client is None:
            self._async_client = httpx.AsyncClient(
                headers={"User-Agent": self.config.user_agent},
                follow_redirects=True,
                transport=self._transport,
            )
        return self._async_client

    async def fetch_catalog(self) -> CatalogSnapshot:
        """Return the catalog, refetching it once the cache has expired.

        Returns:
            Fresh snapshot, or the previous one if the refetch failed

        Raises:
            ProviderUnavailable: If the fetch failed and nothing is cached
        """
        cached = self.cache.get_fresh()
        if cached is not None:
            logger.debug("catalog_cache_hit", age=cached.age(self.cache.clock()))
            return cached

        url = self.config.catalog_url
        try:
            logger.debug("catalog_fetch", url=url)
            response = await self.async_client.get(
                url, timeout=self.config.catalog_timeout
            )
            response.raise_for_status()
            data = response.json()
            if not isinstance(data, dict) or not data.get(self.config.product_key):
                raise ValueError("Invalid API response structure")
        except (httpx.HTTPError, ValueError) as e:
            logger.error("catalog_fetch_failed", url=url, error=str(e))
            if self.cache.snapshot is not None:
                logger.warning(
                    "catalog_stale_cache_used",
                    age=self.cache.snapshot.age(self.cache.clock()),
                )
                return self.cache.snapshot
            raise ProviderUnavailable(
                f"Catalog provider unavailable: {e}", url=url
            ) from e

        snapshot = self.cache.store(data)
        logger.info("catalog_fetched", url=url)
        return snapshot

    def _os_table(
        self, snapshot: CatalogSnapshot, branch: str, os: OperatingSystem
    ) -> dict[str, Any]:
        """Select the file table for a branch and operating system."""
        os_key = catalog_os_key(os)
        product = snapshot.data.get(self.config.product_key) or {}
        branch_data = product.get(branch) if isinstance(product, dict) else None
        if not isinstance(branch_data, dict) or not branch_data.get(os_key):
            raise NoDataForBranch(branch, os_key)

        table = branch_data[os_key]
        if not isinstance(table, dict):
            raise NoDataForBranch(branch, os_key)
        return table

    async def resolve_latest_build(self, branch: str = "release") -> int:
        """Return the highest build published for a branch on this platform.

        Raises:
            ProviderUnavailable: If the catalog cannot be fetched
            NoDataForBranch: If the branch/OS table is missing
            NoArchivesFound: If the table lists no archives
        """
        snapshot = await self.fetch_catalog()
        os = self.platform.os
        table = self._os_table(snapshot, branch, os)

        archives = [name for name in table if name.endswith(ARCHIVE_EXTENSION)]
        if not archives:
            raise NoArchivesFound(catalog_os_key(os), branch=branch)

        latest = max(parse_build_number(name) for name in archives)
        logger.info("latest_build_resolved", branch=branch, build=latest)
        return latest

    async def resolve_download_url(
        self,
        branch: str = "release",
        version: str = "v8",
        os: OperatingSystem | None = None,
    ) -> str:
        """Return the catalog URL of a version for an operating system.

        Raises:
            ProviderUnavailable: If the catalog cannot be fetched
            NoDataForBranch: If the branch/OS table is missing
            UrlNotFound: If no URL is published for the platform file
        """
        os = os or self.platform.os
        file_name = build_platform_file_name(version, os)

        snapshot = await self.fetch_catalog()
        table = self._os_table(snapshot, branch, os)

        url = table.get(file_name) if file_name else None
        if not url:
            raise UrlNotFound(file_name)

        logger.debug("download_url_resolved", file=file_name, url=url)
        return url

    async def fetch_patch_manifest(self, branch: str = "release") -> dict[int, PatchManifestEntry]:
        """Fetch the patch manifest for a branch on this platform.

        Failures are logged and yield an empty manifest. A missing entry means
        "download the full archive", never an error.

        Returns:
            Mapping of target build to manifest entry
        """
        url = self.config.patch_manifest_url
        params = {
            "branch": branch,
            "os": self.platform.os.value,
            "arch": self.platform.arch,
        }
        try:
            response = await self.async_client.get(
                url, params=params, timeout=self.config.manifest_timeout
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("patch_manifest_fetch_failed", url=url, branch=branch, error=str(e))
            return {}

        patches = payload.get("patches") if isinstance(payload, dict) else None
        if not isinstance(patches, dict):
            logger.debug("patch_manifest_empty", branch=branch)
            return {}

        manifest: dict[int, PatchManifestEntry] = {}
        for key, raw in patches.items():
            try:
                build = int(key)
            except (TypeError, ValueError):
                logger.warning("patch_manifest_key_invalid", key=key)
                continue
            try:
                manifest[build] = PatchManifestEntry.model_validate(raw)
            except ValidationError as e:
                logger.warning("patch_manifest_entry_invalid", build=build, error=str(e))

        logger.debug("patch_manifest_fetched", branch=branch, entries=len(manifest))
        return manifest

    async def fetch_legacy_version(self, branch: str = "release") -> str:
        """Ask the legacy endpoint for the latest client version.

        Raises:
            ProviderUnavailable: If the endpoint cannot be reached
            ValueError: If the response carries no client version
        """
        url = self.config.legacy_version_url
        try:
            response = await self.async_client.get(
                url, params={"branch": branch}, timeout=self.config.legacy_timeout
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise ProviderUnavailable(
                f"Legacy version endpoint unavailable: {e}", url=url
            ) from e

        version = payload.get("client_version") if isinstance(payload, dict) else None
        if not version:
            raise ValueError("Invalid API response: missing client_version")
        return str(version)

    def archive_url(self, build_number: int, branch: str = "release") -> str:
        """Canonical full archive URL of a build on this platform."""
        return build_archive_url(
            build_number,
            branch,
            self.platform.os,
            self.platform.arch,
            base_url=self.config.archive_base_url,
        )

    async def archive_exists(self, build_number: int, branch: str = "release") -> bool:
        """Probe whether a full archive is downloadable with a HEAD request."""
        url = self.archive_url(build_number, branch)
        try:
            response = await self.async_client.head(
                url, timeout=self.config.probe_timeout
            )
        except httpx.HTTPError as e:
            logger.debug("archive_probe_failed", build=build_number, error=str(e))
            return False
        return response.status_code == 200

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._async_client is not None:
            await self._async_client.aclose()
            self._async_client = None

    async def __aenter__(self) -> ManifestClient:
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        await self.aclose()
