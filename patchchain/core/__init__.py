"""Core functionality for patchchain.

This module provides the patch-chain resolver:
- Version string parsing and archive URL construction
- Catalog and patch manifest client with catalog caching
- Latest-version discovery with fallback sources
- Update planning (delta vs. full archive chain)
- Download integrity verification
"""

from patchchain.core.catalog import CatalogCache, ManifestClient
from patchchain.core.discovery import VersionDiscovery, VersionLookup
from patchchain.core.errors import (
    FileReadError,
    NoArchivesFound,
    NoDataForBranch,
    PatchChainError,
    ProviderUnavailable,
    UrlNotFound,
)
from patchchain.core.integrity import compute_digest, verify_checksum
from patchchain.core.locator import build_archive_url, build_platform_file_name
from patchchain.core.planner import PatchPlanner, can_apply_delta, plan_intermediate_steps
from patchchain.core.types import (
    OperatingSystem,
    PatchManifestEntry,
    PlatformInfo,
    UpdateDecision,
    UpdatePlanItem,
    UpdateStrategy,
)
from patchchain.core.versions import parse_build_number

__all__ = [
    # Types
    "OperatingSystem",
    "PlatformInfo",
    "PatchManifestEntry",
    "UpdatePlanItem",
    "UpdateDecision",
    "UpdateStrategy",
    # Errors
    "PatchChainError",
    "ProviderUnavailable",
    "NoDataForBranch",
    "NoArchivesFound",
    "UrlNotFound",
    "FileReadError",
    # Resolver
    "parse_build_number",
    "build_archive_url",
    "build_platform_file_name",
    "CatalogCache",
    "ManifestClient",
    "VersionDiscovery",
    "VersionLookup",
    "PatchPlanner",
    "can_apply_delta",
    "plan_intermediate_steps",
    "compute_digest",
    "verify_checksum",
]
