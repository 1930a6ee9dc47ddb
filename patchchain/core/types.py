"""Core type definitions for patchchain."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OperatingSystem(StrEnum):
    """Operating systems with published client archives."""
    WINDOWS = "windows"
    LINUX = "linux"
    DARWIN = "darwin"


class PlatformInfo(BaseModel):
    """Platform the resolver plans downloads for."""
    os: OperatingSystem = Field(..., description="Operating system")
    arch: str = Field(..., description="Architecture identifier (e.g. amd64)")


class PatchManifestEntry(BaseModel):
    """Patch manifest entry for a single target build.

    Populated from the wire names used by the patch manifest endpoint
    (``original_url``, ``patch_url``, ``patch_hash``, ``from``,
    ``proper_patch``, ``patch_note``).
    """
    original_url: str | None = Field(None, description="Full archive URL")
    patch_url: str | None = Field(None, description="Differential patch URL")
    patch_hash: str | None = Field(None, description="SHA-256 of the patch file")
    from_build: int | None = Field(
        None, alias="from", description="Build the delta applies on top of"
    )
    is_proper_delta: bool = Field(
        False, alias="proper_patch", description="Patch is a true delta"
    )
    release_notes: str | None = Field(
        None, alias="patch_note", description="Release notes"
    )

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("is_proper_delta", mode="before")
    @classmethod
    def validate_is_proper_delta(cls, v: Any) -> Any:
        """Treat a null ``proper_patch`` as not a delta."""
        if v is None:
            return False
        return v

    @property
    def is_usable_delta(self) -> bool:
        """Whether the entry carries everything needed to apply a delta."""
        return (
            self.is_proper_delta
            and bool(self.patch_url)
            and self.from_build is not None
        )


class UpdatePlanItem(BaseModel):
    """Resolved description of the transition to one target build."""
    version: str = Field(..., description="Target version as requested")
    build_number: int = Field(..., description="Parsed target build")
    build_name: str = Field(..., description="Display name of the build")
    full_url: str = Field(..., description="Full archive URL")
    delta_url: str | None = Field(None, description="Differential patch URL")
    checksum: str | None = Field(None, description="Expected SHA-256 of the delta")
    source_version: str | None = Field(
        None, description="Archive name of the build the delta starts from"
    )
    is_delta: bool = Field(False, description="Manifest marks the patch as a delta")
    release_notes: str | None = Field(None, description="Release notes")


@dataclass(frozen=True)
class CatalogSnapshot:
    """Catalog payload together with the monotonic time it was fetched."""

    data: dict[str, Any]
    fetched_at: float

    def age(self, now: float) -> float:
        """Seconds elapsed since the snapshot was fetched."""
        return now - self.fetched_at


class UpdateStrategy(enum.Enum):
    """How an installation gets from its current build to the target."""

    full_archive = "full_archive"
    delta = "delta"
    full_chain = "full_chain"


@dataclass
class PlannedDownload:
    """A single file the caller has to fetch, in application order."""

    build_number: int
    url: str
    expected_hash: str | None = None
    is_delta: bool = False


@dataclass
class UpdateDecision:
    """Result of planning an update from the installed build to a target."""

    strategy: UpdateStrategy
    plan_item: UpdatePlanItem
    current_build: int | None
    target_build: int
    downloads: list[PlannedDownload] = field(
        default_factory=lambda: list[PlannedDownload]()
    )

    @property
    def up_to_date(self) -> bool:
        """True when a full chain has nothing left to fetch."""
        return self.strategy is UpdateStrategy.full_chain and not self.downloads
