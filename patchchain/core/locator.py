"""Archive URL and file name construction."""

from __future__ import annotations

from patchchain.core.types import OperatingSystem
from patchchain.core.versions import ARCHIVE_EXTENSION

DEFAULT_ARCHIVE_BASE_URL = "https://game-patches.hytale.com/patches"

# Fixed path segment published by the patch host between branch and build.
ARCHIVE_PATH_SEGMENT = "0"

_PLATFORM_SUFFIXES: dict[OperatingSystem, str] = {
    OperatingSystem.WINDOWS: "windows-amd64",
    OperatingSystem.LINUX: "linux-amd64",
    OperatingSystem.DARWIN: "darwin-arm64",
}


def build_archive_url(
    build_number: int,
    branch: str,
    os: OperatingSystem | str,
    arch: str,
    base_url: str = DEFAULT_ARCHIVE_BASE_URL,
) -> str:
    """Build the canonical full archive URL for a build.

    Args:
        build_number: Build to download
        branch: Release branch
        os: Operating system identifier
        arch: Architecture identifier
        base_url: Patch host base URL

    Returns:
        Complete archive URL
    """
    os_value = os.value if isinstance(os, OperatingSystem) else os
    return (
        f"{base_url.rstrip('/')}/{os_value}/{arch}/{branch}/"
        f"{ARCHIVE_PATH_SEGMENT}/{build_number}{ARCHIVE_EXTENSION}"
    )


def build_platform_file_name(version: str, os: OperatingSystem | str) -> str | None:
    """Build the catalog file name of a version for an operating system.

    Args:
        version: Version tag (e.g. ``v8``)
        os: Operating system identifier

    Returns:
        File name such as ``v8-windows-amd64.pwr``, or None for an
        operating system without published archives
    """
    try:
        os_enum = OperatingSystem(os)
    except ValueError:
        return None
    return f"{version}-{_PLATFORM_SUFFIXES[os_enum]}{ARCHIVE_EXTENSION}"


def catalog_os_key(os: OperatingSystem | str) -> str:
    """Map an operating system to its key in the catalog payload.

    The catalog files macOS archives under ``mac`` rather than ``darwin``.
    """
    os_value = os.value if isinstance(os, OperatingSystem) else os
    if os_value == OperatingSystem.DARWIN.value:
        return "mac"
    return os_value
