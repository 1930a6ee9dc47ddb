"""Version string parsing.

Release identities are plain build numbers, but providers spell them in
several ways:

- ``"8"`` (bare build)
- ``"v8"`` (version tag)
- ``"v8-windows-amd64.pwr"`` (catalog file name)
- ``"7.pwr"`` (archive name)

Everything collapses to the integer build. Unparseable input maps to 0 so
unknown versions sort lowest.
"""

from __future__ import annotations

import re

ARCHIVE_EXTENSION = ".pwr"

_TAG_PATTERN = re.compile(r"v(\d+)")
_ARCHIVE_PATTERN = re.compile(r"(\d+)\.[A-Za-z]\w*")
_LEADING_INT_PATTERN = re.compile(r"^\s*[+]?(\d+)")


def parse_build_number(version: str | None) -> int:
    """Parse a version string into its build number.

    Args:
        version: Version string in any supported format

    Returns:
        Build number, or 0 if the string carries none

    Example:
        >>> parse_build_number("v8-windows-amd64.pwr")
        8
        >>> parse_build_number("7.pwr")
        7
        >>> parse_build_number("latest")
        0
    """
    if not version:
        return 0

    match = _TAG_PATTERN.search(version)
    if match:
        return int(match.group(1))

    match = _ARCHIVE_PATTERN.search(version)
    if match:
        return int(match.group(1))

    match = _LEADING_INT_PATTERN.match(version)
    if match:
        return int(match.group(1))

    return 0


def format_version_tag(build_number: int) -> str:
    """Format a build number as a version tag (``v8``)."""
    return f"v{build_number}"


def format_archive_name(build_number: int) -> str:
    """Format a build number as a full archive name (``8.pwr``)."""
    return f"{build_number}{ARCHIVE_EXTENSION}"
