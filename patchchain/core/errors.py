"""Exception taxonomy for the patch-chain resolver."""

from __future__ import annotations

from pathlib import Path


class PatchChainError(Exception):
    """Base class for resolver failures."""


class ProviderUnavailable(PatchChainError):
    """The catalog provider failed and no cached snapshot exists.

    Attributes:
        url: Endpoint that was queried
    """

    def __init__(self, message: str, *, url: str | None = None):
        self.url = url
        super().__init__(message)


class NoDataForBranch(PatchChainError):
    """The catalog has no table for the branch/OS combination."""

    def __init__(self, branch: str, os_key: str):
        self.branch = branch
        self.os_key = os_key
        super().__init__(f"No data found for branch: {branch}, OS: {os_key}")


class NoArchivesFound(PatchChainError):
    """The branch/OS table lists no archive files."""

    def __init__(self, os_key: str, *, branch: str | None = None):
        self.os_key = os_key
        self.branch = branch
        super().__init__(f"No .pwr files found for {os_key}")


class UrlNotFound(PatchChainError):
    """No URL is published for the requested platform file."""

    def __init__(self, file_name: str | None):
        self.file_name = file_name
        super().__init__(f"No URL found for {file_name}")


class FileReadError(PatchChainError):
    """A local file could not be read while hashing it."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read {path}: {reason}")
