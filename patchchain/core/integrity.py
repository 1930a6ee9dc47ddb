"""Integrity verification for downloaded patch archives.

The patch manifest publishes a SHA-256 of each differential patch. A
downloaded file is streamed through the digest in fixed-size chunks so
archives of any size can be checked without loading them into memory.

A missing expected hash means the file is accepted unverified. Callers that
need assurance must make sure the manifest supplies a hash.
"""

from __future__ import annotations

import asyncio
import hashlib
from pathlib import Path

import structlog

from patchchain.core.errors import FileReadError

logger = structlog.get_logger()

DIGEST_CHUNK_SIZE = 1024 * 1024


def compute_digest(file_path: Path | str, chunk_size: int = DIGEST_CHUNK_SIZE) -> str:
    """Compute the SHA-256 of a file.

    Args:
        file_path: File to hash
        chunk_size: Bytes read per iteration

    Returns:
        Lowercase hex digest

    Raises:
        FileReadError: If the file cannot be read
    """
    path = Path(file_path)
    digest = hashlib.sha256()
    try:
        with open(path, "rb") as f:
            while chunk := f.read(chunk_size):
                digest.update(chunk)
    except OSError as e:
        raise FileReadError(path, str(e)) from e
    return digest.hexdigest()


def verify_checksum(file_path: Path | str, expected: str | None) -> bool:
    """Check a file against its expected SHA-256.

    Args:
        file_path: Downloaded file
        expected: Expected lowercase hex digest, or None when the manifest
            supplied no hash

    Returns:
        True if the digest matches or no hash was expected

    Raises:
        FileReadError: If the file cannot be read
    """
    if not expected:
        logger.debug("checksum_skipped", path=str(file_path))
        return True

    actual = compute_digest(file_path)
    if actual != expected:
        logger.warning(
            "checksum_mismatch",
            path=str(file_path),
            expected=expected,
            actual=actual,
        )
        return False

    logger.debug("checksum_verified", path=str(file_path), digest=actual)
    return True


async def compute_digest_async(
    file_path: Path | str, chunk_size: int = DIGEST_CHUNK_SIZE
) -> str:
    """Compute the SHA-256 of a file without blocking the event loop."""
    return await asyncio.to_thread(compute_digest, file_path, chunk_size)


async def verify_checksum_async(file_path: Path | str, expected: str | None) -> bool:
    """Async variant of :func:`verify_checksum`."""
    return await asyncio.to_thread(verify_checksum, file_path, expected)
