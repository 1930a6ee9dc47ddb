"""Tests for locator.py module."""

import pytest

from patchchain.core.locator import (
    DEFAULT_ARCHIVE_BASE_URL,
    build_archive_url,
    build_platform_file_name,
    catalog_os_key,
)
from patchchain.core.types import OperatingSystem


class TestBuildArchiveUrl:
    """Test build_archive_url()."""

    def test_default_base(self):
        """URL is segmented by OS, arch, branch and the fixed segment."""
        url = build_archive_url(8, "release", OperatingSystem.LINUX, "amd64")
        assert url == f"{DEFAULT_ARCHIVE_BASE_URL}/linux/amd64/release/0/8.pwr"

    def test_custom_base_trailing_slash(self):
        """Trailing slashes on the base do not double up."""
        url = build_archive_url(
            3, "beta", "windows", "amd64", base_url="https://patches.test/p/"
        )
        assert url == "https://patches.test/p/windows/amd64/beta/0/3.pwr"

    def test_deterministic(self):
        """Same inputs give the same URL."""
        first = build_archive_url(5, "release", OperatingSystem.DARWIN, "arm64")
        second = build_archive_url(5, "release", OperatingSystem.DARWIN, "arm64")
        assert first == second


class TestBuildPlatformFileName:
    """Test build_platform_file_name()."""

    @pytest.mark.parametrize(
        ("os", "expected"),
        [
            (OperatingSystem.WINDOWS, "v8-windows-amd64.pwr"),
            (OperatingSystem.LINUX, "v8-linux-amd64.pwr"),
            (OperatingSystem.DARWIN, "v8-darwin-arm64.pwr"),
            ("linux", "v8-linux-amd64.pwr"),
        ],
    )
    def test_known_os(self, os, expected):
        """Each OS maps to its own file name template."""
        assert build_platform_file_name("v8", os) == expected

    def test_unknown_os(self):
        """Unknown operating systems have no file name."""
        assert build_platform_file_name("v8", "freebsd") is None


class TestCatalogOsKey:
    """Test catalog_os_key()."""

    def test_darwin_maps_to_mac(self):
        """macOS archives are filed under mac."""
        assert catalog_os_key(OperatingSystem.DARWIN) == "mac"
        assert catalog_os_key("darwin") == "mac"

    def test_other_os_unchanged(self):
        """Other operating systems use their own name."""
        assert catalog_os_key(OperatingSystem.WINDOWS) == "windows"
        assert catalog_os_key(OperatingSystem.LINUX) == "linux"
