"""Pytest configuration and shared fixtures for patchchain tests."""

from __future__ import annotations

import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import httpx
import pytest
import structlog

from patchchain.core.catalog import CatalogCache, ManifestClient
from patchchain.core.config import AppConfig, ProviderConfig
from patchchain.core.types import OperatingSystem, PlatformInfo

CATALOG_URL = "https://catalog.test/api.php"
LEGACY_URL = "https://files.test/api/version_client"
MANIFEST_URL = "https://files.test/api/patch_manifest"
ARCHIVE_BASE = "https://patches.test/patches"

Handler = Callable[[httpx.Request], httpx.Response]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProvider:
    """Routes httpx requests to canned responses and records them.

    Routes are keyed by method and URL without query string. Unrouted
    requests get a 404.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    @staticmethod
    def _key(method: str, url: httpx.URL | str) -> tuple[str, str]:
        parsed = httpx.URL(str(url))
        return method.upper(), f"{parsed.scheme}://{parsed.host}{parsed.path}"

    def route(self, method: str, url: str, handler: Handler) -> None:
        self.routes[self._key(method, url)] = handler

    def json(self, method: str, url: str, payload: Any, status: int = 200) -> None:
        self.route(method, url, lambda request: httpx.Response(status, json=payload))

    def status(self, method: str, url: str, status: int) -> None:
        self.route(method, url, lambda request: httpx.Response(status))

    def fail(self, method: str, url: str) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        self.route(method, url, handler)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(self._key(request.method, request.url))
        if handler is None:
            return httpx.Response(404)
        return handler(request)

    def calls(self, method: str, url: str) -> list[httpx.Request]:
        key = self._key(method, url)
        return [r for r in self.requests if self._key(r.method, r.url) == key]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture(autouse=True)
def captured_logs() -> Generator[list[dict[str, Any]], None, None]:
    """Capture structlog events instead of rendering them."""
    with structlog.testing.capture_logs() as logs:
        yield logs


@pytest.fixture
def fake_clock() -> FakeClock:
    """Manually advanced clock for cache tests."""
    return FakeClock()


@pytest.fixture
def linux_platform() -> PlatformInfo:
    """Linux amd64 platform."""
    return PlatformInfo(os=OperatingSystem.LINUX, arch="amd64")


@pytest.fixture
def provider_config() -> ProviderConfig:
    """Provider config pointing at test hosts."""
    return ProviderConfig(
        catalog_url=CATALOG_URL,
        legacy_version_url=LEGACY_URL,
        patch_manifest_url=MANIFEST_URL,
        archive_base_url=ARCHIVE_BASE,
    )


@pytest.fixture
def sample_catalog() -> dict[str, Any]:
    """Catalog payload with release and beta branches."""
    return {
        "hytale": {
            "release": {
                "windows": {
                    "v7-windows-amd64.pwr": "https://cdn.test/release/v7-windows-amd64.pwr",
                    "v8-windows-amd64.pwr": "https://cdn.test/release/v8-windows-amd64.pwr",
                },
                "linux": {
                    "v6-linux-amd64.pwr": "https://cdn.test/release/v6-linux-amd64.pwr",
                    "v8-linux-amd64.pwr": "https://cdn.test/release/v8-linux-amd64.pwr",
                    "v7-linux-amd64.pwr": "https://cdn.test/release/v7-linux-amd64.pwr",
                    "checksums.txt": "https://cdn.test/release/checksums.txt",
                },
                "mac": {
                    "v8-darwin-arm64.pwr": "https://cdn.test/release/v8-darwin-arm64.pwr",
                },
            },
            "beta": {
                "linux": {
                    "notes.txt": "https://cdn.test/beta/notes.txt",
                },
            },
        }
    }


@pytest.fixture
def sample_patch_manifest() -> dict[str, Any]:
    """Patch manifest payload; build 8 is a proper delta from 7."""
    return {
        "patches": {
            "8": {
                "original_url": "https://cdn.test/full/8.pwr",
                "patch_url": "https://cdn.test/delta/7-8.pwr",
                "patch_hash": "ab" * 32,
                "from": 7,
                "proper_patch": True,
                "patch_note": "Build 8 hotfix",
            },
            "7": {
                "original_url": "https://cdn.test/full/7.pwr",
                "patch_url": None,
                "patch_hash": None,
                "from": None,
                "proper_patch": False,
                "patch_note": None,
            },
        }
    }


@pytest.fixture
def fake_provider() -> FakeProvider:
    """Empty request router; tests register the routes they need."""
    return FakeProvider()


@pytest.fixture
def make_client(
    provider_config: ProviderConfig,
    linux_platform: PlatformInfo,
    fake_provider: FakeProvider,
    fake_clock: FakeClock,
) -> Callable[..., ManifestClient]:
    """Factory for manifest clients wired to the fake provider."""

    def factory(
        platform: PlatformInfo | None = None,
        cache: CatalogCache | None = None,
        config: ProviderConfig | None = None,
    ) -> ManifestClient:
        config = config or provider_config
        return ManifestClient(
            config=config,
            platform=platform or linux_platform,
            cache=cache or CatalogCache(ttl=config.catalog_ttl, clock=fake_clock),
            transport=fake_provider.transport,
        )

    return factory


# Pytest configuration
def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest settings."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list) -> None:
    """Add the unit marker to every test not marked as integration."""
    for item in items:
        if not any(marker.name == "integration" for marker in item.iter_markers()):
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def mock_console() -> Mock:
    """Create standardized mock Rich console for CLI testing.

    Printed text is stripped of Rich markup, kept in ``printed_lines`` and
    echoed to stdout so Click's runner captures it.
    """
    import re
    import sys

    console = Mock()
    console.printed_lines = []

    def track_print(text: object = "", **kwargs: object) -> None:
        clean_text = re.sub(r"\[/?[^\]]*\]", "", str(text))
        console.printed_lines.append(clean_text)
        print(clean_text, file=sys.stdout)

    console.print.side_effect = track_print
    return console


@pytest.fixture
def cli_config(temp_dir: Path, provider_config: ProviderConfig) -> AppConfig:
    """App config rooted in a temporary directory."""
    return AppConfig(
        config_dir=temp_dir / "config",
        launcher_config=temp_dir / "config" / "launcher.json",
        provider=provider_config,
    )


@pytest.fixture
def cli_context(cli_config: AppConfig, mock_console: Mock) -> dict[str, Any]:
    """Context object the CLI group would build."""
    return {
        "config": cli_config,
        "console": mock_console,
        "verbose": False,
        "debug": False,
    }
