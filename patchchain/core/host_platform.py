"""Host platform detection."""

from __future__ import annotations

import platform
import sys

from patchchain.core.types import OperatingSystem, PlatformInfo

_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
}


def current_os() -> OperatingSystem:
    """Return the operating system of the running interpreter."""
    if sys.platform.startswith(("win32", "cygwin")):
        return OperatingSystem.WINDOWS
    if sys.platform == "darwin":
        return OperatingSystem.DARWIN
    return OperatingSystem.LINUX


def current_arch() -> str:
    """Return the architecture identifier used in archive paths."""
    machine = platform.machine().lower()
    return _ARCH_ALIASES.get(machine, machine)


def detect_platform() -> PlatformInfo:
    """Detect the platform downloads should be planned for."""
    return PlatformInfo(os=current_os(), arch=current_arch())
