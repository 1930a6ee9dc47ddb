"""Read access to the launcher config holding the installed version.

The launcher persists its settings as a JSON object; the installed client
version lives under ``version_client``. The resolver only ever reads it.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog

logger = structlog.get_logger()


class LocalConfigStore:
    """Launcher config file reader.

    Args:
        config_path: Path to the launcher JSON config
    """

    VERSION_KEY = "version_client"

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path

    def _load(self) -> dict[str, Any] | None:
        if not self.config_path.exists():
            return None

        try:
            with open(self.config_path, encoding="utf-8") as f:
                data: Any = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(
                "launcher_config_load_failed",
                path=str(self.config_path),
                error=str(e),
            )
            return None

        if not isinstance(data, dict):
            logger.warning(
                "launcher_config_invalid_format",
                path=str(self.config_path),
                type=type(data).__name__,
            )
            return None

        return data

    def load_installed_version(self) -> str | None:
        """Return the installed client version, or None when unknown."""
        data = self._load()
        if data is None:
            return None

        version = data.get(self.VERSION_KEY)
        if not isinstance(version, str) or not version.strip():
            return None

        return version.strip()
