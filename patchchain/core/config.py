"""Configuration management for patchchain."""

from __future__ import annotations

import json
from pathlib import Path

import structlog
from pydantic import BaseModel, Field, field_validator

logger = structlog.get_logger()


class ProviderConfig(BaseModel):
    """Endpoints and network policy for the catalog providers."""

    catalog_url: str = Field(
        default="https://thecute.cloud/ShipOfYarn/api.php",
        description="Primary catalog endpoint"
    )
    legacy_version_url: str = Field(
        default="https://files.hytalef2p.com/api/version_client",
        description="Legacy latest-version endpoint"
    )
    patch_manifest_url: str = Field(
        default="https://files.hytalef2p.com/api/patch_manifest",
        description="Patch manifest endpoint"
    )
    archive_base_url: str = Field(
        default="https://game-patches.hytale.com/patches",
        description="Base URL for full archives"
    )
    product_key: str = Field(
        default="hytale",
        description="Top-level key of the catalog payload"
    )
    user_agent: str = Field(
        default="patchchain/0.1.0",
        description="User-Agent sent to the providers"
    )
    catalog_timeout: float = Field(default=15.0, description="Catalog request timeout")
    legacy_timeout: float = Field(default=40.0, description="Legacy endpoint timeout")
    manifest_timeout: float = Field(default=10.0, description="Patch manifest timeout")
    probe_timeout: float = Field(default=10.0, description="Archive HEAD probe timeout")
    catalog_ttl: float = Field(
        default=60.0,
        description="Seconds a cached catalog is served without refetching"
    )
    fallback_version: str | None = Field(
        default="v8",
        description="Last known good version used when every provider fails"
    )
    build_name_prefix: str = Field(
        default="HYTALE-Build",
        description="Prefix of display build names"
    )

    @field_validator("catalog_timeout", "legacy_timeout", "manifest_timeout", "probe_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeout values."""
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v

    @field_validator("catalog_ttl")
    @classmethod
    def validate_catalog_ttl(cls, v: float) -> float:
        """Validate catalog freshness window."""
        if v < 0:
            raise ValueError("Catalog TTL must be non-negative")
        return v

    @field_validator("archive_base_url")
    @classmethod
    def validate_archive_base_url(cls, v: str) -> str:
        """Strip the trailing slash so URL templates stay canonical."""
        return v.rstrip("/")


class PlannerConfig(BaseModel):
    """Patch planner policy."""

    max_probe: int = Field(default=50, description="Builds scanned below the latest")
    probe_concurrency: int = Field(
        default=1,
        description="Concurrent archive probes (1 = strictly sequential)"
    )

    @field_validator("max_probe")
    @classmethod
    def validate_max_probe(cls, v: int) -> int:
        """Validate probe depth."""
        if v < 0:
            raise ValueError("Max probe must be non-negative")
        return v

    @field_validator("probe_concurrency")
    @classmethod
    def validate_probe_concurrency(cls, v: int) -> int:
        """Validate probe concurrency."""
        if v < 1:
            raise ValueError("Probe concurrency must be at least 1")
        return v


class AppConfig(BaseModel):
    """Application configuration."""

    config_dir: Path = Field(
        default=Path.home() / ".config" / "patchchain",
        description="Configuration directory"
    )
    launcher_config: Path = Field(
        default=Path.home() / ".config" / "patchchain" / "launcher.json",
        description="Launcher config file holding the installed version"
    )
    branch: str = Field(default="release", description="Default release branch")

    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    planner: PlannerConfig = Field(default_factory=PlannerConfig)

    # Output settings
    output_format: str = Field(
        default="rich",
        description="Output format (rich, json, plain)"
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    def model_post_init(self, __context) -> None:
        """Ensure the configuration directory exists."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def load(cls, config_file: Path | None = None) -> AppConfig:
        """Load configuration from file.

        Args:
            config_file: Path to config file, uses default if None

        Returns:
            Application configuration
        """
        if config_file is None:
            config_file = Path.home() / ".config" / "patchchain" / "config.json"

        if config_file.exists():
            with open(config_file) as f:
                data = json.load(f)
                return cls(**data)

        return cls()

    def save(self, config_file: Path | None = None) -> None:
        """Save configuration to file.

        Args:
            config_file: Path to config file, uses default if None
        """
        if config_file is None:
            config_file = self.config_dir / "config.json"

        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2, default=str)

        logger.info("config_saved", path=str(config_file))

    @field_validator("branch")
    @classmethod
    def validate_branch(cls, v: str) -> str:
        """Validate branch name."""
        if not v.strip():
            raise ValueError("Branch cannot be empty")
        return v

    @field_validator("output_format")
    @classmethod
    def validate_output_format(cls, v: str) -> str:
        """Validate output format."""
        valid_formats = {"rich", "json", "plain"}
        if v not in valid_formats:
            raise ValueError(f"Invalid output format: {v}. Valid formats: {valid_formats}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Valid levels: {valid_levels}")
        return v
