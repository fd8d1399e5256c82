"""Unified configuration loaded from .contentkit.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

from contentkit.syndication.models import RSSFeed

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".contentkit.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG = Path.home() / ".config" / "contentkit" / "config.toml"


class OutputConfig(BaseModel):
    """[output] section."""

    directory: str = "./content"


class SyndicationConfig(BaseModel):
    """[syndication] section."""

    fetch_timeout: float = 30.0
    max_items_per_feed: int = Field(default=50, ge=1)
    max_concurrent: int = Field(default=3, ge=1)
    ai_analysis: bool = False


class SEOConfig(BaseModel):
    """[seo] section."""

    enabled: bool = True
    site_name: str | None = None


class ContentKitConfig(BaseModel):
    """Top-level config."""

    output: OutputConfig = Field(default_factory=OutputConfig)
    syndication: SyndicationConfig = Field(default_factory=SyndicationConfig)
    seo: SEOConfig = Field(default_factory=SEOConfig)
    feeds: list[RSSFeed] = Field(default_factory=list)

    @property
    def active_feeds(self) -> list[RSSFeed]:
        return [f for f in self.feeds if f.is_active]


def load_config(path: Path | str | None = None) -> ContentKitConfig:
    """Load config from TOML file, falling back to defaults.

    Search order:
    1. Explicit path (if provided)
    2. .contentkit.toml in CWD
    3. ~/.config/contentkit/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged ContentKitConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG.exists():
            data = _load_toml(GLOBAL_CONFIG)
            logger.info("Loaded config from %s", GLOBAL_CONFIG)

    config = ContentKitConfig.model_validate(data) if data else ContentKitConfig()

    # Overlay environment variables
    config = _apply_env_vars(config)

    return config


def merge_cli_overrides(config: ContentKitConfig, **cli_kwargs: object) -> ContentKitConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "output_directory": ("output", "directory"),
        "fetch_timeout": ("syndication", "fetch_timeout"),
        "max_concurrent": ("syndication", "max_concurrent"),
        "ai_analysis": ("syndication", "ai_analysis"),
        "site_name": ("seo", "site_name"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value

    return ContentKitConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: ContentKitConfig) -> ContentKitConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "CONTENTKIT_OUTPUT_DIR": ("output", "directory"),
        "CONTENTKIT_FETCH_TIMEOUT": ("syndication", "fetch_timeout"),
        "CONTENTKIT_MAX_CONCURRENT": ("syndication", "max_concurrent"),
        "CONTENTKIT_SITE_NAME": ("seo", "site_name"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    ai_raw = os.environ.get("CONTENTKIT_AI_ANALYSIS")
    if ai_raw is not None:
        data["syndication"]["ai_analysis"] = ai_raw.lower() in ("true", "1", "yes")

    return ContentKitConfig.model_validate(data)
