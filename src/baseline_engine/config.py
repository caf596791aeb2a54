"""
Configuration for baseline runs.

Pages are read from an env.json-style file that maps page names to URLs
under a named property, e.g. {"prod_urls": {"homepage": "https://..."}}.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from .models import BaselineKind, PageTarget

logger = logging.getLogger(__name__)

DEFAULT_URLS_PROPERTY = "prod_urls"

# Baseline directory per kind when none is given
DEFAULT_BASELINE_DIRECTORIES = {
    BaselineKind.META_TAGS: Path("fixtures/seo/meta_tag_baselines"),
    BaselineKind.JSON_LD: Path("fixtures/seo/seo_json_tags_baselines"),
}


class ConfigError(ValueError):
    """Raised when configuration cannot be loaded or is invalid."""

    pass


@dataclass
class AuditConfig:
    """
    Explicit settings for one run, passed to the job runner at construction.
    """

    pages: list[PageTarget]
    kind: BaselineKind = BaselineKind.META_TAGS
    baseline_directory: Path | None = None  # Defaults per kind
    output_directory: Path = Path("reports/seo")
    max_concurrency: int = 3
    timeout: int = 60000  # Milliseconds, per navigation attempt
    settle_delay: float = 5.0  # Seconds
    rendered: bool = True  # Load pages in a browser rather than plain HTTP
    user_agent: str | None = None

    def __post_init__(self):
        self.kind = BaselineKind.parse(self.kind)
        if self.baseline_directory is None:
            self.baseline_directory = DEFAULT_BASELINE_DIRECTORIES[self.kind]
        self.baseline_directory = Path(self.baseline_directory)
        self.output_directory = Path(self.output_directory)
        if self.max_concurrency < 1:
            raise ConfigError(f"max_concurrency must be at least 1: {self.max_concurrency}")


def load_config_file(config_path: str | Path, property: str | None = None):
    """
    Load a JSON configuration file.

    Args:
        config_path: Path to the JSON file
        property: Top-level property to return (whole document when None)

    Returns:
        The parsed document or the requested property

    Raises:
        ConfigError: If the file cannot be read or parsed, or the property is missing
    """
    path = Path(config_path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error("Error loading config from %s: %s", path, e)
        raise ConfigError(f"Error loading config from {path}: {e}") from e

    if property is None:
        return config

    if not isinstance(config, dict) or property not in config:
        raise ConfigError(f"Property '{property}' not found in {path}")

    return config[property]


def load_pages(config_path: str | Path, property: str = DEFAULT_URLS_PROPERTY) -> list[PageTarget]:
    """
    Load the pages to check from an env.json-style file.

    Raises:
        ConfigError: If the property is not a name -> URL object or a URL is invalid
    """
    urls = load_config_file(config_path, property)

    if not isinstance(urls, dict):
        raise ConfigError(
            f"Invalid URL configuration. Expected an object at property '{property}' in {config_path}."
        )

    try:
        return [PageTarget(name=name, url=url) for name, url in urls.items()]
    except ValueError as e:
        raise ConfigError(f"Invalid page in {config_path}: {e}") from e
