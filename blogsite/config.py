from dataclasses import dataclass, field, fields, replace
from pathlib import Path

import yaml

from blogsite.errors import ConfigError

# ==============================
# DEFAULTS
# ==============================

CONFIG_FILE_NAME = "config.yaml"

DEFAULT_TITLE = "My Blog"
DEFAULT_BASE_URL = "http://localhost:1313/"
DEFAULT_AUTHOR = ""
DEFAULT_LANGUAGE = "en"

# Posts per list page (home, section, taxonomy term)
DEFAULT_PAGINATE = 10

# Words kept in an automatic summary when a post has no <!--more--> marker
DEFAULT_SUMMARY_LENGTH = 70

DEFAULT_RSS_LIMIT = 20

# Sections without an entry in `permalinks` use this pattern; top-level pages use PAGE_PERMALINK
DEFAULT_PERMALINK = "/:section/:slug/"
PAGE_PERMALINK = "/:slug/"

DEFAULT_CONTENT_DIR = "content"
DEFAULT_STATIC_DIR = "static"
DEFAULT_DATA_DIR = "data"
DEFAULT_OUTPUT_DIR = "public"
DEFAULT_PHOTOS_FILE = "photos.csv"

TAXONOMIES = ("tags", "categories")


@dataclass
class SiteConfig:
    title: str = DEFAULT_TITLE
    base_url: str = DEFAULT_BASE_URL
    author: str = DEFAULT_AUTHOR
    language: str = DEFAULT_LANGUAGE
    paginate: int = DEFAULT_PAGINATE
    summary_length: int = DEFAULT_SUMMARY_LENGTH
    rss_limit: int = DEFAULT_RSS_LIMIT
    permalinks: dict = field(default_factory=dict)
    build_drafts: bool = False
    build_future: bool = False
    content_dir: str = DEFAULT_CONTENT_DIR
    static_dir: str = DEFAULT_STATIC_DIR
    data_dir: str = DEFAULT_DATA_DIR
    output_dir: str = DEFAULT_OUTPUT_DIR
    photos_file: str = DEFAULT_PHOTOS_FILE

    def permalink_for(self, section: str) -> str:
        if not section:
            return PAGE_PERMALINK
        return self.permalinks.get(section, DEFAULT_PERMALINK)

    def with_overrides(self, **overrides) -> "SiteConfig":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


_EXPECTED_TYPES = {
    "title": str,
    "base_url": str,
    "author": str,
    "language": str,
    "paginate": int,
    "summary_length": int,
    "rss_limit": int,
    "permalinks": dict,
    "build_drafts": bool,
    "build_future": bool,
    "content_dir": str,
    "static_dir": str,
    "data_dir": str,
    "output_dir": str,
    "photos_file": str,
}


def config_from_dict(data: dict) -> SiteConfig:
    known = {f.name for f in fields(SiteConfig)}
    values = {}
    for key, value in data.items():
        if key not in known:
            continue
        expected = _EXPECTED_TYPES[key]
        # bool is an int subclass; `paginate: true` is still a mistake
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise ConfigError(f"'{key}' must be of type {expected.__name__}, got {value!r}")
        values[key] = value

    for key in ("paginate", "summary_length", "rss_limit"):
        if key in values and values[key] < 1:
            raise ConfigError(f"'{key}' must be at least 1, got {values[key]}")

    permalinks = values.get("permalinks", {})
    for section, pattern in permalinks.items():
        if not isinstance(pattern, str) or not pattern.strip("/"):
            raise ConfigError(f"permalink pattern for section '{section}' must be a non-empty string")

    return SiteConfig(**values)


def load_config(path: Path) -> SiteConfig:
    """
    Reads config.yaml:

    title: Notes
    base_url: https://example.github.io/
    paginate: 5
    permalinks:
      posts: /:year/:month/:slug/

    A missing file gives the defaults.
    """
    path = Path(path)
    if path.is_dir():
        path = path / CONFIG_FILE_NAME
    if not path.exists():
        return SiteConfig()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path}: invalid YAML: {exc}") from exc

    if data is None:
        return SiteConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")

    return config_from_dict(data)
