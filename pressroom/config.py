"""Load and validate .pressroom/config.yaml."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


# Default config values
DEFAULTS: dict[str, Any] = {
    "database": ".pressroom/content.db",
    "compile": {
        "max_concurrency": None,
        "external_link_indicator": "↗",
    },
    "social": {
        "domains": ["twitter.com", "x.com"],
        "endpoint": "https://cdn.syndication.twimg.com/tweet-result",
        "timeout": 10.0,
        "fixtures": None,
    },
    "watch": {
        "source": "posts",
        "output": "build",
    },
}


class ConfigError(Exception):
    """Raised when config is invalid or missing."""


def _deep_merge(base: dict, override: dict) -> dict:
    """Merge override into base recursively. Override wins on conflicts."""
    result = base.copy()
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _validate(config: dict) -> None:
    """Validate field types in config."""
    for section in ("compile", "social", "watch"):
        if not isinstance(config.get(section), dict):
            raise ConfigError(f"'{section}' must be a mapping")

    if not isinstance(config.get("database"), str):
        raise ConfigError("'database' must be a path string")

    limit = config["compile"].get("max_concurrency")
    if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int) or limit < 1):
        raise ConfigError(
            f"'compile.max_concurrency' must be a positive integer or null, got {limit!r}"
        )

    domains = config["social"].get("domains")
    if not isinstance(domains, list) or not domains or not all(
        isinstance(d, str) and d for d in domains
    ):
        raise ConfigError("'social.domains' must be a non-empty list of domain names")

    timeout = config["social"].get("timeout")
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigError(f"'social.timeout' must be a positive number, got {timeout!r}")


def default_config() -> dict:
    """Return a fresh copy of DEFAULTS for callers without a project root."""
    return _deep_merge(DEFAULTS, {})


def load_config(project_root: Path | None = None) -> dict:
    """Load config from .pressroom/config.yaml under project_root.

    Falls back to cwd if project_root is None. Merges with DEFAULTS
    so callers always get a full config dict.
    """
    root = Path(project_root) if project_root else Path.cwd()
    config_path = root / ".pressroom" / "config.yaml"

    if not config_path.exists():
        raise ConfigError(f"Config not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f)

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config must be a YAML mapping, got {type(raw).__name__}")

    config = _deep_merge(DEFAULTS, raw)
    _validate(config)
    return config


def resolve_paths(config: dict, project_root: Path) -> dict[str, Path]:
    """Resolve database, fixture and watch paths relative to project_root.

    Returns a flat dict: {database: Path, watch_source: Path,
    watch_output: Path, social_fixtures: Path | None}.
    """
    fixtures = config["social"].get("fixtures")
    return {
        "database": project_root / config["database"],
        "watch_source": project_root / config["watch"]["source"],
        "watch_output": project_root / config["watch"]["output"],
        "social_fixtures": project_root / fixtures if fixtures else None,
    }
