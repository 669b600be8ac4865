"""Configuration loader for Slack DigitalOcean Cost Guardian."""

from __future__ import annotations

import os
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from slack_do_cost_guardian.config.schema import Config


def _parse_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


# Environment variable -> (config path, converter)
ENV_OVERRIDES: dict[str, tuple[tuple[str, ...], Callable[[str], Any]]] = {
    "AWS_REGION": (("aws", "region"), str),
    "CONFIG_SECRET_NAME": (("secrets", "secret_name"), str),
    "DO_API_BASE_URL": (("digitalocean", "api_base_url"), str),
    "DO_PER_PAGE": (("digitalocean", "per_page"), int),
    "DO_FOLLOW_PAGINATION": (("digitalocean", "follow_pagination"), _parse_bool),
    "DO_REQUEST_TIMEOUT": (("digitalocean", "request_timeout"), float),
    "MONTHLY_HOUR_CAP": (("pricing", "monthly_hour_cap"), int),
    "VOLUME_MONTHLY_RATE_PER_GB": (("pricing", "volume_monthly_rate_per_gb"), float),
    "SNAPSHOT_MONTHLY_RATE_PER_GB": (("pricing", "snapshot_monthly_rate_per_gb"), float),
    "SLACK_RESPONSE_TYPE": (("slack", "response_type"), str),
    "SLACK_VERIFY_SIGNATURES": (("slack", "verify_signatures"), _parse_bool),
}


def _merge_overrides(base: dict, override: dict) -> dict:
    """Merge nested config dictionaries; override wins on conflicting leaves."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _merge_overrides(current, value)
        else:
            merged[key] = value
    return merged


def _read_yaml(path: Path) -> dict:
    """Read a YAML mapping, or nothing if the file is absent or empty."""
    if not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _config_dir() -> Path:
    """Locate the config directory: CONFIG_DIR, then the nearest config/ above cwd."""
    if config_dir := os.environ.get("CONFIG_DIR"):
        return Path(config_dir)

    # Lambda bundles config/ next to the package; locally it's at the repo root
    for directory in (Path.cwd(), *Path.cwd().parents):
        if (directory / "config").is_dir():
            return directory / "config"

    return Path("config")


def load_config(
    config_path: str | Path | None = None,
    environment: str | None = None,
) -> Config:
    """
    Load configuration for one deployment environment.

    Layers, later ones winning:
    1. config.yaml
    2. config.<environment>.yaml (e.g. config.prod.yaml)
    3. Environment variables listed in ENV_OVERRIDES

    Args:
        config_path: Config directory. If None, uses CONFIG_DIR or searches for config/.
        environment: dev, staging or prod. Defaults to CONFIG_ENV, then 'dev'.

    Returns:
        Config: Validated configuration object.
    """
    config_dir = Path(config_path) if config_path else _config_dir()
    environment = environment or os.environ.get("CONFIG_ENV", "dev")

    # Base config, then the environment-specific file on top
    config_data = _read_yaml(config_dir / "config.yaml")
    config_data = _merge_overrides(config_data, _read_yaml(config_dir / f"config.{environment}.yaml"))

    # Environment variables win over both files
    config_data = _apply_env_overrides(config_data)
    config_data["environment"] = environment

    return Config(**config_data)


def _apply_env_overrides(config_data: dict) -> dict:
    """Set every config value that has an environment variable override."""
    for env_var, (path, convert) in ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        # Unset and empty variables leave the file value alone
        if not value:
            continue

        # Walk to the parent section, creating it if the YAML omitted it
        section = config_data
        for key in path[:-1]:
            section = section.setdefault(key, {})

        try:
            section[path[-1]] = convert(value)
        except ValueError as e:
            raise ValueError(f"Invalid value for {env_var}: {value!r}") from e

    return config_data


@lru_cache(maxsize=1)
def get_cached_config() -> Config:
    """
    Get cached configuration singleton.

    Lambda keeps the module loaded between warm invocations, so config is read once.
    """
    return load_config()
