"""Configuration file management for the cryptofolio CLI."""

from pathlib import Path

import yaml

CONFIG_FILENAME = ".cryptofolio.yaml"
USER_CONFIG_DIR = Path.home() / ".cryptofolio"

VALID_KEYS = {"api_url", "timeout", "retry_attempts", "log_level"}


def config_candidates() -> list[Path]:
    """Config locations in lookup order: project directory, then user."""
    return [Path(CONFIG_FILENAME), USER_CONFIG_DIR / "config.yaml"]


def find_config() -> Path | None:
    """Return the first existing config file, or None."""
    return next((path for path in config_candidates() if path.exists()), None)


def load_config(path: Path | None = None) -> dict:
    """Read ``path`` (or the first config found) as a dict.

    A missing or empty file loads as ``{}``.
    """
    path = path or find_config()
    if path is None or not path.exists():
        return {}
    return yaml.safe_load(path.read_text()) or {}


def save_config(config: dict, path: Path | None = None) -> Path:
    """Write ``config`` as YAML, to the project config file by default."""
    path = path or config_candidates()[0]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(config, default_flow_style=False))
    return path


def get_default_config() -> dict:
    """Get default configuration values."""
    return {
        "api_url": "http://localhost:8000",
        "timeout": 10.0,
        "retry_attempts": 3,
        "log_level": "WARNING",
    }


def resolve_config(overrides: dict | None = None) -> dict:
    """Merge defaults, the config file and explicit overrides.

    Overrides whose value is None are ignored.
    """
    config = get_default_config()
    config.update(load_config())
    for key, value in (overrides or {}).items():
        if value is not None:
            config[key] = value
    return config
