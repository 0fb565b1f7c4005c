"""Configuration loading for Trade Journal.

Settings live in ``~/.config/tradejournal/config.toml``. A missing or
unreadable file falls back to the defaults below.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Optional

import toml

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "tradejournal"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.toml"
DEFAULT_DB_PATH = CONFIG_DIR / "journal.db"

DEFAULTS: dict[str, dict[str, Any]] = {
    "display": {
        "mode": "pnl",
    },
    "streaks": {
        "continuity": "calendar",
        "distress_threshold": 3,
    },
    "bests": {
        "recent_days": 7,
        "limit": 6,
    },
    "database": {
        "path": str(DEFAULT_DB_PATH),
    },
}


def load_config(path: Optional[Path] = None) -> dict[str, dict[str, Any]]:
    """Load configuration merged over the defaults.

    Args:
        path: Config file to read. Defaults to ``DEFAULT_CONFIG_PATH``.

    Returns:
        Dictionary of sections, each a dictionary of settings.
    """
    config = copy.deepcopy(DEFAULTS)
    path = path or DEFAULT_CONFIG_PATH

    if not path.exists():
        logger.debug("No config file at %s, using defaults", path)
        return config

    try:
        loaded = toml.load(path)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return config

    for section, values in loaded.items():
        if isinstance(values, dict):
            config.setdefault(section, {}).update(values)
    return config


def get_setting(config: dict[str, dict[str, Any]], section: str, key: str) -> Any:
    """Read a setting, falling back to its default."""
    value = config.get(section, {}).get(key)
    if value is None:
        return DEFAULTS.get(section, {}).get(key)
    return value


def get_db_path(config: dict[str, dict[str, Any]]) -> Path:
    """Database path from config with ``~`` expanded."""
    return Path(get_setting(config, "database", "path")).expanduser()
