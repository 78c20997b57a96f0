"""Persistent JSON config helpers.

Stores the hidden-file preference, file-list width, and an optional theme
file path. All access is defensive: malformed or missing config falls back
safely.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from platformdirs import user_config_dir

from .files import DEFAULT_LEFT_WIDTH
from .theme import APP_NAME, DEFAULT_THEME_PATH

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON; write errors are logged only."""
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("cannot write config %s: %s", CONFIG_PATH, exc)


def load_show_hidden() -> bool:
    """Return persisted hidden-file visibility; only real booleans count."""
    value = load_config().get("show_hidden")
    return value if isinstance(value, bool) else False


def save_show_hidden(show_hidden: bool) -> None:
    config = load_config()
    config["show_hidden"] = bool(show_hidden)
    save_config(config)


def load_left_width() -> int:
    value = load_config().get("left_width")
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return DEFAULT_LEFT_WIDTH
    return value


def load_theme_path() -> Path:
    """Theme file named in config, else the default theme location."""
    value = load_config().get("theme_file")
    if isinstance(value, str) and value.strip():
        return Path(value.strip()).expanduser()
    return DEFAULT_THEME_PATH
