"""
Settings API Module.

Key/value user settings stored as JSON, overlaid on DEFAULTS. Values are
kept as strings like the file stores them; the typed getters convert.

The file location comes from the PORTWHO_CONFIG environment variable, then
the PORTWHO_CONFIG_PATH Django setting, then ~/.portwho/settings.json.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

log = logging.getLogger(__name__)

DEFAULTS: Dict[str, str] = {
    # socket scan
    "scan.protocols": "tcp,tcp6,udp,udp6",
    "scan.strict": "1",  # "1": abort on a malformed table line, "0": skip it
    # kill action
    "kill.signal": "SIGTERM",
    "kill.timeout": "3",
    "kill.force": "0",
    # logging
    "log.level": "INFO",
}

_cache: Optional[Dict[str, str]] = None


def config_path() -> Path:
    env = os.environ.get("PORTWHO_CONFIG")
    if env:
        return Path(env).expanduser()
    try:
        from django.conf import settings

        configured = getattr(settings, "PORTWHO_CONFIG_PATH", None)
    except Exception:
        configured = None
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".portwho" / "settings.json"


def _load() -> dict:
    path = config_path()
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f) or {}
    except (OSError, ValueError) as e:
        log.warning("Ignoring unreadable settings file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        log.warning("Ignoring settings file %s: top level is not an object", path)
        return {}
    return {str(k): "" if v is None else str(v) for k, v in data.items()}


def _save(data: dict) -> None:
    path = config_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)
    except OSError as e:
        log.warning("Failed to save settings to %s: %s", path, e)


def reload() -> Dict[str, str]:
    global _cache
    data = dict(DEFAULTS)
    data.update(_load())
    _cache = data
    return _cache


def get(key: str, default: Optional[str] = None) -> Optional[str]:
    """
    Retrieve a raw string setting value.
    """
    data = _cache if _cache is not None else reload()
    if key in data:
        return data[key]
    return default


def set_value(key: str, value) -> None:
    """
    Write one setting to the file and the cache.
    """
    value = "" if value is None else str(value)
    stored = _load()
    stored[key] = value
    _save(stored)
    reload()


def get_bool(key: str, default: bool = False) -> bool:
    val = get(key, None)
    if val is None:
        return default
    v = val.strip().lower()
    return v in ("1", "true", "yes", "on")


def get_int(key: str, default: int = 0) -> int:
    try:
        return int(get(key, str(default)))
    except (TypeError, ValueError):
        log.warning("Setting %s is not an integer, using %s", key, default)
        return default


def get_float(key: str, default: float = 0.0) -> float:
    try:
        return float(get(key, str(default)))
    except (TypeError, ValueError):
        log.warning("Setting %s is not a number, using %s", key, default)
        return default


def get_list(key: str, default: Optional[List[str]] = None) -> List[str]:
    """Comma separated setting as a list, empty items dropped."""
    val = get(key, None)
    if val is None:
        return list(default or [])
    return [item.strip() for item in val.split(",") if item.strip()]
