from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict

try:
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[import]

from platformdirs import user_data_dir


log = logging.getLogger(__name__)

APP_NAME = "FacetScope"
APP_AUTHOR = "FacetScope"
DATA_DIR = Path(user_data_dir(APP_NAME, APP_AUTHOR))
SETTINGS_PATH = DATA_DIR / "settings.json"
DEFAULTS_PATH = Path(__file__).with_name("defaults.toml")
RECORDS_ENV = "FACETSCOPE_RECORDS"
_DEFAULTS_CACHE: Dict[str, Any] | None = None


def _load_defaults() -> Dict[str, Any]:
    global _DEFAULTS_CACHE
    if _DEFAULTS_CACHE is not None:
        return _DEFAULTS_CACHE
    if not DEFAULTS_PATH.exists():
        _DEFAULTS_CACHE = {}
        return _DEFAULTS_CACHE
    try:
        with DEFAULTS_PATH.open("rb") as fh:
            _DEFAULTS_CACHE = tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError):
        log.warning("Could not read %s; using built-in defaults", DEFAULTS_PATH)
        _DEFAULTS_CACHE = {}
    return _DEFAULTS_CACHE


def _int_default(name: str, fallback: int) -> int:
    value = _load_defaults().get(name)
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return fallback


def default_debounce_ms(fallback: int = 150) -> int:
    return _int_default("debounce_ms", fallback)


def default_tooltip_delay_ms(fallback: int = 300) -> int:
    return _int_default("tooltip_delay_ms", fallback)


def default_records_path() -> Path | None:
    raw = _load_defaults().get("records_path") or ""
    return Path(raw).expanduser() if raw else None


@dataclass
class Settings:
    records_path: str = ""
    watch_records: bool = True

    @classmethod
    def load(cls) -> "Settings":
        try:
            if SETTINGS_PATH.exists():
                data = json.loads(SETTINGS_PATH.read_text("utf-8"))
                return cls(**data)
        except (OSError, ValueError, TypeError):
            log.warning("Ignoring unreadable settings file %s", SETTINGS_PATH)
        return cls()

    def save(self) -> None:
        SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
        SETTINGS_PATH.write_text(json.dumps(asdict(self), indent=2), encoding="utf-8")


def resolve_records_path(settings: Settings) -> Path | None:
    env = os.environ.get(RECORDS_ENV)
    if env:
        return Path(env).expanduser()
    if settings.records_path:
        return Path(settings.records_path).expanduser()
    return default_records_path()
