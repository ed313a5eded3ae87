from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .core.matcher import DuplicatePolicy

log = logging.getLogger(__name__)

APP_DIR_NAME = "scraptriage"
CONFIG_DIR_ENV = "SCRAPTRIAGE_CONFIG_DIR"
SETTINGS_FILENAME = "settings.json"


@dataclass(frozen=True)
class TriageSettings:
    brightness_threshold: int = 45
    ocr_threshold: int = 160
    ocr_invert: bool = False
    match_threshold: float = 0.55
    min_line_length: int = 3
    duplicate_policy: str = DuplicatePolicy.SEPARATE.value
    strict_fallback: bool = False
    full_frame_fallback: bool = True
    catalog_path: Optional[str] = None
    tesseract_cmd: Optional[str] = None
    debug_ocr: bool = False


DEFAULT_SETTINGS = TriageSettings()


def config_dir() -> Path:
    """
    Per-user configuration directory.

    Windows: %APPDATA%\\scraptriage
    macOS:  ~/Library/Application Support/scraptriage
    Linux:  $XDG_CONFIG_HOME/scraptriage or ~/.config/scraptriage

    SCRAPTRIAGE_CONFIG_DIR overrides all of the above.
    """
    override = os.getenv(CONFIG_DIR_ENV)
    if override:
        return Path(override)
    if sys.platform.startswith("win"):
        base = os.getenv("APPDATA") or str(Path.home())
        return Path(base) / APP_DIR_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME
    base = os.getenv("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


def config_path() -> Path:
    return config_dir() / SETTINGS_FILENAME


# ---------------------------------------------------------------------------
# Field validation
# ---------------------------------------------------------------------------


def _clamp_int(minimum: int, maximum: int) -> Callable[[Any], int]:
    def _coerce(value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError("expected an integer")
        parsed = int(value)
        return max(minimum, min(maximum, parsed))

    return _coerce


def _clamp_float(minimum: float, maximum: float) -> Callable[[Any], float]:
    def _coerce(value: Any) -> float:
        if isinstance(value, bool):
            raise ValueError("expected a number")
        parsed = float(value)
        return max(minimum, min(maximum, parsed))

    return _coerce


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        raw = value.strip().lower()
        if raw in {"1", "true", "yes", "y", "on"}:
            return True
        if raw in {"0", "false", "no", "n", "off"}:
            return False
    if isinstance(value, int):
        return bool(value)
    raise ValueError(f"expected a boolean, got {value!r}")


def _as_policy(value: Any) -> str:
    return DuplicatePolicy(str(value).strip().lower()).value


def _as_optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    raw = str(value).strip()
    if not raw or raw.lower() in {"none", "null", "default"}:
        return None
    return raw


_FIELD_COERCERS: Dict[str, Callable[[Any], Any]] = {
    "brightness_threshold": _clamp_int(0, 255),
    "ocr_threshold": _clamp_int(0, 255),
    "ocr_invert": _as_bool,
    "match_threshold": _clamp_float(0.0, 1.0),
    "min_line_length": _clamp_int(0, 80),
    "duplicate_policy": _as_policy,
    "strict_fallback": _as_bool,
    "full_frame_fallback": _as_bool,
    "catalog_path": _as_optional_str,
    "tesseract_cmd": _as_optional_str,
    "debug_ocr": _as_bool,
}

SETTING_NAMES = tuple(f.name for f in fields(TriageSettings))


def settings_from_dict(data: Dict[str, Any]) -> TriageSettings:
    """
    Merge a raw mapping over the defaults.

    Unknown keys are ignored; an invalid value falls back to its default.
    """
    values: Dict[str, Any] = {}
    for name in SETTING_NAMES:
        if name not in data:
            continue
        try:
            values[name] = _FIELD_COERCERS[name](data[name])
        except (TypeError, ValueError) as exc:
            log.warning("Invalid setting %s=%r (%s); using default", name, data[name], exc)
    return replace(DEFAULT_SETTINGS, **values)


def load_settings(path: Optional[Path] = None) -> TriageSettings:
    path = path or config_path()
    if not path.is_file():
        return DEFAULT_SETTINGS
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        log.warning("Could not read settings %s: %s; using defaults", path, exc)
        return DEFAULT_SETTINGS
    if not isinstance(data, dict):
        log.warning("Settings file %s must hold a JSON object; using defaults", path)
        return DEFAULT_SETTINGS
    return settings_from_dict(data)


def save_settings(settings: TriageSettings, path: Optional[Path] = None) -> Path:
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(settings), indent=2) + "\n", encoding="utf-8")
    return path


def reset_settings(path: Optional[Path] = None) -> None:
    path = path or config_path()
    path.unlink(missing_ok=True)


def update_setting(settings: TriageSettings, name: str, raw: Any) -> TriageSettings:
    """
    Return a copy of `settings` with one field replaced.

    Raises ValueError for an unknown name or an invalid value.
    """
    key = name.strip().lower().replace("-", "_")
    if key not in _FIELD_COERCERS:
        raise ValueError(
            f"Unknown setting {name!r}; expected one of: {', '.join(SETTING_NAMES)}"
        )
    try:
        value = _FIELD_COERCERS[key](raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid value for {key}: {raw!r}") from exc
    return replace(settings, **{key: value})
