"""Configuration defaults, .env loading, and the persisted settings file.

WHY: Reading speed, ramp length, window appearance, and key bindings are
personal preferences. They must survive restarts (the speed keys rewrite
the target WPM) and be editable by hand, while the defaults stay easy to
find and override without touching code.

HOW: python-dotenv loads the .env file on import so environment variables
can override the built-in defaults. Settings are three dataclasses
(SpeedConfig, DisplayConfig, HotkeyConfig) grouped under Config. The file
on disk is JSON, validated with jsonschema against config_schema.json
before it is turned into dataclasses.

RULES:
- Missing config file → defaults are written to disk and returned
- Missing keys in the file → filled in from defaults
- Invalid JSON or schema violations → ValueError with a readable message
- The config path can be overridden with SPEED_READER_CONFIG
- Malformed SPEED_READER_* overrides are logged and ignored
- Only speed.* is consumed by the engine; display.* and hotkeys.* are
  consumed by the host surfaces
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema
from dotenv import load_dotenv

from speed_reader.core.engine import MAX_WPM, MIN_WPM

# Load .env from the project root (where the app is run from)
load_dotenv()

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Environment defaults
# ---------------------------------------------------------------------------


def _env_int(name: str, default: int) -> int:
    """Read an integer from the environment, falling back on bad values."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %d", name, raw, default)
        return default


def _env_log_level(name: str, default: str = "INFO") -> str:
    """Read a logging level name from the environment, falling back on bad values."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        logger.warning("Ignoring %s=%r: unknown log level, using %s", name, raw, default)
        return default
    return level


DEFAULT_START_WPM = _env_int("SPEED_READER_START_WPM", 300)
DEFAULT_TARGET_WPM = _env_int("SPEED_READER_TARGET_WPM", 400)
DEFAULT_WARMUP_WORDS = _env_int("SPEED_READER_WARMUP_WORDS", 10)
DEFAULT_STEP_WPM = 25
LOG_LEVEL = _env_log_level("SPEED_READER_LOG_LEVEL")

APP_DIR_NAME = "speed-reader"
CONFIG_FILENAME = "config.json"

_SCHEMA_PATH = Path(__file__).resolve().parent / "config_schema.json"

_CACHED_SCHEMA: Optional[dict] = None


def _get_schema() -> dict:
    """Load and cache the config JSON schema."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


# ---------------------------------------------------------------------------
# Settings dataclasses
# ---------------------------------------------------------------------------


@dataclass
class SpeedConfig:
    """Pacing knobs handed to the engine.

    RULES:
    - start_wpm / target_wpm: ramp endpoints
    - warmup_words: word advances over which the ramp completes
    - min_wpm / max_wpm: clamp bounds for any speed change
    - step_wpm: change per speed-up/speed-down key press
    """

    start_wpm: int = DEFAULT_START_WPM
    target_wpm: int = DEFAULT_TARGET_WPM
    warmup_words: int = DEFAULT_WARMUP_WORDS
    min_wpm: int = MIN_WPM
    max_wpm: int = MAX_WPM
    step_wpm: int = DEFAULT_STEP_WPM


@dataclass
class DisplayConfig:
    """Appearance of the reading window."""

    font_size: float = 48.0
    orp_position: float = 0.33  # fraction of window width where the focus letter sits
    width: int = 700
    height: int = 90
    background_color: str = "#141419"
    text_color: str = "#c8c8d2"
    focus_color: str = "#ff6464"


@dataclass
class HotkeyConfig:
    """Key names bound to each reader action.

    Names are lowercase tkinter keysyms ("space", "up", "escape").
    start_reading is a chord and is informational for platform triggers.
    """

    start_reading: List[str] = field(default_factory=lambda: ["ctrl", "shift", "r"])
    pause_resume: List[str] = field(default_factory=lambda: ["space"])
    speed_up: List[str] = field(default_factory=lambda: ["up"])
    speed_down: List[str] = field(default_factory=lambda: ["down"])
    restart: List[str] = field(default_factory=lambda: ["r"])
    seek_back: List[str] = field(default_factory=lambda: ["left"])
    seek_forward: List[str] = field(default_factory=lambda: ["right"])
    quit: List[str] = field(default_factory=lambda: ["escape"])


@dataclass
class Config:
    """Complete application settings, one section per consumer."""

    speed: SpeedConfig = field(default_factory=SpeedConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    hotkeys: HotkeyConfig = field(default_factory=HotkeyConfig)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Config:
        """Build a Config from a (possibly partial) dict.

        WHY: Users hand-edit the file and older files may predate newer
        keys; anything left out should fall back to its default.

        HOW: Validates against the JSON schema, then overlays each section
        onto a default instance of its dataclass.

        RULES:
        - Raises ValueError on schema violations (unknown keys, bad types)
        - Absent sections and keys keep their defaults
        """
        try:
            jsonschema.validate(instance=data, schema=_get_schema())
        except jsonschema.ValidationError as e:
            location = ".".join(str(p) for p in e.absolute_path) or "<root>"
            raise ValueError(
                "Invalid configuration at {}: {}".format(location, e.message)
            ) from e

        return cls(
            speed=_overlay(SpeedConfig, data.get("speed", {})),
            display=_overlay(DisplayConfig, data.get("display", {})),
            hotkeys=_overlay(HotkeyConfig, data.get("hotkeys", {})),
        )


def _overlay(section_cls: type, values: Dict[str, Any]) -> Any:
    known = {f.name for f in fields(section_cls)}
    return section_cls(**{k: v for k, v in values.items() if k in known})


# ---------------------------------------------------------------------------
# File location and persistence
# ---------------------------------------------------------------------------


def default_config_path() -> Path:
    """Resolve where the settings file lives.

    RULES:
    - SPEED_READER_CONFIG wins if set
    - Otherwise $XDG_CONFIG_HOME/speed-reader/config.json
    - XDG_CONFIG_HOME defaults to ~/.config
    """
    override = os.getenv("SPEED_READER_CONFIG", "").strip()
    if override:
        return Path(override).expanduser()
    base = os.getenv("XDG_CONFIG_HOME", "").strip()
    config_dir = Path(base).expanduser() if base else Path.home() / ".config"
    return config_dir / APP_DIR_NAME / CONFIG_FILENAME


def save_config(config: Config, path: Optional[Path] = None) -> Path:
    """Write ``config`` as pretty JSON, creating parent directories."""
    target = path or default_config_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(config.to_dict(), indent=2) + "\n", encoding="utf-8")
    logger.debug("Saved config to %s", target)
    return target


def load_config(path: Optional[Path] = None) -> Config:
    """Load settings from disk, writing defaults on first run.

    WHY: The reader should work out of the box, and the first launch
    should leave behind a file the user can edit.

    HOW: Reads and parses the JSON file, then validates and merges it via
    Config.from_dict(). A missing file is created from defaults.

    RULES:
    - Raises ValueError if the file is not valid JSON or fails the schema
    - Raises ValueError if the file cannot be read
    """
    target = path or default_config_path()

    if not target.exists():
        config = Config()
        try:
            save_config(config, target)
            logger.info("Wrote default config to %s", target)
        except OSError as e:
            logger.warning("Could not write default config to %s: %s", target, e)
        return config

    try:
        raw = target.read_text(encoding="utf-8")
    except OSError as e:
        raise ValueError("Could not read config file {}: {}".format(target, e)) from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError("Config file {} is not valid JSON: {}".format(target, e)) from e

    config = Config.from_dict(data)
    logger.info("Loaded config from %s", target)
    return config
