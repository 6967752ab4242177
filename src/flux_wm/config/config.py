"""
Configuration management for the Flux window manager.

Handles:
- Loading/saving configuration from JSON files
- Default configuration paths
- Runtime configuration updates
- Parsing the move-modifier setting into a modifier mask
"""

import json
import os
from pathlib import Path
from dataclasses import dataclass, field, asdict, fields
from typing import Dict, Optional, Any, Tuple
import logging

from ..core.models import DecorationMode, Modifier

logger = logging.getLogger(__name__)


# Default configuration paths
XDG_CONFIG_HOME = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
CONFIG_DIR = Path(XDG_CONFIG_HOME) / "flux-wm"
CONFIG_FILE = CONFIG_DIR / "config.json"

Color = Tuple[float, float, float, float]


@dataclass
class ThemeConfig:
    """Decoration metrics and colors."""
    border_px: int = 2
    titlebar_px: int = 28
    button_width: int = 18
    button_height: int = 14
    button_pad: int = 6
    color_title_active: Color = (0.12, 0.41, 0.73, 1.0)
    color_title_inactive: Color = (0.21, 0.21, 0.21, 1.0)
    color_border: Color = (0.08, 0.08, 0.08, 1.0)
    color_minimize_button: Color = (0.96, 0.77, 0.17, 1.0)
    color_background: Color = (0.0, 0.5019608, 0.5019608, 1.0)
    color_taskbar: Color = (0.7529, 0.7529, 0.7529, 1.0)


@dataclass
class InputConfig:
    """Pointer interaction settings."""
    min_content_width: int = 120
    min_content_height: int = 80
    # "alt", "super", "ctrl" or "alt+super"
    move_modifier: str = "alt+super"
    # App-id substring of the terminal-style client that gets wider grab zones
    terminal_app_id: str = "foot"
    terminal_drag_height: int = 32
    terminal_drag_side_pad: int = 6
    # None = honor the client's request; "server"/"client" forces the mode
    decoration_mode: Optional[str] = None


@dataclass
class AnimationConfig:
    """Minimize/restore tween settings."""
    minimize_duration_ms: int = 180
    restore_duration_ms: int = 180
    min_scale: float = 0.12
    max_scale: float = 0.35
    minimized_alpha: float = 0.35
    min_alpha: float = 0.15


@dataclass
class TaskbarConfig:
    """Taskbar metrics."""
    height: int = 30
    margin: int = 6
    button_height: int = 22
    button_min_width: int = 110
    button_max_width: int = 240
    text_pad_x: int = 8
    glyph_width: int = 5
    glyph_height: int = 7
    text_scale: int = 1


@dataclass
class GlobalConfig:
    """Global configuration options."""
    # Enable verbose logging
    verbose: bool = False
    # Log file path (empty = stderr only)
    log_file: str = ""


@dataclass
class Config:
    """Complete Flux configuration."""
    version: int = 1
    global_config: GlobalConfig = field(default_factory=GlobalConfig)
    theme: ThemeConfig = field(default_factory=ThemeConfig)
    input: InputConfig = field(default_factory=InputConfig)
    animation: AnimationConfig = field(default_factory=AnimationConfig)
    taskbar: TaskbarConfig = field(default_factory=TaskbarConfig)

    @property
    def move_modifier_mask(self) -> Modifier:
        return parse_modifier_mask(self.input.move_modifier)

    @property
    def forced_decoration_mode(self) -> Optional[DecorationMode]:
        mode = self.input.decoration_mode
        if mode == "server":
            return DecorationMode.SERVER_SIDE
        if mode == "client":
            return DecorationMode.CLIENT_SIDE
        return None


SECTIONS = {
    "global_config": GlobalConfig,
    "theme": ThemeConfig,
    "input": InputConfig,
    "animation": AnimationConfig,
    "taskbar": TaskbarConfig,
}


class ConfigError(Exception):
    """Configuration-related error."""
    pass


class ConfigManager:
    """
    Manages Flux configuration files.

    Handles loading, saving, and modifying configuration.
    Supports runtime updates that persist to disk.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize the config manager.

        Args:
            config_dir: Override default config directory
        """
        self.config_dir = config_dir or CONFIG_DIR
        self.config_file = self.config_dir / "config.json"

        self._config: Optional[Config] = None

    def ensure_config_dir(self) -> None:
        """Create config directory if it doesn't exist."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def load_config(self) -> Config:
        """
        Load configuration from file.

        Creates default config if file doesn't exist.

        Returns:
            Loaded or default configuration
        """
        if self._config is not None:
            return self._config

        if self.config_file.exists():
            try:
                with open(self.config_file, "r") as f:
                    data = json.load(f)
                self._config = self._parse_config(data)
                logger.info(f"Loaded config from {self.config_file}")
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                logger.error(f"Error loading config: {e}")
                logger.info("Using default configuration")
                self._config = Config()
        else:
            logger.info("Config file not found, using defaults")
            self._config = Config()

        return self._config

    def _parse_config(self, data: Dict[str, Any]) -> Config:
        """Parse config dict into Config object."""
        if not isinstance(data, dict):
            raise TypeError("config root must be an object")

        sections = {}
        for name, section_cls in SECTIONS.items():
            sections[name] = _parse_section(section_cls, data.get(name, {}))

        return Config(version=data.get("version", 1), **sections)

    def save_config(self, config: Optional[Config] = None) -> None:
        """
        Save configuration to file.

        Args:
            config: Config to save (uses current if None)
        """
        if config is not None:
            self._config = config

        if self._config is None:
            raise ConfigError("No configuration to save")

        self.ensure_config_dir()

        data = {"version": self._config.version}
        for name in SECTIONS:
            data[name] = asdict(getattr(self._config, name))

        with open(self.config_file, "w") as f:
            json.dump(data, f, indent=2)

        logger.info(f"Saved config to {self.config_file}")

    # === Configuration Modification ===

    def update_section(self, section: str, **kwargs) -> None:
        """
        Update fields of one configuration section and persist.

        Args:
            section: Section name (e.g. "theme", "taskbar")
            **kwargs: Fields to update

        Raises:
            ConfigError: If the section or a field doesn't exist, or a
                value has the wrong type
        """
        if section not in SECTIONS:
            raise ConfigError(f"Unknown config section '{section}'")

        defaults = SECTIONS[section]()
        updates = {}
        for key, value in kwargs.items():
            if not hasattr(defaults, key):
                raise ConfigError(f"Unknown field '{key}' in section '{section}'")
            try:
                updates[key] = _coerce_value(key, getattr(defaults, key), value)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Invalid value for {section}.{key}: {e}") from e

        config = self.load_config()
        target = getattr(config, section)
        for key, value in updates.items():
            setattr(target, key, value)
        self.save_config(config)

    def reset_to_defaults(self) -> None:
        """Reset configuration to defaults."""
        self._config = Config()
        self.save_config()


def _parse_section(section_cls, raw: Any):
    """Build a section dataclass, ignoring unknown keys and keeping defaults."""
    if not isinstance(raw, dict):
        raise TypeError(f"section {section_cls.__name__} must be an object")

    defaults = section_cls()
    values = {}
    for f in fields(section_cls):
        if f.name not in raw:
            continue
        values[f.name] = _coerce_value(f.name, getattr(defaults, f.name), raw[f.name])
    return section_cls(**values)


def _coerce_value(name: str, default: Any, value: Any) -> Any:
    """
    Check a value against the type of its default.

    Colors become 4-tuples of floats and ints are accepted for float
    fields. A None default means an optional string.

    Raises:
        ValueError: If the value has the wrong type
    """
    if isinstance(default, tuple):
        if isinstance(value, (str, bytes)):
            raise ValueError(f"color '{name}' must be a list of numbers")
        value = tuple(float(c) for c in value)
        if len(value) != 4:
            raise ValueError(f"color '{name}' must have 4 components")
        return value

    if default is None:
        if value is not None and not isinstance(value, str):
            raise ValueError(f"'{name}' must be a string or null")
        return value

    # bool is an int subclass, check it first
    if isinstance(default, bool) or isinstance(value, bool):
        if not (isinstance(default, bool) and isinstance(value, bool)):
            raise ValueError(f"'{name}' must be {type(default).__name__}, got {value!r}")
        return value
    if isinstance(default, float) and isinstance(value, int):
        return float(value)
    if not isinstance(value, type(default)):
        raise ValueError(f"'{name}' must be {type(default).__name__}, got {value!r}")
    return value


def load_config(config_dir: Optional[Path] = None) -> Config:
    """
    Convenience function to load configuration.

    Args:
        config_dir: Override default config directory

    Returns:
        Loaded configuration
    """
    manager = ConfigManager(config_dir)
    return manager.load_config()


def parse_modifier_mask(name: Optional[str]) -> Modifier:
    """
    Parse a move-modifier setting.

    Unknown or empty values fall back to alt+super, which works in both
    nested (VM) and bare-metal sessions.
    """
    default = Modifier.ALT | Modifier.LOGO
    if not name:
        return default

    name = name.strip().lower()
    if name in ("alt", "option"):
        return Modifier.ALT
    if name in ("super", "logo", "cmd", "command"):
        return Modifier.LOGO
    if name in ("ctrl", "control"):
        return Modifier.CTRL
    if name in ("alt+super", "super+alt", "alt_or_super"):
        return default

    logger.warning(f"Unknown move modifier '{name}', using alt+super")
    return default
