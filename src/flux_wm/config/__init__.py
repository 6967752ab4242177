"""
Configuration module for the Flux window manager.

Provides persistent configuration for decoration metrics, input behaviour,
animation timing and taskbar layout.
"""

from .config import (
    Config,
    GlobalConfig,
    ThemeConfig,
    InputConfig,
    AnimationConfig,
    TaskbarConfig,
    ConfigManager,
    ConfigError,
    load_config,
    parse_modifier_mask,
    SECTIONS,
    CONFIG_DIR,
    CONFIG_FILE,
)

__all__ = [
    "Config",
    "GlobalConfig",
    "ThemeConfig",
    "InputConfig",
    "AnimationConfig",
    "TaskbarConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    "parse_modifier_mask",
    "SECTIONS",
    "CONFIG_DIR",
    "CONFIG_FILE",
]
