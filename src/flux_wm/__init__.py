"""
Flux window manager interaction core.

This package decides where windows are and which state they are in: frame
geometry, hit-testing, move/resize grabs, minimize/restore animations and
the taskbar of minimized windows. Rendering and protocol plumbing are left
to the compositor around it.

Modules:
- core: Data models, geometry, hit-testing, taskbar, animation, WindowManager
- config: Configuration file handling
- cli: Command-line interface
- simulation: Headless compositor for testing without a display

Example usage:
    from flux_wm.core import Box, ShellEvent, ShellEventType, WindowManager

    wm = WindowManager()
    wm.set_layout_bounds(Box(0, 0, 1280, 720))

    view_id = wm.handle_shell_event(ShellEvent(
        ShellEventType.NEW_TOPLEVEL, data={"app_id": "foot", "title": "shell"}))
    wm.handle_shell_event(ShellEvent(
        ShellEventType.COMMIT, view_id,
        {"surface_width": 640, "surface_height": 480}))
    wm.handle_shell_event(ShellEvent(ShellEventType.MAP, view_id))
    wm.frame(time_ms=16)
"""

__version__ = "0.1.0"
__author__ = "Flux WM Project"

# Convenience imports
from .core import (
    WindowManager,
    View,
    Box,
    DecorationMode,
    GrabMode,
    Edge,
    Modifier,
    ShellEvent,
    ShellEventType,
    EventType,
)

__all__ = [
    "__version__",
    "WindowManager",
    "View",
    "Box",
    "DecorationMode",
    "GrabMode",
    "Edge",
    "Modifier",
    "ShellEvent",
    "ShellEventType",
    "EventType",
]
