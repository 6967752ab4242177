"""
Core module for the Flux window manager.

This module provides the interaction and layout core:
- Data models for views, boxes, decorations and tweens
- Geometry derivation and hit-testing for view frames
- Taskbar packing and minimize/restore animations
- WindowManager, the context that ties them together
"""

from .models import (
    DecorationMode,
    LifeState,
    Transition,
    GrabMode,
    Edge,
    Modifier,
    PointerButton,
    Box,
    Tween,
    View,
    Decoration,
)

from .scene import (
    SceneRect,
    SceneBuffer,
    ViewScene,
    TaskbarButton,
    TaskbarScene,
)

from .geometry import ViewGeometryModel
from .hit_test import HitTester, HitRegion, HitResult
from .taskbar import TaskbarLayout
from .animation import AnimationEngine, interpolate, smoothstep
from .interaction import InteractionStateMachine

from .manager import (
    WindowManager,
    Event,
    EventType,
    EventCallback,
    ShellEvent,
    ShellEventType,
    WindowManagerError,
    ViewNotFoundError,
    DecorationNotFoundError,
    DuplicateIdError,
)

__all__ = [
    # Models
    "DecorationMode",
    "LifeState",
    "Transition",
    "GrabMode",
    "Edge",
    "Modifier",
    "PointerButton",
    "Box",
    "Tween",
    "View",
    "Decoration",
    # Scene records
    "SceneRect",
    "SceneBuffer",
    "ViewScene",
    "TaskbarButton",
    "TaskbarScene",
    # Components
    "ViewGeometryModel",
    "HitTester",
    "HitRegion",
    "HitResult",
    "TaskbarLayout",
    "AnimationEngine",
    "interpolate",
    "smoothstep",
    "InteractionStateMachine",
    # Window Manager
    "WindowManager",
    "Event",
    "EventType",
    "EventCallback",
    "ShellEvent",
    "ShellEventType",
    "WindowManagerError",
    "ViewNotFoundError",
    "DecorationNotFoundError",
    "DuplicateIdError",
]
