"""
Core data models for the Flux window manager.

These models represent the fundamental concepts:
- Box: An integer rectangle in layout coordinates
- View: A toplevel client window and its frame
- Decoration: A client's decoration-mode negotiation handle
- Tween: One endpoint of a minimize/restore animation
"""

from dataclasses import dataclass, field
from enum import Enum, IntFlag, auto
from typing import Optional
import uuid

from .scene import ViewScene


class DecorationMode(Enum):
    """Who draws the border and titlebar."""
    CLIENT_SIDE = auto()  # Client draws its own chrome, frame == surface
    SERVER_SIDE = auto()  # Compositor adds border and titlebar


class LifeState(Enum):
    """Lifecycle state of a view."""
    UNMAPPED = auto()
    MAPPED = auto()
    MINIMIZED = auto()


class Transition(Enum):
    """Running animation on a view."""
    NONE = auto()
    MINIMIZING = auto()
    RESTORING = auto()


class GrabMode(Enum):
    """Current pointer interaction mode."""
    IDLE = auto()
    MOVING = auto()
    RESIZING = auto()


class Edge(IntFlag):
    """Resize edge bitmask (values match the wlroots edge enum)."""
    NONE = 0
    TOP = 1
    BOTTOM = 2
    LEFT = 4
    RIGHT = 8


class Modifier(IntFlag):
    """Keyboard modifier bitmask (values match the wlroots modifier enum)."""
    NONE = 0
    SHIFT = 1
    CAPS = 2
    CTRL = 4
    ALT = 8
    MOD2 = 16
    MOD3 = 32
    LOGO = 64
    MOD5 = 128


class PointerButton:
    """Linux input event codes for the common pointer buttons."""
    LEFT = 0x110
    RIGHT = 0x111
    MIDDLE = 0x112


@dataclass(frozen=True)
class Box:
    """Integer rectangle: position (x, y) and size (width, height)."""
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2.0

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2.0

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains(self, px: float, py: float) -> bool:
        """Check if point is inside (right/bottom edges exclusive)."""
        return (self.x <= px < self.x + self.width and
                self.y <= py < self.y + self.height)

    def expand(self, pad: int) -> 'Box':
        """Return box grown by pad on every side."""
        return Box(self.x - pad, self.y - pad,
                   self.width + 2 * pad, self.height + 2 * pad)


@dataclass
class Tween:
    """Visual state at one end of an animation."""
    center_x: float = 0.0
    center_y: float = 0.0
    scale: float = 1.0
    alpha: float = 1.0


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class View:
    """
    A toplevel window managed by the compositor.

    Frame coordinates (x, y, width, height) cover decorations plus content.
    content_x/content_y is the offset of the client surface origin inside
    the frame. The remaining fields are client-reported state.
    """
    id: str = field(default_factory=_new_id)
    app_id: str = ""
    title: str = ""

    # Client-reported surface size and xdg geometry
    surface_width: int = 0
    surface_height: int = 0
    reported_geometry: Optional[Box] = None
    # Surface-local input region; None means the whole surface
    input_region: Optional[Box] = None

    decoration_mode: DecorationMode = DecorationMode.CLIENT_SIDE
    decoration_id: Optional[str] = None        # Weak handle to Decoration

    # Derived frame geometry
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0
    geo: Box = field(default_factory=Box)
    content_x: int = 0
    content_y: int = 0

    life_state: LifeState = LifeState.UNMAPPED
    activated: bool = False
    visible: bool = False

    transition: Transition = Transition.NONE
    transition_start_ms: int = 0
    tween_from: Tween = field(default_factory=Tween)
    tween_to: Tween = field(default_factory=Tween)

    # Last real taskbar button box; only meaningful while minimized
    taskbar_slot: Optional[Box] = None

    # Render-side state pushed by the core (set up by the geometry model)
    scene: Optional[ViewScene] = None

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if not isinstance(other, View):
            return False
        return self.id == other.id

    @property
    def is_mapped(self) -> bool:
        """Mapped views include minimized ones."""
        return self.life_state != LifeState.UNMAPPED

    @property
    def is_minimized(self) -> bool:
        return self.life_state == LifeState.MINIMIZED

    @property
    def is_animating(self) -> bool:
        return self.transition != Transition.NONE

    @property
    def is_interactive(self) -> bool:
        """Eligible as a click, focus or grab target."""
        return (self.life_state == LifeState.MAPPED and
                self.transition == Transition.NONE)

    @property
    def server_decorated(self) -> bool:
        return self.decoration_mode == DecorationMode.SERVER_SIDE

    @property
    def frame_box(self) -> Box:
        return Box(self.x, self.y, self.width, self.height)

    @property
    def display_title(self) -> str:
        """Title, else app id, else a generic label."""
        if self.title:
            return self.title
        if self.app_id:
            return self.app_id
        return "APP"

    def app_id_contains(self, needle: str) -> bool:
        return bool(needle) and needle in self.app_id


@dataclass
class Decoration:
    """
    Decoration negotiation object for one toplevel.

    Lives independently of its view: either side may be destroyed first,
    and each clears the other's handle when it goes.
    """
    id: str = field(default_factory=_new_id)
    view_id: Optional[str] = None              # Weak handle to View
    requested_mode: Optional[DecorationMode] = None
    current_mode: Optional[DecorationMode] = None
