"""
Scene-node records pushed to the rendering collaborator.

The core never draws. It writes positions, sizes, colors and opacity into
these records; the renderer reads them when it paints a frame.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

Color = Tuple[float, float, float, float]


@dataclass
class SceneRect:
    """A positioned, resizable, opacity-settable solid rectangle."""
    x: int = 0
    y: int = 0
    width: int = 1
    height: int = 1
    color: Color = (0.0, 0.0, 0.0, 1.0)
    enabled: bool = True

    def set_size(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def set_position(self, x: int, y: int) -> None:
        self.x = x
        self.y = y

    def set_color(self, base: Color, alpha: float = 1.0) -> None:
        """Set color, multiplying the base alpha channel by alpha."""
        self.color = (base[0], base[1], base[2], base[3] * alpha)


@dataclass
class SceneBuffer:
    """
    Client content node.

    dest_width/dest_height of 0 mean "natural buffer size"; a nonzero
    value scales the buffer on screen.
    """
    x: int = 0
    y: int = 0
    dest_width: int = 0
    dest_height: int = 0
    opacity: float = 1.0

    def reset_transform(self) -> None:
        self.dest_width = 0
        self.dest_height = 0
        self.opacity = 1.0


@dataclass
class ViewScene:
    """Scene subtree of one view: the frame node and its children."""
    x: int = 0
    y: int = 0
    enabled: bool = False
    title: SceneRect = field(default_factory=SceneRect)
    left_border: SceneRect = field(default_factory=SceneRect)
    right_border: SceneRect = field(default_factory=SceneRect)
    bottom_border: SceneRect = field(default_factory=SceneRect)
    minimize_button: SceneRect = field(default_factory=SceneRect)
    content: SceneBuffer = field(default_factory=SceneBuffer)

    def set_position(self, x: int, y: int) -> None:
        self.x = x
        self.y = y

    @property
    def decoration_rects(self) -> List[SceneRect]:
        return [self.title, self.left_border, self.right_border,
                self.bottom_border, self.minimize_button]


@dataclass
class TaskbarButton:
    """One minimized-view button as published by the taskbar layout."""
    view_id: str
    x: int
    y: int
    width: int
    height: int
    label: str
    pressed: bool = False


@dataclass
class TaskbarScene:
    """Taskbar bar and buttons after the last recompute."""
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0
    enabled: bool = False
    buttons: List[TaskbarButton] = field(default_factory=list)

    def button_for(self, view_id: str) -> Optional[TaskbarButton]:
        for button in self.buttons:
            if button.view_id == view_id:
                return button
        return None
