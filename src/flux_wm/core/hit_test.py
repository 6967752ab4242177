"""
Hit-testing for view frames.

Every method is a pure predicate or classifier over a view's geometry,
its decoration mode and a point in layout coordinates. Nothing here
mutates state.

Ring layout around a view edge, outermost first:
- outer grab pad: detectable frame region beyond the drawn border
- resize ring: within resize_margin of an edge (extends outwards too)
- move ring: within move_margin of an edge but outside the resize ring
- interior: neither
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Tuple
import logging

from .geometry import ViewGeometryModel
from .models import Box, Edge, View

logger = logging.getLogger(__name__)

SSD_MIN_RESIZE_MARGIN = 6
SSD_MIN_MOVE_MARGIN = 12
SSD_OUTER_PAD = 4
CSD_RESIZE_MARGIN = 14
CSD_TERMINAL_RESIZE_MARGIN = 16
CSD_MOVE_MARGIN = 40


class HitRegion(Enum):
    """What a point over a view means to the pointer."""
    NONE = auto()            # Outside the view's padded frame
    RESIZE = auto()          # Resize ring; see HitResult.edges
    MINIMIZE_BUTTON = auto()
    MOVE_RING = auto()       # Outer border ring with no surface below
    TITLEBAR = auto()        # Server-side titlebar drag region
    TERMINAL_DRAG = auto()   # Top strip of the terminal-style client
    CONTENT = auto()         # Client surface
    FRAME = auto()           # Inside the padded frame, nothing interactive


@dataclass(frozen=True)
class HitResult:
    """Classification of one point against one view."""
    region: HitRegion
    edges: Edge = Edge.NONE


class HitTester:
    """
    Classifies points against view frames.

    The terminal-style client (matched by app-id substring) gets wider
    resize/grab zones and a drag strip because its client-side top chrome
    is dense.
    """

    def __init__(self, theme, input_config):
        """
        Args:
            theme: ThemeConfig with border/titlebar/button metrics
            input_config: InputConfig with terminal heuristics
        """
        self.theme = theme
        self.input = input_config
        self.geometry = ViewGeometryModel(theme, input_config)

    def _is_terminal(self, view: View) -> bool:
        return view.app_id_contains(self.input.terminal_app_id)

    def _border_px(self, view: View) -> int:
        return self.theme.border_px if view.server_decorated else 0

    def _titlebar_px(self, view: View) -> int:
        return self.theme.titlebar_px if view.server_decorated else 0

    # === Margins ===

    @staticmethod
    def clamp_margin(view: View, margin: int) -> int:
        """Clamp to at most half the frame width/height and at least 1."""
        margin = min(margin, view.width // 2, view.height // 2)
        return max(margin, 1)

    def resize_margin(self, view: View) -> int:
        if view.server_decorated:
            margin = max(self._border_px(view), SSD_MIN_RESIZE_MARGIN)
        elif self._is_terminal(view):
            margin = CSD_TERMINAL_RESIZE_MARGIN
        else:
            margin = CSD_RESIZE_MARGIN
        return self.clamp_margin(view, margin)

    def move_margin(self, view: View) -> int:
        """Always strictly greater than the resize margin."""
        if view.server_decorated:
            margin = max(self._border_px(view), SSD_MIN_MOVE_MARGIN)
        else:
            margin = CSD_MOVE_MARGIN
        margin = self.clamp_margin(view, margin)
        resize_margin = self.resize_margin(view)
        if margin <= resize_margin:
            margin = resize_margin + 1
        return margin

    def outer_grab_pad(self, view: View) -> int:
        if view.server_decorated:
            pad = SSD_OUTER_PAD
        elif self._is_terminal(view):
            pad = CSD_TERMINAL_RESIZE_MARGIN
        else:
            pad = CSD_RESIZE_MARGIN
        return self.clamp_margin(view, pad)

    # === Predicates ===

    def in_padded_frame(self, view: View, lx: float, ly: float) -> bool:
        return view.frame_box.expand(self.outer_grab_pad(view)).contains(lx, ly)

    def resize_edges_at(self, view: View, lx: float, ly: float) -> Edge:
        """Edges whose resize zone contains the point; NONE when outside."""
        margin = self.resize_margin(view)
        if not view.frame_box.expand(margin).contains(lx, ly):
            return Edge.NONE

        local_x = lx - view.x
        local_y = ly - view.y
        edges = Edge.NONE
        if local_x < margin:
            edges |= Edge.LEFT
        if local_x >= view.width - margin:
            edges |= Edge.RIGHT
        if local_y < margin:
            edges |= Edge.TOP
        if local_y >= view.height - margin:
            edges |= Edge.BOTTOM
        return edges

    def _in_ring(self, view: View, local_x: float, local_y: float,
                 margin: int) -> bool:
        return (local_x < margin or local_x >= view.width - margin or
                local_y < margin or local_y >= view.height - margin)

    def point_in_frame_border(self, view: View, lx: float, ly: float) -> bool:
        """Move ring: within the move margin but outside the resize ring."""
        if not self.in_padded_frame(view, lx, ly):
            return False

        local_x = lx - view.x
        local_y = ly - view.y
        if not self._in_ring(view, local_x, local_y, self.move_margin(view)):
            return False
        return not self._in_ring(view, local_x, local_y, self.resize_margin(view))

    def minimize_button_box(self, view: View) -> Optional[Box]:
        """Minimize button in layout coordinates; None without decorations."""
        if not view.server_decorated:
            return None
        local = self.geometry.minimize_button_box(view)
        return Box(view.x + local.x, view.y + local.y, local.width, local.height)

    def point_in_minimize_button(self, view: View, lx: float, ly: float) -> bool:
        button = self.minimize_button_box(view)
        return button is not None and button.contains(lx, ly)

    def point_in_titlebar_drag_region(self, view: View, lx: float, ly: float) -> bool:
        """Titlebar strip minus the minimize button."""
        if not view.server_decorated:
            return False
        titlebar = Box(view.x, view.y, view.width, self._titlebar_px(view))
        if not titlebar.contains(lx, ly):
            return False
        return not self.point_in_minimize_button(view, lx, ly)

    def point_in_terminal_drag_region(self, view: View, lx: float, ly: float) -> bool:
        """Top strip of the client-decorated terminal, minus side pads."""
        if view.server_decorated or not self._is_terminal(view):
            return False

        side_pad = self.input.terminal_drag_side_pad
        local_x = lx - view.x
        local_y = ly - view.y
        if local_x < side_pad or local_x >= view.width - side_pad:
            return False
        return 0 <= local_y < self.input.terminal_drag_height

    def surface_at(self, view: View, lx: float, ly: float) -> Optional[Tuple[float, float]]:
        """Surface-local coordinates if the point hits the client's input region."""
        local_x = lx - (view.x + view.content_x)
        local_y = ly - (view.y + view.content_y)
        region = view.input_region
        if region is None:
            region = Box(0, 0, max(view.surface_width, view.geo.right),
                         max(view.surface_height, view.geo.bottom))
        if region.contains(local_x, local_y):
            return local_x, local_y
        return None

    # === Classification ===

    def classify(self, view: View, lx: float, ly: float,
                 surface_hit: Optional[bool] = None) -> HitResult:
        """
        Classify a point against one view, in press-priority order.

        Args:
            view: The candidate view
            lx, ly: Point in layout coordinates
            surface_hit: Whether a client surface is under the point; when
                None it is computed from this view alone

        Returns:
            The winning region. RESIZE carries the edge mask.
        """
        if surface_hit is None:
            surface_hit = (view.frame_box.contains(lx, ly) and
                           self.surface_at(view, lx, ly) is not None)

        edges = self.resize_edges_at(view, lx, ly)
        if edges != Edge.NONE:
            return HitResult(HitRegion.RESIZE, edges)
        if not surface_hit and self.point_in_frame_border(view, lx, ly):
            return HitResult(HitRegion.MOVE_RING)
        if self.point_in_minimize_button(view, lx, ly):
            return HitResult(HitRegion.MINIMIZE_BUTTON)
        if self.point_in_titlebar_drag_region(view, lx, ly):
            return HitResult(HitRegion.TITLEBAR)
        if self.point_in_terminal_drag_region(view, lx, ly):
            return HitResult(HitRegion.TERMINAL_DRAG)
        if surface_hit:
            return HitResult(HitRegion.CONTENT)
        if self.in_padded_frame(view, lx, ly):
            return HitResult(HitRegion.FRAME)
        return HitResult(HitRegion.NONE)
