"""
View geometry model.

Converts client-reported surface size and xdg geometry plus the decoration
mode into absolute frame geometry, and lays out decoration sub-rectangles
from the frame size. Decoration positions are never stored independently:
every frame-size change recomputes all of them.
"""

from typing import Tuple
import logging
import math

from .models import Box, DecorationMode, Edge, View
from .scene import ViewScene

logger = logging.getLogger(__name__)

# Used when a client has not committed a usable buffer yet
DEFAULT_SURFACE_WIDTH = 640
DEFAULT_SURFACE_HEIGHT = 480


def lround(value: float) -> int:
    """Round half away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


class ViewGeometryModel:
    """
    Derives frame geometry for views.

    Holds only configuration; all state lives on the View being updated.
    """

    def __init__(self, theme, input_config):
        """
        Args:
            theme: ThemeConfig with border/titlebar/button metrics
            input_config: InputConfig with minimum content size
        """
        self.theme = theme
        self.input = input_config

    # === Metrics ===

    def border_px(self, view: View) -> int:
        return self.theme.border_px if view.server_decorated else 0

    def titlebar_px(self, view: View) -> int:
        return self.theme.titlebar_px if view.server_decorated else 0

    def min_frame_size(self, view: View) -> Tuple[int, int]:
        """Smallest frame an interactive resize may produce."""
        border = self.border_px(view)
        title_h = self.titlebar_px(view)
        return (border * 2 + self.input.min_content_width,
                title_h + border + self.input.min_content_height)

    # === Geometry derivation ===

    def content_box(self, view: View) -> Box:
        """
        Resolve the client's visible-geometry box in surface coordinates.

        Client-side decorated views stay in root-surface space so hit-testing
        lines up with rendered pixels. Server-side decorated views trust the
        reported xdg geometry only when it is non-degenerate and has a
        non-negative offset.
        """
        surface_w = view.surface_width
        surface_h = view.surface_height
        if surface_w <= 1:
            surface_w = DEFAULT_SURFACE_WIDTH
        if surface_h <= 1:
            surface_h = DEFAULT_SURFACE_HEIGHT

        fallback = Box(0, 0, surface_w, surface_h)
        if not view.server_decorated:
            return fallback

        reported = view.reported_geometry
        if reported is None:
            return fallback
        if reported.width > 1 and reported.height > 1:
            if reported.x >= 0 and reported.y >= 0:
                return reported

        logger.debug(f"View {view.id}: ignoring reported geometry {reported}")
        return fallback

    def frame_size_for_content(self, view: View, content_width: int,
                               content_height: int) -> Tuple[int, int]:
        border = self.border_px(view)
        title_h = self.titlebar_px(view)
        return (content_width + border * 2,
                content_height + title_h + border)

    def surface_size_for_frame(self, view: View, frame_width: int,
                               frame_height: int) -> Tuple[int, int]:
        """Client size to request for a frame size (at least 1x1)."""
        border = self.border_px(view)
        title_h = self.titlebar_px(view)
        return (max(1, frame_width - border * 2),
                max(1, frame_height - title_h - border))

    def update_geometry(self, view: View) -> None:
        """Re-derive frame geometry from the client's committed state."""
        view.geo = self.content_box(view)
        width, height = self.frame_size_for_content(
            view, view.geo.width, view.geo.height)
        self.set_frame_size(view, width, height)

    def set_frame_size(self, view: View, frame_width: int,
                       frame_height: int) -> None:
        """
        Set the frame size and lay out every decoration from it.

        The frame never shrinks below the decorations plus one pixel.
        """
        border = self.border_px(view)
        title_h = self.titlebar_px(view)

        view.width = max(frame_width, border * 2 + 1)
        view.height = max(frame_height, title_h + border + 1)
        view.content_x = border - view.geo.x
        view.content_y = title_h - view.geo.y

        self.layout_decorations(view)

    def set_decoration_mode(self, view: View, mode: DecorationMode) -> None:
        """Switch decoration mode and re-derive geometry."""
        view.decoration_mode = mode
        scene = self.ensure_scene(view)
        enabled = mode == DecorationMode.SERVER_SIDE
        for rect in scene.decoration_rects:
            rect.enabled = enabled
        self.update_geometry(view)

    # === Decoration layout ===

    def ensure_scene(self, view: View) -> ViewScene:
        if view.scene is None:
            view.scene = ViewScene(x=view.x, y=view.y)
            view.scene.title.set_color(self.theme.color_title_inactive)
            for rect in (view.scene.left_border, view.scene.right_border,
                         view.scene.bottom_border):
                rect.set_color(self.theme.color_border)
            view.scene.minimize_button.set_color(self.theme.color_minimize_button)
        return view.scene

    def minimize_button_box(self, view: View) -> Box:
        """Minimize button in frame-local coordinates."""
        border = self.border_px(view)
        title_h = self.titlebar_px(view)
        btn_x = max(0, view.width - border - self.theme.button_width - self.theme.button_pad)
        btn_y = max(0, (title_h - self.theme.button_height) // 2)
        return Box(btn_x, btn_y, self.theme.button_width, self.theme.button_height)

    def layout_decorations(self, view: View) -> None:
        """Position title, borders, button and content from the frame size."""
        scene = self.ensure_scene(view)
        border = self.border_px(view)
        title_h = self.titlebar_px(view)
        # Hidden rects still need a valid size
        drawn_border = border if border > 0 else 1
        body_h = max(1, view.height - title_h)

        scene.title.set_position(0, 0)
        scene.title.set_size(view.width, title_h if title_h > 0 else 1)
        scene.left_border.set_position(0, title_h)
        scene.left_border.set_size(drawn_border, body_h)
        scene.right_border.set_position(view.width - drawn_border, title_h)
        scene.right_border.set_size(drawn_border, body_h)
        scene.bottom_border.set_position(0, view.height - drawn_border)
        scene.bottom_border.set_size(view.width, drawn_border)

        scene.content.x = view.content_x
        scene.content.y = view.content_y

        button = self.minimize_button_box(view)
        scene.minimize_button.set_position(button.x, button.y)
        if view.server_decorated:
            scene.minimize_button.set_size(button.width, button.height)
        else:
            scene.minimize_button.set_size(1, 1)

    # === Interactive resize ===

    def resize_box(self, view: View, initial: Box, edges: Edge,
                   dx: int, dy: int) -> Box:
        """
        Frame box after dragging the given edges by (dx, dy).

        Each edge is handled independently. When the result is below the
        minimum frame size, the dragged edge is clamped and the opposite
        edge keeps its absolute position.
        """
        nx, ny = initial.x, initial.y
        nw, nh = initial.width, initial.height

        if edges & Edge.LEFT:
            nx = initial.x + dx
            nw = initial.width - dx
        if edges & Edge.RIGHT:
            nw = initial.width + dx
        if edges & Edge.TOP:
            ny = initial.y + dy
            nh = initial.height - dy
        if edges & Edge.BOTTOM:
            nh = initial.height + dy

        min_w, min_h = self.min_frame_size(view)
        if nw < min_w:
            if edges & Edge.LEFT:
                nx += nw - min_w
            nw = min_w
        if nh < min_h:
            if edges & Edge.TOP:
                ny += nh - min_h
            nh = min_h

        return Box(nx, ny, nw, nh)
