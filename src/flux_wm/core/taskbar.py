"""
Taskbar layout for minimized views.

Buttons are packed left to right along the bottom of the output layout,
in focus-stack order. The real recompute and the prediction used by the
minimize/restore animations share one packing generator, so a prediction
made before a view is minimized matches the box the next recompute gives it.
"""

from typing import Iterable, Iterator, List, Optional, Tuple
import logging

from .models import Box, View
from .scene import TaskbarButton, TaskbarScene

logger = logging.getLogger(__name__)


class TaskbarLayout:
    """
    Packs minimized-view buttons and answers taskbar hit-tests.

    The layout is recomputed lazily: mark_dirty() only sets a flag, and
    update() (called once per frame) does the work.
    """

    def __init__(self, config):
        """
        Args:
            config: TaskbarConfig with bar and button metrics
        """
        self.config = config
        self.scene = TaskbarScene()
        self.pressed_view_id: Optional[str] = None
        self._dirty = True
        self._last_bounds: Optional[Box] = None
        self.recompute_count = 0

    @property
    def dirty(self) -> bool:
        return self._dirty

    def mark_dirty(self) -> None:
        self._dirty = True

    def set_pressed(self, view_id: Optional[str]) -> None:
        """Mark one button as held down (drawn sunken); layout is unaffected."""
        self.pressed_view_id = view_id
        for button in self.scene.buttons:
            button.pressed = button.view_id == view_id

    # === Metrics ===

    @property
    def text_advance(self) -> int:
        return (self.config.glyph_width + 1) * self.config.text_scale

    def text_pixel_width(self, text: str) -> int:
        if not text:
            return 0
        return len(text) * self.text_advance - self.config.text_scale

    def button_width_for_title(self, title: str) -> int:
        width = self.text_pixel_width(title) + self.config.text_pad_x * 2
        width = max(width, self.config.button_min_width)
        return min(width, self.config.button_max_width)

    def bar_height(self) -> int:
        return max(self.config.height, self.config.button_height + 4)

    def button_height(self) -> int:
        bar_h = self.bar_height()
        button_h = min(self.config.button_height, bar_h - 4)
        if button_h < 10:
            button_h = bar_h
        return button_h

    def truncate_label(self, title: str, button_width: int) -> str:
        """Fit a title into a button, ending in '...' when cut."""
        usable = button_width - self.config.text_pad_x * 2
        if usable <= 0:
            return ""
        max_chars = usable // self.text_advance
        if max_chars <= 0:
            return ""
        if len(title) <= max_chars:
            return title
        if max_chars >= 3:
            return title[:max_chars - 3] + "..."
        return title[:max_chars]

    # === Packing ===

    def _pack(self, views: Iterable[View], bounds: Box,
              target: Optional[View] = None,
              include_target: bool = False) -> Iterator[Tuple[View, Box]]:
        """
        Yield (view, button box) in placement order.

        A view takes part when it is mapped and minimized, or when it is the
        target and include_target is set. Packing stops once the remaining
        width is below the minimum button width.
        """
        cfg = self.config
        bar_h = self.bar_height()
        button_h = self.button_height()
        button_y = bounds.y + bounds.height - bar_h + (bar_h - button_h) // 2
        cursor_x = cfg.margin

        for view in views:
            in_taskbar = view.is_mapped and (
                view.is_minimized or (include_target and view is target))
            if not in_taskbar:
                continue

            remaining = bounds.width - cfg.margin - cursor_x
            if remaining < cfg.button_min_width:
                return
            button_w = min(self.button_width_for_title(view.display_title), remaining)

            yield view, Box(bounds.x + cursor_x, button_y, button_w, button_h)
            cursor_x += button_w + cfg.margin

    def predict(self, views: Iterable[View], bounds: Optional[Box],
                target: View, include_target: bool) -> Optional[Box]:
        """
        Box the target's button would occupy, without touching real state.

        Args:
            views: Views in focus-stack order
            bounds: Output layout box
            target: View to locate
            include_target: Treat the target as minimized even if it isn't

        Returns:
            The button box, or None if the target would not be placed
        """
        if bounds is None or bounds.is_empty:
            return None
        for view, box in self._pack(views, bounds, target, include_target):
            if view is target:
                return box
        return None

    def cached_slot(self, view: View) -> Optional[Box]:
        """The view's real button box, if it is still current."""
        if self._dirty or not view.is_minimized:
            return None
        slot = view.taskbar_slot
        if slot is None or slot.is_empty:
            return None
        return slot

    def _clear_slots(self, views: Iterable[View]) -> None:
        for view in views:
            view.taskbar_slot = None

    def update(self, views: List[View], bounds: Optional[Box]) -> bool:
        """
        Recompute the layout if dirty or the layout bounds changed.

        Returns:
            True if a recompute happened
        """
        if bounds is None or bounds.is_empty:
            if self.scene.enabled or any(v.taskbar_slot for v in views):
                logger.warning("Output layout is empty, disabling taskbar")
            self._clear_slots(views)
            self.scene = TaskbarScene()
            self._last_bounds = None
            return False

        if bounds != self._last_bounds:
            self._last_bounds = bounds
            self._dirty = True

        if not self._dirty:
            return False

        self._clear_slots(views)
        bar_h = self.bar_height()
        scene = TaskbarScene(x=bounds.x, y=bounds.y + bounds.height - bar_h,
                             width=bounds.width, height=bar_h)

        for view, box in self._pack(views, bounds):
            view.taskbar_slot = box
            scene.buttons.append(TaskbarButton(
                view_id=view.id,
                x=box.x, y=box.y, width=box.width, height=box.height,
                label=self.truncate_label(view.display_title, box.width),
                pressed=view.id == self.pressed_view_id,
            ))

        scene.enabled = len(scene.buttons) > 0
        self.scene = scene
        self._dirty = False
        self.recompute_count += 1
        logger.debug(f"Taskbar recomputed: {len(scene.buttons)} buttons")
        return True

    def view_at(self, views: Iterable[View], lx: float, ly: float) -> Optional[View]:
        """Minimized view whose button contains the point."""
        for view in views:
            if not view.is_minimized or view.taskbar_slot is None:
                continue
            if view.taskbar_slot.contains(lx, ly):
                return view
        return None
