"""
Minimize/restore animations.

Both transitions tween the frame's center, scale and opacity over a fixed
duration driven by monotonic frame timestamps. Endpoints come from the
taskbar layout: the predicted button box when minimizing, the cached (or
re-predicted) box when restoring.
"""

from typing import Optional, TYPE_CHECKING
import logging

from .geometry import lround
from .models import Box, LifeState, Transition, Tween, View

if TYPE_CHECKING:
    from .manager import WindowManager

logger = logging.getLogger(__name__)

# Fallback target sits this far above the bottom of the layout
FALLBACK_BOTTOM_INSET = 12.0
DEFAULT_LAYOUT = Box(0, 0, 1280, 720)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def smoothstep(progress: float) -> float:
    """Ease-in-out curve p^2 (3 - 2p) on a clamped progress."""
    p = _clamp(progress, 0.0, 1.0)
    return p * p * (3.0 - 2.0 * p)


def interpolate(tween_from: Tween, tween_to: Tween, progress: float) -> Tween:
    """Visual state at a progress value, eased with smoothstep."""
    eased = smoothstep(progress)
    return Tween(
        center_x=tween_from.center_x + (tween_to.center_x - tween_from.center_x) * eased,
        center_y=tween_from.center_y + (tween_to.center_y - tween_from.center_y) * eased,
        scale=tween_from.scale + (tween_to.scale - tween_from.scale) * eased,
        alpha=tween_from.alpha + (tween_to.alpha - tween_from.alpha) * eased,
    )


class AnimationEngine:
    """
    Drives minimize and restore tweens.

    The window manager context is passed to every entry point; the engine
    itself keeps only configuration.
    """

    def __init__(self, config, theme, geometry, taskbar):
        """
        Args:
            config: AnimationConfig with durations and scale/alpha limits
            theme: ThemeConfig for decoration metrics and colors
            geometry: ViewGeometryModel used to snap views back
            taskbar: TaskbarLayout used for endpoints
        """
        self.config = config
        self.theme = theme
        self.geometry = geometry
        self.taskbar = taskbar

    # === Endpoints ===

    def slot_tween(self, view: View, slot: Box) -> Tween:
        """Tween endpoint that shrinks the view onto a taskbar button."""
        sx = slot.width / max(view.width, 1)
        sy = slot.height / max(view.height, 1)
        return Tween(
            center_x=slot.center_x,
            center_y=slot.center_y,
            scale=_clamp(min(sx, sy), self.config.min_scale, self.config.max_scale),
            alpha=self.config.minimized_alpha,
        )

    def taskbar_tween(self, wm: "WindowManager", view: View,
                      include_target: bool) -> Tween:
        """Predicted taskbar endpoint, or the bottom-center fallback."""
        slot = self.taskbar.predict(wm.focus_stack, wm.layout_bounds,
                                    view, include_target)
        if slot is not None:
            return self.slot_tween(view, slot)

        layout = wm.layout_bounds
        if layout is None or layout.is_empty:
            layout = DEFAULT_LAYOUT
        logger.warning(f"No taskbar slot for view {view.id}, using bottom-edge target")
        return Tween(
            center_x=layout.center_x,
            center_y=layout.y + layout.height - FALLBACK_BOTTOM_INSET,
            scale=self.config.min_scale,
            alpha=self.config.minimized_alpha,
        )

    @staticmethod
    def frame_tween(view: View) -> Tween:
        """Tween endpoint at the view's real frame position."""
        return Tween(center_x=view.x + view.width / 2.0,
                     center_y=view.y + view.height / 2.0,
                     scale=1.0, alpha=1.0)

    # === Transitions ===

    def begin_minimize(self, wm: "WindowManager", view: View, time_ms: int) -> bool:
        """
        Start shrinking a view onto its taskbar button.

        Returns:
            False (and changes nothing) unless the view is mapped, not
            minimized and not already animating
        """
        if not view.is_mapped or view.is_minimized or view.is_animating:
            return False

        wm.clear_focus(view)
        view.transition = Transition.MINIMIZING
        view.transition_start_ms = time_ms
        view.tween_from = self.frame_tween(view)
        view.tween_to = self.taskbar_tween(wm, view, include_target=True)

        self.apply_state(view, view.tween_from)
        logger.info(f"Minimize started for view {view.id}")
        wm.notify_animation(view, started=True)
        return True

    def begin_restore(self, wm: "WindowManager", view: View, time_ms: int) -> bool:
        """
        Start growing a minimized view back to its frame.

        The view leaves the minimized state immediately; hit-testing keeps
        ignoring it until the transition ends.
        """
        if not view.is_mapped or not view.is_minimized or view.is_animating:
            return False

        slot = self.taskbar.cached_slot(view)
        if slot is not None:
            tween_from = self.slot_tween(view, slot)
        else:
            tween_from = self.taskbar_tween(wm, view, include_target=False)

        view.life_state = LifeState.MAPPED
        view.transition = Transition.RESTORING
        view.transition_start_ms = time_ms
        view.tween_from = tween_from
        view.tween_to = self.frame_tween(view)

        wm.set_view_visible(view, True)
        self.apply_state(view, view.tween_from)
        self.taskbar.mark_dirty()
        logger.info(f"Restore started for view {view.id}")
        wm.notify_animation(view, started=True)
        return True

    def progress(self, view: View, time_ms: int) -> float:
        """Linear progress in [0, 1]; tolerates timestamps going backwards."""
        if view.transition == Transition.MINIMIZING:
            duration = self.config.minimize_duration_ms
        elif view.transition == Transition.RESTORING:
            duration = self.config.restore_duration_ms
        else:
            return 1.0
        if duration <= 0:
            return 1.0
        elapsed = max(0, time_ms - view.transition_start_ms)
        return _clamp(elapsed / duration, 0.0, 1.0)

    def tick(self, wm: "WindowManager", time_ms: int) -> bool:
        """
        Advance every running transition.

        Returns:
            True while at least one transition is still running
        """
        any_running = False
        for view in list(wm.focus_stack):
            if not view.is_mapped or not view.is_animating:
                continue

            progress = self.progress(view, time_ms)
            if progress >= 1.0:
                self._finish(wm, view)
                continue

            any_running = True
            self.apply_state(view, interpolate(view.tween_from, view.tween_to, progress))
        return any_running

    def _finish(self, wm: "WindowManager", view: View) -> None:
        transition = view.transition
        view.transition = Transition.NONE
        self.reset_transform(view)

        if transition == Transition.MINIMIZING:
            view.life_state = LifeState.MINIMIZED
            wm.set_view_visible(view, False)
            self.taskbar.mark_dirty()
            logger.info(f"View {view.id} minimized")
        else:
            logger.info(f"View {view.id} restored")
            wm.focus_view(view)
        wm.notify_animation(view, started=False, transition=transition)

    # === Scene transforms ===

    def clamp_state(self, state: Tween) -> Tween:
        return Tween(
            center_x=state.center_x,
            center_y=state.center_y,
            scale=_clamp(state.scale, self.config.min_scale, 1.0),
            alpha=_clamp(state.alpha, self.config.min_alpha, 1.0),
        )

    def apply_state(self, view: View, state: Tween) -> Tween:
        """
        Push a scaled, faded frame into the view's scene.

        Decoration sizes scale with the frame (never below 1px). Returns the
        clamped state actually applied.
        """
        state = self.clamp_state(state)
        scale = state.scale
        scene = self.geometry.ensure_scene(view)

        scaled_w = max(1, lround(view.width * scale))
        scaled_h = max(1, lround(view.height * scale))
        scene.set_position(lround(state.center_x - scaled_w / 2.0),
                           lround(state.center_y - scaled_h / 2.0))

        border = max(1, lround(self.geometry.border_px(view) * scale))
        title_h = max(1, lround(self.geometry.titlebar_px(view) * scale))
        body_h = max(1, scaled_h - title_h)

        scene.title.set_position(0, 0)
        scene.title.set_size(scaled_w, title_h)
        scene.left_border.set_position(0, title_h)
        scene.left_border.set_size(border, body_h)
        scene.right_border.set_position(max(0, scaled_w - border), title_h)
        scene.right_border.set_size(border, body_h)
        scene.bottom_border.set_position(0, max(0, scaled_h - border))
        scene.bottom_border.set_size(scaled_w, border)

        btn_w = max(1, lround(self.theme.button_width * scale))
        btn_h = max(1, lround(self.theme.button_height * scale))
        btn_pad = max(1, lround(self.theme.button_pad * scale))
        btn_x = max(border, scaled_w - border - btn_w - btn_pad)
        btn_y = max(0, (title_h - btn_h) // 2)
        scene.minimize_button.set_position(btn_x, btn_y)
        scene.minimize_button.set_size(btn_w, btn_h)

        scene.title.set_color(self.theme.color_title_inactive, state.alpha)
        for rect in (scene.left_border, scene.right_border, scene.bottom_border):
            rect.set_color(self.theme.color_border, state.alpha)
        scene.minimize_button.set_color(self.theme.color_minimize_button, state.alpha)

        scene.content.x = lround(view.content_x * scale)
        scene.content.y = lround(view.content_y * scale)
        scene.content.dest_width = max(1, lround(max(view.surface_width, 1) * scale))
        scene.content.dest_height = max(1, lround(max(view.surface_height, 1) * scale))
        scene.content.opacity = state.alpha
        return state

    def reset_transform(self, view: View) -> None:
        """Snap the scene back to the view's real, unscaled frame."""
        scene = self.geometry.ensure_scene(view)
        scene.set_position(view.x, view.y)
        self.geometry.update_geometry(view)
        scene.title.set_color(self.theme.color_title_inactive)
        for rect in (scene.left_border, scene.right_border, scene.bottom_border):
            rect.set_color(self.theme.color_border)
        scene.minimize_button.set_color(self.theme.color_minimize_button)
        scene.content.reset_transform()

    def current_state(self, view: View, time_ms: int) -> Optional[Tween]:
        """Interpolated state of a running transition, for inspection."""
        if not view.is_animating:
            return None
        return interpolate(view.tween_from, view.tween_to, self.progress(view, time_ms))
