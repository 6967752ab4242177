"""
Window Manager - the single context value for the interaction core.

This is the heart of the Flux implementation. It manages:
- Creating, mapping and destroying views from shell events
- The focus stack (z-order and hit-test order)
- Decoration negotiation objects and their weak handles
- Pointer/keyboard input routing through the interaction state machine
- Per-frame animation ticks and the coalesced taskbar recompute
"""

from typing import Any, Callable, Dict, List, Optional, Tuple, TYPE_CHECKING
from dataclasses import dataclass, field
from enum import Enum, auto
import logging

from .animation import AnimationEngine
from .geometry import ViewGeometryModel
from .hit_test import HitTester
from .interaction import InteractionStateMachine
from .models import (
    Box, Decoration, DecorationMode, Edge, GrabMode, LifeState, Modifier,
    Transition, View
)
from .taskbar import TaskbarLayout

if TYPE_CHECKING:
    from ..config import Config

logger = logging.getLogger(__name__)

# Cascade placement for new views
PLACEMENT_BASE_X = 48
PLACEMENT_BASE_Y = 40
PLACEMENT_STEP_X = 34
PLACEMENT_STEP_Y = 26
PLACEMENT_MIN_TAIL_W = 520
PLACEMENT_MIN_TAIL_H = 380
DEFAULT_LAYOUT = Box(0, 0, 1280, 720)


class EventType(Enum):
    """Types of events the core tells its collaborators about."""
    VIEW_CREATED = auto()
    VIEW_MAPPED = auto()
    VIEW_UNMAPPED = auto()
    VIEW_DESTROYED = auto()
    FOCUS_CHANGED = auto()
    GRAB_STARTED = auto()
    GRAB_ENDED = auto()
    POINTER_ENTER = auto()
    POINTER_MOTION = auto()
    BUTTON_FORWARDED = auto()
    CONFIGURE_REQUESTED = auto()
    MINIMIZE_STARTED = auto()
    MINIMIZE_FINISHED = auto()
    RESTORE_STARTED = auto()
    RESTORE_FINISHED = auto()
    TASKBAR_UPDATED = auto()
    FRAME_SCHEDULED = auto()
    QUIT_REQUESTED = auto()


@dataclass
class Event:
    """Event emitted by the window manager."""
    event_type: EventType
    view_id: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)


EventCallback = Callable[[Event], None]


class ShellEventType(Enum):
    """Lifecycle and request notifications from the shell protocol."""
    NEW_TOPLEVEL = auto()
    MAP = auto()
    UNMAP = auto()
    DESTROY = auto()
    COMMIT = auto()
    SET_TITLE = auto()
    SET_APP_ID = auto()
    REQUEST_MOVE = auto()
    REQUEST_RESIZE = auto()
    REQUEST_ACTIVATE = auto()
    NEW_DECORATION = auto()
    DECORATION_REQUEST_MODE = auto()
    DECORATION_DESTROY = auto()


@dataclass
class ShellEvent:
    """One tagged shell-protocol event."""
    event_type: ShellEventType
    view_id: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)


class WindowManagerError(Exception):
    """Base exception for window manager errors."""
    pass


class ViewNotFoundError(WindowManagerError):
    """Raised when a view is not found."""
    pass


class DecorationNotFoundError(WindowManagerError):
    """Raised when a decoration object is not found."""
    pass


class DuplicateIdError(WindowManagerError):
    """Raised when a shell event reuses the id of a live view or decoration."""
    pass


class WindowManager:
    """
    Owns every view, the focus stack and the per-seat interaction state.

    One instance lives for the whole run. Components hold no references to
    each other's state; views are passed by value and looked up by id
    wherever a handle may have gone stale.
    """

    def __init__(self, config: Optional["Config"] = None):
        """
        Initialize the window manager.

        Args:
            config: Configuration; defaults are used when omitted
        """
        if config is None:
            # config imports core.models, so resolve it at call time
            from ..config import Config
            config = Config()
        self.config = config
        self.geometry = ViewGeometryModel(self.config.theme, self.config.input)
        self.hit_tester = HitTester(self.config.theme, self.config.input)
        self.taskbar = TaskbarLayout(self.config.taskbar)
        self.animation = AnimationEngine(self.config.animation, self.config.theme,
                                         self.geometry, self.taskbar)
        self.interaction = InteractionStateMachine(self)

        self._views: Dict[str, View] = {}
        self._focus_stack: List[str] = []
        self._decorations: Dict[str, Decoration] = {}
        self._event_listeners: List[EventCallback] = []
        self._layout_bounds: Box = Box()

        self._cursor_x = 0.0
        self._cursor_y = 0.0
        self.modifiers = Modifier.NONE
        self.keyboard_focus_id: Optional[str] = None
        self.pointer_focus_id: Optional[str] = None

        self._next_view_pos: Optional[Tuple[int, int]] = None
        self._frame_scheduled = False

        self._shell_handlers = {
            ShellEventType.NEW_TOPLEVEL: self._on_new_toplevel,
            ShellEventType.MAP: self._on_map,
            ShellEventType.UNMAP: self._on_unmap,
            ShellEventType.DESTROY: self._on_destroy,
            ShellEventType.COMMIT: self._on_commit,
            ShellEventType.SET_TITLE: self._on_set_title,
            ShellEventType.SET_APP_ID: self._on_set_app_id,
            ShellEventType.REQUEST_MOVE: self._on_request_move,
            ShellEventType.REQUEST_RESIZE: self._on_request_resize,
            ShellEventType.REQUEST_ACTIVATE: self._on_request_activate,
            ShellEventType.NEW_DECORATION: self._on_new_decoration,
            ShellEventType.DECORATION_REQUEST_MODE: self._on_decoration_request_mode,
            ShellEventType.DECORATION_DESTROY: self._on_decoration_destroy,
        }

    # === Properties ===

    @property
    def views(self) -> List[View]:
        """All views, topmost first."""
        return self.focus_stack

    @property
    def focus_stack(self) -> List[View]:
        """Views in z-order, topmost first."""
        return [self._views[view_id] for view_id in self._focus_stack]

    @property
    def decorations(self) -> List[Decoration]:
        return list(self._decorations.values())

    @property
    def layout_bounds(self) -> Box:
        return self._layout_bounds

    @property
    def cursor(self) -> Tuple[float, float]:
        return (self._cursor_x, self._cursor_y)

    @property
    def grab_mode(self) -> GrabMode:
        return self.interaction.mode

    @property
    def focused_view(self) -> Optional[View]:
        return self.lookup_view(self.keyboard_focus_id)

    @property
    def frame_scheduled(self) -> bool:
        return self._frame_scheduled

    def set_layout_bounds(self, bounds: Box) -> None:
        """Set the output layout box (position and size of the desktop)."""
        if bounds == self._layout_bounds:
            return
        if bounds.is_empty:
            logger.warning(f"Output layout is empty: {bounds}")
        else:
            logger.info(f"Output layout set to {bounds}")
        self._layout_bounds = bounds
        self.taskbar.mark_dirty()
        self.schedule_frame()

    # === Events ===

    def add_event_listener(self, callback: EventCallback) -> None:
        """Add an event listener."""
        self._event_listeners.append(callback)

    def remove_event_listener(self, callback: EventCallback) -> None:
        """Remove an event listener."""
        if callback in self._event_listeners:
            self._event_listeners.remove(callback)

    def _emit_event(self, event: Event) -> None:
        """Emit an event to all listeners."""
        for listener in self._event_listeners:
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Event listener error: {e}")

    def schedule_frame(self) -> None:
        """Ask the output for another frame callback."""
        if self._frame_scheduled:
            return
        self._frame_scheduled = True
        self._emit_event(Event(event_type=EventType.FRAME_SCHEDULED))

    # === View lookup ===

    def lookup_view(self, view_id: Optional[str]) -> Optional[View]:
        """Resolve a weak view handle; None if it is gone."""
        if view_id is None:
            return None
        return self._views.get(view_id)

    def get_view(self, view_id: str) -> View:
        """
        Get a view by ID.

        Raises:
            ViewNotFoundError: If view doesn't exist
        """
        if view_id not in self._views:
            raise ViewNotFoundError(f"View {view_id} not found")
        return self._views[view_id]

    def get_decoration(self, decoration_id: str) -> Decoration:
        """
        Get a decoration object by ID.

        Raises:
            DecorationNotFoundError: If decoration doesn't exist
        """
        if decoration_id not in self._decorations:
            raise DecorationNotFoundError(f"Decoration {decoration_id} not found")
        return self._decorations[decoration_id]

    def view_at(self, lx: float, ly: float) -> Tuple[Optional[View], Optional[Tuple[float, float]]]:
        """
        Topmost view whose frame is under the point.

        Returns:
            (view, (sx, sy)) over a client surface, (view, None) over a
            server-side decoration, or (None, None). A point inside a
            client-decorated frame that misses its input region hits nothing.
        """
        for view in self.focus_stack:
            if not view.visible or not view.is_interactive:
                continue
            if not view.frame_box.contains(lx, ly):
                continue
            surface = self.hit_tester.surface_at(view, lx, ly)
            if surface is not None:
                return view, surface
            if not view.server_decorated:
                return None, None
            return view, None
        return None, None

    def view_frame_at(self, lx: float, ly: float) -> Optional[View]:
        """Topmost view whose padded frame contains the point."""
        for view in self.focus_stack:
            if not view.visible or not view.is_interactive:
                continue
            if self.hit_tester.in_padded_frame(view, lx, ly):
                return view
        return None

    def taskbar_view_at(self, lx: float, ly: float) -> Optional[View]:
        """Minimized view whose taskbar button is under the point."""
        if self._layout_bounds.is_empty:
            return None
        return self.taskbar.view_at(self.focus_stack, lx, ly)

    def taskbar_click_target(self) -> Optional[View]:
        """View whose taskbar button is currently held down, if any."""
        return self.lookup_view(self.taskbar.pressed_view_id)

    # === Focus ===

    def _update_title_color(self, view: View) -> None:
        if view.scene is None or view.is_animating:
            return
        theme = self.config.theme
        color = theme.color_title_active if view.activated else theme.color_title_inactive
        view.scene.title.set_color(color)

    def _raise(self, view: View) -> None:
        if view.id in self._focus_stack:
            self._focus_stack.remove(view.id)
        self._focus_stack.insert(0, view.id)

    def focus_view(self, view: Optional[View]) -> None:
        """
        Give keyboard focus to a view and raise it to the top.

        Views that are unmapped, minimized or animating are ignored.
        """
        if view is None or not view.is_interactive:
            return

        previous_id = self.keyboard_focus_id
        if previous_id == view.id:
            return

        previous = self.lookup_view(previous_id)
        if previous is not None:
            previous.activated = False
            self._update_title_color(previous)

        self._raise(view)
        view.activated = True
        self._update_title_color(view)
        self.keyboard_focus_id = view.id

        logger.debug(f"Focus changed: {previous_id} -> {view.id}")
        self._emit_event(Event(
            event_type=EventType.FOCUS_CHANGED,
            view_id=view.id,
            data={"previous": previous_id}
        ))

    def clear_focus(self, view: View) -> None:
        """Deactivate a view and drop keyboard focus if it held it."""
        view.activated = False
        self._update_title_color(view)
        if self.keyboard_focus_id != view.id:
            return

        self.keyboard_focus_id = None
        self._emit_event(Event(
            event_type=EventType.FOCUS_CHANGED,
            view_id=None,
            data={"previous": view.id}
        ))

    # === Pointer ===

    def _clamp_cursor(self) -> None:
        bounds = self._layout_bounds
        if bounds.is_empty:
            return
        self._cursor_x = max(bounds.x, min(bounds.x + bounds.width - 1, self._cursor_x))
        self._cursor_y = max(bounds.y, min(bounds.y + bounds.height - 1, self._cursor_y))

    def pointer_motion(self, dx: float, dy: float, time_ms: int) -> None:
        """Relative pointer motion."""
        self._cursor_x += dx
        self._cursor_y += dy
        self._clamp_cursor()
        self.interaction.process_motion(time_ms)

    def warp_pointer(self, x: float, y: float, time_ms: int) -> None:
        """Absolute pointer motion in layout coordinates."""
        self._cursor_x = x
        self._cursor_y = y
        self._clamp_cursor()
        self.interaction.process_motion(time_ms)

    def pointer_button(self, button: int, pressed: bool, time_ms: int) -> None:
        self.interaction.handle_button(button, pressed, time_ms)

    def pointer_notify(self, view: View, sx: float, sy: float, time_ms: int) -> None:
        """Deliver pointer enter (on change) and motion to a view's surface."""
        if self.pointer_focus_id != view.id:
            self.pointer_focus_id = view.id
            self._emit_event(Event(
                event_type=EventType.POINTER_ENTER,
                view_id=view.id,
                data={"sx": sx, "sy": sy}
            ))
        self._emit_event(Event(
            event_type=EventType.POINTER_MOTION,
            view_id=view.id,
            data={"sx": sx, "sy": sy, "time_ms": time_ms}
        ))

    def clear_pointer_focus(self) -> None:
        self.pointer_focus_id = None

    def forward_button(self, view: View, button: int, pressed: bool,
                       time_ms: int, serial: int) -> None:
        self._emit_event(Event(
            event_type=EventType.BUTTON_FORWARDED,
            view_id=view.id,
            data={"button": button, "pressed": pressed,
                  "time_ms": time_ms, "serial": serial}
        ))

    # === Keyboard ===

    def set_modifiers(self, modifiers: Modifier) -> None:
        self.modifiers = Modifier(modifiers)

    def move_modifier_held(self) -> bool:
        return bool(self.modifiers & self.config.move_modifier_mask)

    def handle_key(self, keysym: str, pressed: bool, time_ms: int) -> bool:
        """
        Run compositor keybindings.

        Args:
            keysym: Key name, e.g. "m" or "Escape"
            pressed: True on press

        Returns:
            True if the key was consumed; otherwise the caller forwards it
        """
        if not pressed or not self.move_modifier_held():
            return False

        if keysym == "Escape":
            logger.info("Quit requested from keyboard")
            self._emit_event(Event(event_type=EventType.QUIT_REQUESTED))
            return True
        if keysym == "m":
            self.restore_topmost_minimized(time_ms)
            return True
        return False

    def restore_topmost_minimized(self, time_ms: int) -> Optional[View]:
        """Start restoring the minimized view nearest the top of the stack."""
        for view in self.focus_stack:
            if view.is_mapped and view.is_minimized:
                if self.animation.begin_restore(self, view, time_ms):
                    return view
                return None
        return None

    # === Collaborator notifications ===

    def set_view_visible(self, view: View, visible: bool) -> None:
        view.visible = visible
        if view.scene is not None:
            view.scene.enabled = visible

    def request_configure(self, view: View, frame_width: int, frame_height: int) -> None:
        """Ask the client for the surface size matching a frame size."""
        width, height = self.geometry.surface_size_for_frame(view, frame_width, frame_height)
        self._emit_event(Event(
            event_type=EventType.CONFIGURE_REQUESTED,
            view_id=view.id,
            data={"width": width, "height": height}
        ))

    def notify_grab(self, view: Optional[View], started: bool, mode: GrabMode,
                    edges: Edge = Edge.NONE, view_id: Optional[str] = None,
                    reason: Optional[str] = None) -> None:
        if started:
            self._emit_event(Event(
                event_type=EventType.GRAB_STARTED,
                view_id=view.id if view else view_id,
                data={"mode": mode, "edges": edges,
                      "client_initiated": self.interaction.client_initiated}
            ))
        else:
            self._emit_event(Event(
                event_type=EventType.GRAB_ENDED,
                view_id=view.id if view else view_id,
                data={"mode": mode, "reason": reason}
            ))

    def notify_animation(self, view: View, started: bool,
                         transition: Optional[Transition] = None) -> None:
        transition = transition or view.transition
        if transition == Transition.MINIMIZING:
            event_type = EventType.MINIMIZE_STARTED if started else EventType.MINIMIZE_FINISHED
        else:
            event_type = EventType.RESTORE_STARTED if started else EventType.RESTORE_FINISHED
        self._emit_event(Event(event_type=event_type, view_id=view.id))
        self.schedule_frame()

    # === Frame ===

    def frame(self, time_ms: int) -> bool:
        """
        Per-frame callback: advance animations, then recompute the taskbar
        at most once.

        Returns:
            True while animations are still running
        """
        self._frame_scheduled = False
        animating = self.animation.tick(self, time_ms)

        if self.taskbar.update(self.focus_stack, self._layout_bounds):
            self._emit_event(Event(
                event_type=EventType.TASKBAR_UPDATED,
                data={"buttons": len(self.taskbar.scene.buttons)}
            ))

        if animating:
            self.schedule_frame()
        return animating

    # === Shell events ===

    def handle_shell_event(self, event: ShellEvent) -> Any:
        """
        Route one shell event through the dispatch table.

        Raises:
            ViewNotFoundError: If the event names an unknown view
            DecorationNotFoundError: If it names an unknown decoration
        """
        handler = self._shell_handlers[event.event_type]
        logger.debug(f"Shell event {event.event_type.name} for {event.view_id}")
        return handler(event)

    def place_new_view(self, view: View) -> None:
        """Cascade new views from the top-left of the layout."""
        box = self._layout_bounds if not self._layout_bounds.is_empty else DEFAULT_LAYOUT
        base_x = box.x + PLACEMENT_BASE_X
        base_y = box.y + PLACEMENT_BASE_Y
        max_x = max(box.x + box.width - PLACEMENT_MIN_TAIL_W, base_x)
        max_y = max(box.y + box.height - PLACEMENT_MIN_TAIL_H, base_y)

        if self._next_view_pos is None:
            self._next_view_pos = (base_x, base_y)
        next_x, next_y = self._next_view_pos

        view.x = min(max(next_x, box.x), max_x)
        view.y = min(max(next_y, box.y), max_y)

        next_x += PLACEMENT_STEP_X
        next_y += PLACEMENT_STEP_Y
        if next_x > max_x or next_y > max_y:
            next_x, next_y = base_x, base_y
        self._next_view_pos = (next_x, next_y)

    def _resolve_decoration_mode(self, view: View) -> DecorationMode:
        forced = self.config.forced_decoration_mode
        if forced is not None:
            return forced
        decoration = self._decorations.get(view.decoration_id) if view.decoration_id else None
        if decoration is not None and decoration.requested_mode is not None:
            return decoration.requested_mode
        return DecorationMode.CLIENT_SIDE

    def apply_decoration_mode(self, view: View) -> None:
        mode = self._resolve_decoration_mode(view)
        decoration = self._decorations.get(view.decoration_id) if view.decoration_id else None
        if decoration is not None:
            decoration.current_mode = mode
        if mode != view.decoration_mode:
            logger.info(f"View {view.id} decoration mode -> {mode.name}")
        self.geometry.set_decoration_mode(view, mode)

    def _on_new_toplevel(self, event: ShellEvent) -> str:
        view = View(app_id=event.data.get("app_id", ""),
                    title=event.data.get("title", ""))
        if event.view_id:
            if event.view_id in self._views:
                raise DuplicateIdError(f"View {event.view_id} already exists")
            view.id = event.view_id
        self._views[view.id] = view
        self._focus_stack.insert(0, view.id)

        self.place_new_view(view)
        self.geometry.ensure_scene(view)
        self.set_view_visible(view, False)
        self.apply_decoration_mode(view)

        logger.info(f"Created view {view.id} app_id='{view.app_id}' at ({view.x}, {view.y})")
        self._emit_event(Event(
            event_type=EventType.VIEW_CREATED,
            view_id=view.id,
            data={"app_id": view.app_id, "title": view.title}
        ))
        return view.id

    def _on_map(self, event: ShellEvent) -> None:
        view = self.get_view(event.view_id)
        view.life_state = LifeState.MAPPED
        view.transition = Transition.NONE
        self.apply_decoration_mode(view)
        self.set_view_visible(view, True)
        self.taskbar.mark_dirty()
        self.focus_view(view)

        logger.info(f"Mapped view {view.id} ({view.width}x{view.height})")
        self._emit_event(Event(event_type=EventType.VIEW_MAPPED, view_id=view.id))
        self.schedule_frame()

    def _drop_view_references(self, view: View) -> None:
        """Clear every handle other components hold on this view."""
        self.interaction.on_view_gone(view.id)
        if self.taskbar.pressed_view_id == view.id:
            self.taskbar.set_pressed(None)
        if self.pointer_focus_id == view.id:
            self.pointer_focus_id = None
        self.clear_focus(view)
        self.taskbar.mark_dirty()

    def _on_unmap(self, event: ShellEvent) -> None:
        view = self.get_view(event.view_id)
        self._drop_view_references(view)
        if view.is_animating:
            view.transition = Transition.NONE
            self.animation.reset_transform(view)
        view.life_state = LifeState.UNMAPPED
        view.taskbar_slot = None
        self.set_view_visible(view, False)

        logger.info(f"Unmapped view {view.id}")
        self._emit_event(Event(event_type=EventType.VIEW_UNMAPPED, view_id=view.id))
        self.schedule_frame()

    def _on_destroy(self, event: ShellEvent) -> None:
        view = self.get_view(event.view_id)
        self._drop_view_references(view)

        decoration = self._decorations.get(view.decoration_id) if view.decoration_id else None
        if decoration is not None:
            decoration.view_id = None
        view.decoration_id = None

        self._focus_stack.remove(view.id)
        del self._views[view.id]

        logger.info(f"Destroyed view {view.id}")
        self._emit_event(Event(event_type=EventType.VIEW_DESTROYED, view_id=view.id))
        self.schedule_frame()

    def _on_commit(self, event: ShellEvent) -> None:
        view = self.get_view(event.view_id)
        data = event.data
        view.surface_width = int(data.get("surface_width", view.surface_width))
        view.surface_height = int(data.get("surface_height", view.surface_height))
        if "geometry" in data:
            view.reported_geometry = data["geometry"]
        if "input_region" in data:
            view.input_region = data["input_region"]

        if view.is_mapped and not view.is_minimized and not view.is_animating:
            self.geometry.update_geometry(view)

    def _on_set_title(self, event: ShellEvent) -> None:
        view = self.get_view(event.view_id)
        view.title = event.data.get("title", "")
        self.taskbar.mark_dirty()
        self.schedule_frame()

    def _on_set_app_id(self, event: ShellEvent) -> None:
        view = self.get_view(event.view_id)
        view.app_id = event.data.get("app_id", "")
        self.apply_decoration_mode(view)
        self.taskbar.mark_dirty()
        self.schedule_frame()

    def _on_request_move(self, event: ShellEvent) -> bool:
        view = self.get_view(event.view_id)
        return self.interaction.request_move(view, event.data.get("serial", -1))

    def _on_request_resize(self, event: ShellEvent) -> bool:
        view = self.get_view(event.view_id)
        return self.interaction.request_resize(
            view, event.data.get("serial", -1), Edge(event.data.get("edges", 0)))

    def _on_request_activate(self, event: ShellEvent) -> bool:
        view = self.get_view(event.view_id)
        if not view.is_interactive:
            logger.debug(f"Ignoring activation request from view {view.id}")
            return False
        self.focus_view(view)
        return True

    def _on_new_decoration(self, event: ShellEvent) -> str:
        view = self.get_view(event.view_id)
        decoration = Decoration(view_id=view.id,
                                requested_mode=event.data.get("mode"))
        decoration_id = event.data.get("decoration_id")
        if decoration_id:
            if decoration_id in self._decorations and decoration_id != view.decoration_id:
                raise DuplicateIdError(f"Decoration {decoration_id} already exists")
            decoration.id = decoration_id

        stale = self._decorations.get(view.decoration_id) if view.decoration_id else None
        if stale is not None:
            stale.view_id = None
        self._decorations[decoration.id] = decoration
        view.decoration_id = decoration.id
        self.apply_decoration_mode(view)

        logger.info(f"Decoration {decoration.id} attached to view {view.id}")
        return decoration.id

    def _on_decoration_request_mode(self, event: ShellEvent) -> None:
        decoration = self.get_decoration(event.data["decoration_id"])
        decoration.requested_mode = event.data.get("mode")
        view = self.lookup_view(decoration.view_id)
        if view is None:
            logger.debug(f"Decoration {decoration.id} has no view, mode request stored")
            return
        self.apply_decoration_mode(view)
        self.schedule_frame()

    def _on_decoration_destroy(self, event: ShellEvent) -> None:
        decoration = self.get_decoration(event.data["decoration_id"])
        view = self.lookup_view(decoration.view_id)
        if view is not None and view.decoration_id == decoration.id:
            view.decoration_id = None
            self.apply_decoration_mode(view)
        del self._decorations[decoration.id]
        logger.info(f"Decoration {decoration.id} destroyed")

    # === State Queries ===

    def get_status(self) -> Dict[str, Any]:
        """
        Get complete status of the window manager.

        Returns:
            Dict with all views, grab and focus state, and taskbar buttons
        """
        return {
            "views": [
                {
                    "id": v.id,
                    "app_id": v.app_id,
                    "title": v.display_title,
                    "state": v.life_state.name,
                    "transition": v.transition.name,
                    "decoration": v.decoration_mode.name,
                    "frame": {"x": v.x, "y": v.y, "width": v.width, "height": v.height},
                    "activated": v.activated,
                    "visible": v.visible,
                }
                for v in self.focus_stack
            ],
            "grab": {
                "mode": self.interaction.mode.name,
                "view_id": self.interaction.grabbed_view_id,
                "edges": int(self.interaction.resize_edges),
            },
            "cursor": {"x": self._cursor_x, "y": self._cursor_y},
            "keyboard_focus": self.keyboard_focus_id,
            "pointer_focus": self.pointer_focus_id,
            "taskbar": [
                {"view_id": b.view_id, "x": b.x, "y": b.y,
                 "width": b.width, "height": b.height, "label": b.label}
                for b in self.taskbar.scene.buttons
            ],
        }
