"""
Interaction state machine - pointer grabs and button routing.

Owns the grab mode (idle, moving, resizing), the grabbed view handle and
the grab anchors. Converts pointer motion and button events plus hit-test
results into geometry changes, animation starts and forwarded client
events.
"""

from typing import Optional, Set, Tuple, TYPE_CHECKING
import logging

from .geometry import lround
from .hit_test import HitRegion
from .models import Box, Edge, GrabMode, PointerButton, View

if TYPE_CHECKING:
    from .manager import WindowManager

logger = logging.getLogger(__name__)


class InteractionStateMachine:
    """
    Grab state and pointer routing for one seat.

    The grabbed view is held as a weak handle (its id) and looked up
    through the window manager before every use.
    """

    def __init__(self, wm: "WindowManager"):
        self.wm = wm
        self.mode = GrabMode.IDLE
        self.grabbed_view_id: Optional[str] = None
        self.resize_edges = Edge.NONE
        self.grab_button: Optional[int] = None
        self.client_initiated = False

        # Moving: cursor minus view origin at grab start
        self.grab_anchor: Tuple[float, float] = (0.0, 0.0)
        # Resizing: frame and cursor at grab start
        self.resize_initial: Box = Box()
        self.resize_cursor_start: Tuple[float, float] = (0.0, 0.0)

        self.suppress_next_button_release = False

        self._buttons_held: Set[int] = set()
        self._serial = 0
        self._last_press_serial: Optional[int] = None
        self._last_press_button: Optional[int] = None

    # === State ===

    @property
    def is_grabbing(self) -> bool:
        return self.mode != GrabMode.IDLE

    @property
    def grabbed_view(self) -> Optional[View]:
        """Grabbed view if it is still alive, else None."""
        if self.grabbed_view_id is None:
            return None
        return self.wm.lookup_view(self.grabbed_view_id)

    @property
    def last_press_serial(self) -> Optional[int]:
        return self._last_press_serial

    def _next_serial(self) -> int:
        self._serial += 1
        return self._serial

    # === Grab lifecycle ===

    def begin_move(self, view: View, button: Optional[int],
                   client_initiated: bool = False) -> None:
        """Enter moving mode; anchor is the cursor offset from the view origin."""
        self.wm.focus_view(view)
        cx, cy = self.wm.cursor
        self.mode = GrabMode.MOVING
        self.grabbed_view_id = view.id
        self.resize_edges = Edge.NONE
        self.grab_anchor = (cx - view.x, cy - view.y)
        self.grab_button = button
        self.client_initiated = client_initiated
        self.suppress_next_button_release = True

        logger.info(f"Move grab started on view {view.id}"
                    f"{' (client)' if client_initiated else ''}")
        self.wm.notify_grab(view, started=True, mode=self.mode, edges=Edge.NONE)

    def begin_resize(self, view: View, edges: Edge, button: Optional[int],
                     client_initiated: bool = False) -> None:
        """Enter resizing mode; anchor is the frame and cursor at grab start."""
        self.wm.focus_view(view)
        self.mode = GrabMode.RESIZING
        self.grabbed_view_id = view.id
        self.resize_edges = edges
        self.resize_initial = view.frame_box
        self.resize_cursor_start = self.wm.cursor
        self.grab_button = button
        self.client_initiated = client_initiated
        self.suppress_next_button_release = True

        logger.info(f"Resize grab started on view {view.id} edges={edges!r}"
                    f"{' (client)' if client_initiated else ''}")
        self.wm.notify_grab(view, started=True, mode=self.mode, edges=edges)

    def end_grab(self, reason: str = "release") -> None:
        """Return to idle and drop the grabbed view handle."""
        if self.mode == GrabMode.IDLE:
            return

        view_id = self.grabbed_view_id
        mode = self.mode
        self.mode = GrabMode.IDLE
        self.grabbed_view_id = None
        self.resize_edges = Edge.NONE
        self.grab_button = None
        self.client_initiated = False

        logger.info(f"{mode.name.capitalize()} grab on view {view_id} ended ({reason})")
        self.wm.notify_grab(None, started=False, mode=mode, view_id=view_id,
                            reason=reason)

    def on_view_gone(self, view_id: str) -> None:
        """Cancel the grab if the grabbed view was unmapped or destroyed."""
        if self.grabbed_view_id == view_id:
            self.end_grab(reason="view gone")

    # === Client-initiated grabs ===

    def validate_serial(self, view: View, serial: int) -> bool:
        """
        Check a client grab request against the last forwarded press.

        The serial must belong to the latest press, a button must still be
        held, and the press must have gone to this view.
        """
        if not view.is_interactive:
            return False
        if self._last_press_serial is None or serial != self._last_press_serial:
            return False
        if not self._buttons_held:
            return False
        return self.wm.pointer_focus_id == view.id

    def request_move(self, view: View, serial: int) -> bool:
        if self.is_grabbing or not self.validate_serial(view, serial):
            logger.info(f"Rejected client move request from view {view.id} (serial {serial})")
            return False
        self.begin_move(view, self._last_press_button, client_initiated=True)
        return True

    def request_resize(self, view: View, serial: int, edges: Edge) -> bool:
        edges = Edge(edges) & (Edge.TOP | Edge.BOTTOM | Edge.LEFT | Edge.RIGHT)
        if edges == Edge.NONE:
            logger.info(f"Rejected client resize request from view {view.id}: no edges")
            return False
        if self.is_grabbing or not self.validate_serial(view, serial):
            logger.info(f"Rejected client resize request from view {view.id} (serial {serial})")
            return False
        self.begin_resize(view, edges, self._last_press_button, client_initiated=True)
        return True

    # === Motion ===

    def process_motion(self, time_ms: int) -> None:
        """Apply the current cursor position to the active grab, or route it."""
        wm = self.wm
        cx, cy = wm.cursor

        if self.mode != GrabMode.IDLE:
            view = self.grabbed_view
            if view is None:
                self.end_grab(reason="stale view")
            elif self.mode == GrabMode.MOVING:
                self._move_to(view, cx, cy)
                return
            else:
                self._resize_to(view, cx, cy)
                return

        view, surface = wm.view_at(cx, cy)
        if view is None or surface is None:
            wm.clear_pointer_focus()
            return

        wm.focus_view(view)
        wm.pointer_notify(view, surface[0], surface[1], time_ms)

    def _move_to(self, view: View, cx: float, cy: float) -> None:
        view.x = int(cx - self.grab_anchor[0])
        view.y = int(cy - self.grab_anchor[1])
        if view.scene is not None:
            view.scene.set_position(view.x, view.y)

    def _resize_to(self, view: View, cx: float, cy: float) -> None:
        dx = lround(cx - self.resize_cursor_start[0])
        dy = lround(cy - self.resize_cursor_start[1])
        box = self.wm.geometry.resize_box(view, self.resize_initial,
                                          self.resize_edges, dx, dy)

        view.x = box.x
        view.y = box.y
        if view.scene is not None:
            view.scene.set_position(view.x, view.y)
        self.wm.geometry.set_frame_size(view, box.width, box.height)
        self.wm.request_configure(view, box.width, box.height)

    # === Buttons ===

    def handle_button(self, button: int, pressed: bool, time_ms: int) -> None:
        wm = self.wm
        self.process_motion(time_ms)

        if pressed:
            self._buttons_held.add(button)
        else:
            self._buttons_held.discard(button)

        cx, cy = wm.cursor
        if pressed:
            taskbar_view = wm.taskbar_view_at(cx, cy)
            if taskbar_view is not None:
                wm.taskbar.set_pressed(taskbar_view.id)
                wm.schedule_frame()
                self.suppress_next_button_release = True
                return
            self._handle_press(button, time_ms)
        else:
            self._handle_release(button, time_ms)

    def _handle_press(self, button: int, time_ms: int) -> None:
        wm = self.wm
        cx, cy = wm.cursor
        if self.is_grabbing:
            logger.debug(f"Ignoring button {button:#x} press during grab")
            return

        view, surface = wm.view_at(cx, cy)
        frame_view = view if view is not None else wm.view_frame_at(cx, cy)
        if frame_view is None:
            return

        result = wm.hit_tester.classify(frame_view, cx, cy,
                                        surface_hit=surface is not None)
        if button == PointerButton.LEFT:
            if result.region == HitRegion.RESIZE:
                self.begin_resize(frame_view, result.edges, button)
                return
            if result.region == HitRegion.MOVE_RING:
                self.begin_move(frame_view, button)
                return

        if view is None:
            return

        if button == PointerButton.LEFT and wm.move_modifier_held():
            self.begin_move(view, button)
            return

        if result.region == HitRegion.MINIMIZE_BUTTON:
            self.suppress_next_button_release = True
            wm.animation.begin_minimize(wm, view, time_ms)
            wm.schedule_frame()
            return

        if button == PointerButton.LEFT and result.region in (
                HitRegion.TITLEBAR, HitRegion.TERMINAL_DRAG):
            self.begin_move(view, button)
            return

        if surface is None:
            # Plain decoration click; the client never sees the pair
            self.suppress_next_button_release = True
            return

        wm.focus_view(view)

        serial = self._next_serial()
        self._last_press_serial = serial
        self._last_press_button = button
        wm.forward_button(view, button, True, time_ms, serial)

    def _handle_release(self, button: int, time_ms: int) -> None:
        wm = self.wm

        if wm.taskbar.pressed_view_id is not None:
            pressed_view = wm.lookup_view(wm.taskbar.pressed_view_id)
            wm.taskbar.set_pressed(None)
            self.suppress_next_button_release = False

            cx, cy = wm.cursor
            if (pressed_view is not None and pressed_view.is_minimized and
                    wm.taskbar_view_at(cx, cy) is pressed_view):
                wm.animation.begin_restore(wm, pressed_view, time_ms)
            wm.schedule_frame()
            return

        if self.is_grabbing:
            if button != self.grab_button:
                logger.debug(f"Dropping button {button:#x} release during grab")
                return
            view = self.grabbed_view
            if self.client_initiated and view is not None:
                wm.forward_button(view, button, False, time_ms, self._next_serial())
            self.suppress_next_button_release = False
            self.end_grab()
            return

        if self.suppress_next_button_release:
            self.suppress_next_button_release = False
            return

        view = wm.lookup_view(wm.pointer_focus_id) if wm.pointer_focus_id else None
        if view is not None:
            wm.forward_button(view, button, False, time_ms, self._next_serial())
