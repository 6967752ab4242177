"""
Simulation framework for testing Flux without a display.

This module provides:
- Virtual clients that answer configure requests like real toplevels
- Simulated compositor environment with a fake monotonic clock
- Scenario runner for automated testing
- Visual ASCII representation of windows, taskbar and cursor
"""

from dataclasses import dataclass, field
from typing import List, Optional, Callable, Dict, Any, Tuple
from enum import Enum, auto
import logging

from ..config import Config
from ..core import (
    WindowManager,
    Box,
    DecorationMode,
    Modifier,
    PointerButton,
    GrabMode,
    Edge,
    Event,
    EventType,
    ShellEvent,
    ShellEventType,
)

logger = logging.getLogger(__name__)

FRAME_INTERVAL_MS = 16


class SimulationEventType(Enum):
    """Types of simulation events."""
    CLIENT_CONNECTED = auto()
    CLIENT_DISCONNECTED = auto()
    POINTER_MOVE = auto()
    POINTER_BUTTON = auto()
    KEYBOARD_KEY = auto()
    CLIENT_REQUEST = auto()
    FRAME = auto()


@dataclass
class SimulationEvent:
    """An event in the simulation."""
    event_type: SimulationEventType
    view_id: str = ""
    timestamp: int = 0
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class VirtualClient:
    """
    A virtual toplevel client for simulation.

    Commits whatever size the compositor configures, the way a
    well-behaved client does.
    """
    id: str
    app_id: str
    title: str
    width: int = 640
    height: int = 480
    # None = the client never creates a decoration object
    decoration: Optional[DecorationMode] = DecorationMode.SERVER_SIDE
    # Visible-geometry offset inside the surface (shadow size)
    geometry_offset: Tuple[int, int] = (0, 0)
    input_region: Optional[Box] = None

    # Current state
    is_connected: bool = False
    has_focus: bool = False
    buttons_received: List[Tuple[int, bool, int]] = field(default_factory=list)
    configures: List[Tuple[int, int]] = field(default_factory=list)

    def commit_data(self) -> Dict[str, Any]:
        """Payload for a COMMIT shell event."""
        ox, oy = self.geometry_offset
        data: Dict[str, Any] = {
            "surface_width": self.width + 2 * ox,
            "surface_height": self.height + 2 * oy,
        }
        if ox or oy:
            data["geometry"] = Box(ox, oy, self.width, self.height)
        if self.input_region is not None:
            data["input_region"] = self.input_region
        return data

    @property
    def last_press_serial(self) -> Optional[int]:
        for button, pressed, serial in reversed(self.buttons_received):
            if pressed:
                return serial
        return None


class SimulatedCompositor:
    """
    Simulated compositor environment.

    Drives a WindowManager with shell events and input the way the real
    backend would, on a virtual output and a fake clock.
    """

    def __init__(self, width: int = 1280, height: int = 720,
                 config: Optional[Config] = None):
        """
        Initialize the simulated compositor.

        Args:
            width: Output width in pixels
            height: Output height in pixels
            config: Window manager configuration
        """
        self.output = Box(0, 0, width, height)
        self.wm = WindowManager(config)
        self.wm.add_event_listener(self._on_wm_event)
        self.wm.set_layout_bounds(self.output)

        self.clients: Dict[str, VirtualClient] = {}
        self.now_ms = 0

        self.event_log: List[SimulationEvent] = []
        self.wm_events: List[Event] = []
        self._event_callbacks: List[Callable[[SimulationEvent], None]] = []

    def add_event_callback(self, callback: Callable[[SimulationEvent], None]) -> None:
        """Add a callback for simulation events."""
        self._event_callbacks.append(callback)

    def _emit_event(self, event: SimulationEvent) -> None:
        """Record and emit a simulation event."""
        self.event_log.append(event)
        for callback in self._event_callbacks:
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Event callback error: {e}")

    def _on_wm_event(self, event: Event) -> None:
        self.wm_events.append(event)
        client = self.clients.get(event.view_id) if event.view_id else None

        if event.event_type == EventType.CONFIGURE_REQUESTED and client:
            client.width = event.data["width"]
            client.height = event.data["height"]
            client.configures.append((client.width, client.height))
            self.wm.handle_shell_event(ShellEvent(
                ShellEventType.COMMIT, client.id, client.commit_data()))
        elif event.event_type == EventType.BUTTON_FORWARDED and client:
            client.buttons_received.append(
                (event.data["button"], event.data["pressed"], event.data["serial"]))
        elif event.event_type == EventType.FOCUS_CHANGED:
            for c in self.clients.values():
                c.has_focus = c.id == event.view_id

    def events_of(self, event_type: EventType) -> List[Event]:
        """Window manager events of one type, oldest first."""
        return [e for e in self.wm_events if e.event_type == event_type]

    # === Client Management ===

    def connect_client(self, client: VirtualClient):
        """
        Create, decorate, commit and map a virtual client.

        Returns:
            The window manager's view for the client
        """
        self.clients[client.id] = client
        client.is_connected = True

        self.wm.handle_shell_event(ShellEvent(
            ShellEventType.NEW_TOPLEVEL, client.id,
            {"app_id": client.app_id, "title": client.title}))
        if client.decoration is not None:
            self.wm.handle_shell_event(ShellEvent(
                ShellEventType.NEW_DECORATION, client.id,
                {"decoration_id": f"{client.id}-decoration",
                 "mode": client.decoration}))
        self.wm.handle_shell_event(ShellEvent(
            ShellEventType.COMMIT, client.id, client.commit_data()))
        self.wm.handle_shell_event(ShellEvent(ShellEventType.MAP, client.id))

        self._emit_event(SimulationEvent(
            event_type=SimulationEventType.CLIENT_CONNECTED,
            view_id=client.id,
            timestamp=self.now_ms,
            data={"app_id": client.app_id}
        ))

        logger.info(f"Connected client '{client.title}'")
        return self.wm.get_view(client.id)

    def disconnect_client(self, client_id: str) -> None:
        """
        Unmap and destroy a virtual client.

        Args:
            client_id: ID of client to disconnect
        """
        if client_id not in self.clients:
            return

        client = self.clients.pop(client_id)
        client.is_connected = False
        if client.decoration is not None:
            self.wm.handle_shell_event(ShellEvent(
                ShellEventType.DECORATION_DESTROY, client_id,
                {"decoration_id": f"{client_id}-decoration"}))
        self.wm.handle_shell_event(ShellEvent(ShellEventType.UNMAP, client_id))
        self.wm.handle_shell_event(ShellEvent(ShellEventType.DESTROY, client_id))

        self._emit_event(SimulationEvent(
            event_type=SimulationEventType.CLIENT_DISCONNECTED,
            view_id=client_id,
            timestamp=self.now_ms,
        ))

        logger.info(f"Disconnected client '{client.title}'")

    def set_title(self, client_id: str, title: str) -> None:
        client = self.clients[client_id]
        client.title = title
        self.wm.handle_shell_event(ShellEvent(
            ShellEventType.SET_TITLE, client_id, {"title": title}))

    def set_output_size(self, width: int, height: int) -> None:
        self.output = Box(0, 0, width, height)
        self.wm.set_layout_bounds(self.output)

    # === Input Simulation ===

    def move_pointer(self, dx: float = 0, dy: float = 0,
                     absolute: Optional[Tuple[float, float]] = None) -> Tuple[float, float]:
        """
        Simulate pointer movement.

        Args:
            dx, dy: Relative movement (if absolute is None)
            absolute: Absolute position to move to

        Returns:
            Cursor position after clamping
        """
        if absolute:
            self.wm.warp_pointer(absolute[0], absolute[1], self.now_ms)
        else:
            self.wm.pointer_motion(dx, dy, self.now_ms)

        self._emit_event(SimulationEvent(
            event_type=SimulationEventType.POINTER_MOVE,
            timestamp=self.now_ms,
            data={"dx": dx, "dy": dy, "cursor": self.wm.cursor}
        ))

        return self.wm.cursor

    def click_button(self, button: int = PointerButton.LEFT,
                     pressed: bool = True) -> None:
        """
        Simulate a button press or release.

        Args:
            button: Linux input button code
            pressed: True for press, False for release
        """
        self.wm.pointer_button(button, pressed, self.now_ms)

        self._emit_event(SimulationEvent(
            event_type=SimulationEventType.POINTER_BUTTON,
            timestamp=self.now_ms,
            data={"button": button, "pressed": pressed,
                  "grab": self.wm.grab_mode.name}
        ))

    def click(self, x: float, y: float, button: int = PointerButton.LEFT) -> None:
        """Move to a point, press and release."""
        self.move_pointer(absolute=(x, y))
        self.click_button(button, True)
        self.click_button(button, False)

    def drag(self, start: Tuple[float, float], delta: Tuple[float, float],
             button: int = PointerButton.LEFT) -> None:
        """Press at start, move by delta, release."""
        self.move_pointer(absolute=start)
        self.click_button(button, True)
        self.move_pointer(delta[0], delta[1])
        self.click_button(button, False)

    def hold_modifiers(self, modifiers: Modifier) -> None:
        self.wm.set_modifiers(modifiers)

    def press_key(self, keysym: str, pressed: bool = True) -> bool:
        """
        Simulate a key press.

        Returns:
            True if a compositor binding consumed the key
        """
        handled = self.wm.handle_key(keysym, pressed, self.now_ms)

        self._emit_event(SimulationEvent(
            event_type=SimulationEventType.KEYBOARD_KEY,
            timestamp=self.now_ms,
            data={"keysym": keysym, "pressed": pressed, "handled": handled}
        ))

        return handled

    # === Client requests ===

    def request_move(self, client_id: str, serial: Optional[int] = None) -> bool:
        """Client asks for an interactive move, by default with its last press serial."""
        client = self.clients[client_id]
        if serial is None:
            serial = client.last_press_serial
        result = self.wm.handle_shell_event(ShellEvent(
            ShellEventType.REQUEST_MOVE, client_id,
            {"serial": serial if serial is not None else -1}))

        self._emit_event(SimulationEvent(
            event_type=SimulationEventType.CLIENT_REQUEST,
            view_id=client_id,
            timestamp=self.now_ms,
            data={"request": "move", "serial": serial, "granted": result}
        ))
        return result

    def request_resize(self, client_id: str, edges: Edge,
                       serial: Optional[int] = None) -> bool:
        """Client asks for an interactive resize."""
        client = self.clients[client_id]
        if serial is None:
            serial = client.last_press_serial
        result = self.wm.handle_shell_event(ShellEvent(
            ShellEventType.REQUEST_RESIZE, client_id,
            {"serial": serial if serial is not None else -1, "edges": edges}))

        self._emit_event(SimulationEvent(
            event_type=SimulationEventType.CLIENT_REQUEST,
            view_id=client_id,
            timestamp=self.now_ms,
            data={"request": "resize", "serial": serial, "granted": result}
        ))
        return result

    # === Time ===

    def advance(self, ms: int, frame_interval: int = FRAME_INTERVAL_MS) -> None:
        """Advance the clock, running a frame every frame_interval."""
        end = self.now_ms + ms
        while self.now_ms < end:
            self.now_ms = min(end, self.now_ms + frame_interval)
            self.wm.frame(self.now_ms)
            self._emit_event(SimulationEvent(
                event_type=SimulationEventType.FRAME,
                timestamp=self.now_ms,
            ))

    def run_until_idle(self, max_ms: int = 2000) -> bool:
        """
        Run frames until no animation is left.

        Returns:
            True if the compositor went idle within max_ms
        """
        elapsed = 0
        while elapsed < max_ms:
            self.now_ms += FRAME_INTERVAL_MS
            elapsed += FRAME_INTERVAL_MS
            if not self.wm.frame(self.now_ms):
                return True
        return False

    # === Visualization ===

    def render_ascii(self, width: int = 80, height: int = 24) -> str:
        """
        Render the current state as ASCII art.

        Args:
            width: ASCII output width
            height: ASCII output height

        Returns:
            ASCII representation of the output
        """
        # Create empty grid
        grid = [[' ' for _ in range(width)] for _ in range(height)]

        # Draw border
        for x in range(width):
            grid[0][x] = '-'
            grid[height-1][x] = '-'
        for y in range(height):
            grid[y][0] = '|'
            grid[y][width-1] = '|'
        grid[0][0] = grid[0][width-1] = grid[height-1][0] = grid[height-1][width-1] = '+'

        if self.output.is_empty:
            lines = [''.join(row) for row in grid]
            lines.append("Cursor: @ (no output)")
            return '\n'.join(lines)

        # Scale factors
        scale_x = width / self.output.width
        scale_y = height / self.output.height

        # Draw views bottom-up so the top of the stack wins
        grabbed_id = self.wm.interaction.grabbed_view_id
        for view in reversed(self.wm.focus_stack):
            if not view.visible or view.scene is None:
                continue
            scene = view.scene
            wx1 = int(scene.x * scale_x)
            wy1 = int(scene.y * scale_y)
            wx2 = int((scene.x + max(scene.title.width, 1)) * scale_x)
            wy2 = int((scene.y + view.height) * scale_y)

            # Clamp to grid
            wx1 = max(1, min(width-2, wx1))
            wy1 = max(1, min(height-2, wy1))
            wx2 = max(1, min(width-2, wx2))
            wy2 = max(1, min(height-2, wy2))

            char = '#' if view.id == grabbed_id else '.'
            for y in range(wy1, wy2):
                for x in range(wx1, wx2):
                    edge = y in (wy1, wy2-1) or x in (wx1, wx2-1)
                    grid[y][x] = char if edge else ' '

            # Draw window title (truncated)
            marker = '*' if view.activated else ''
            title = (marker + view.display_title)[:max(0, wx2-wx1-2)]
            for i, c in enumerate(title):
                if wx1 + 1 + i < wx2 and wy1 + 1 < height - 1:
                    grid[wy1 + 1][wx1 + 1 + i] = c

        # Draw taskbar buttons on the bottom row inside the border
        row = height - 2
        for button in self.wm.taskbar.scene.buttons:
            bx1 = max(1, int(button.x * scale_x))
            bx2 = min(width-2, int((button.x + button.width) * scale_x))
            text = f"[{button.label}]"[:max(0, bx2-bx1)]
            for i, c in enumerate(text):
                grid[row][bx1 + i] = c

        # Draw cursor
        cx = max(1, min(width-2, int(self.wm.cursor[0] * scale_x)))
        cy = max(1, min(height-2, int(self.wm.cursor[1] * scale_y)))
        grid[cy][cx] = '@'

        # Convert to string
        lines = [''.join(row) for row in grid]

        grab = self.wm.grab_mode
        legend = "Cursor: @"
        if grab != GrabMode.IDLE:
            legend += f" [{grab.name}]"
        lines.append(legend)

        return '\n'.join(lines)

    def get_state_summary(self) -> str:
        """Get a text summary of the current state."""
        lines = ["=== Simulation State ===", ""]

        cx, cy = self.wm.cursor
        lines.append(f"Cursor: ({cx:.0f}, {cy:.0f}) grab={self.wm.grab_mode.name}")
        lines.append(f"Clock: {self.now_ms} ms")

        lines.append("")
        lines.append("Views (top first):")
        for view in self.wm.focus_stack:
            focus = " [FOCUSED]" if view.activated else ""
            lines.append(f"  {view.display_title}: ({view.x}, {view.y}) "
                         f"{view.width}x{view.height} {view.life_state.name}"
                         f"{focus}")

        lines.append("")
        lines.append("Taskbar:")
        for button in self.wm.taskbar.scene.buttons:
            lines.append(f"  [{button.label}] at ({button.x}, {button.y}) "
                         f"{button.width}x{button.height}")

        return '\n'.join(lines)


class ScenarioRunner:
    """
    Runs predefined test scenarios.

    Useful for automated testing of window-management behavior.
    """

    def __init__(self, compositor: SimulatedCompositor):
        """Initialize with a compositor instance."""
        self.compositor = compositor
        self.results: List[Dict[str, Any]] = []

    def run_scenario(self, name: str,
                     steps: List[Callable[['SimulatedCompositor'], bool]],
                     description: str = "") -> bool:
        """
        Run a test scenario.

        Args:
            name: Scenario name
            steps: List of step functions that return True on success
            description: Human-readable description

        Returns:
            True if all steps passed
        """
        logger.info(f"Running scenario: {name}")

        result = {
            "name": name,
            "description": description,
            "steps_passed": 0,
            "steps_total": len(steps),
            "passed": False,
            "errors": [],
        }

        for i, step in enumerate(steps):
            try:
                if step(self.compositor):
                    result["steps_passed"] += 1
                else:
                    result["errors"].append(f"Step {i+1} returned False")
                    break
            except Exception as e:
                result["errors"].append(f"Step {i+1} raised: {e}")
                break

        result["passed"] = result["steps_passed"] == result["steps_total"]
        self.results.append(result)

        status = "PASSED" if result["passed"] else "FAILED"
        logger.info(f"Scenario '{name}': {status}")

        return result["passed"]

    def get_report(self) -> str:
        """Get a summary report of all scenarios."""
        lines = ["=== Scenario Report ===", ""]

        passed = sum(1 for r in self.results if r["passed"])
        total = len(self.results)

        lines.append(f"Total: {passed}/{total} passed")
        lines.append("")

        for result in self.results:
            status = "PASS" if result["passed"] else "FAIL"
            lines.append(f"[{status}] {result['name']}")
            if result["description"]:
                lines.append(f"       {result['description']}")
            lines.append(f"       Steps: {result['steps_passed']}/{result['steps_total']}")
            for error in result["errors"]:
                lines.append(f"       Error: {error}")
            lines.append("")

        return '\n'.join(lines)


# === Pre-built scenarios ===

def create_test_clients() -> List[VirtualClient]:
    """Create a standard set of test clients."""
    return [
        VirtualClient(id="editor", app_id="org.example.editor", title="Editor"),
        VirtualClient(id="browser", app_id="org.example.browser", title="Browser",
                      width=800, height=600),
        VirtualClient(id="terminal", app_id="foot", title="foot",
                      decoration=DecorationMode.CLIENT_SIDE),
    ]


def scenario_corner_resize(compositor: SimulatedCompositor) -> List[Callable]:
    """
    Corner resize scenario.

    Drags the bottom-right corner of a decorated 640x480 view by (+50, +30).
    """
    def step1_setup(comp: SimulatedCompositor) -> bool:
        """Map a server-decorated editor."""
        view = comp.connect_client(create_test_clients()[0])
        return (view.width, view.height) == (644, 510)

    def step2_press_corner(comp: SimulatedCompositor) -> bool:
        """Press inside the bottom-right resize margin."""
        view = comp.wm.get_view("editor")
        comp.move_pointer(absolute=(view.x + view.width - 1, view.y + view.height - 1))
        comp.click_button(PointerButton.LEFT, True)
        return (comp.wm.grab_mode == GrabMode.RESIZING and
                comp.wm.interaction.resize_edges == Edge.RIGHT | Edge.BOTTOM)

    def step3_drag(comp: SimulatedCompositor) -> bool:
        """Frame grows by exactly the motion delta."""
        comp.move_pointer(50, 30)
        view = comp.wm.get_view("editor")
        return (view.width, view.height) == (694, 540)

    def step4_release(comp: SimulatedCompositor) -> bool:
        """Release ends the grab and never reaches the client."""
        comp.click_button(PointerButton.LEFT, False)
        return (comp.wm.grab_mode == GrabMode.IDLE and
                not comp.clients["editor"].buttons_received)

    return [step1_setup, step2_press_corner, step3_drag, step4_release]


def scenario_minimize_restore(compositor: SimulatedCompositor) -> List[Callable]:
    """
    Minimize/restore round trip.

    Minimizes through the titlebar button and restores from the taskbar.
    """
    def step1_setup(comp: SimulatedCompositor) -> bool:
        """Map a server-decorated editor."""
        view = comp.connect_client(create_test_clients()[0])
        return view.is_interactive

    def step2_click_minimize(comp: SimulatedCompositor) -> bool:
        """Clicking the minimize button starts the animation."""
        view = comp.wm.get_view("editor")
        button = comp.wm.hit_tester.minimize_button_box(view)
        comp.click(button.center_x, button.center_y)
        return view.is_animating and not view.activated

    def step3_finish_minimize(comp: SimulatedCompositor) -> bool:
        """After the animation the view sits in the taskbar."""
        comp.run_until_idle()
        view = comp.wm.get_view("editor")
        return (view.is_minimized and not view.visible and
                comp.wm.taskbar.scene.button_for("editor") is not None)

    def step4_click_taskbar(comp: SimulatedCompositor) -> bool:
        """Clicking the taskbar button restores and refocuses the view."""
        slot = comp.wm.get_view("editor").taskbar_slot
        comp.click(slot.center_x, slot.center_y)
        comp.run_until_idle()
        view = comp.wm.get_view("editor")
        return (view.is_interactive and view.visible and view.activated and
                not comp.wm.taskbar.scene.enabled)

    return [step1_setup, step2_click_minimize, step3_finish_minimize, step4_click_taskbar]


def scenario_taskbar_packing(compositor: SimulatedCompositor) -> List[Callable]:
    """
    Taskbar packing scenario.

    Two minimized views pack left to right; destroying the first slides
    the second into its place.
    """
    def step1_setup(comp: SimulatedCompositor) -> bool:
        """Map two views and minimize both."""
        for client in create_test_clients()[:2]:
            comp.connect_client(client)
        for view_id in ("browser", "editor"):
            comp.wm.animation.begin_minimize(comp.wm, comp.wm.get_view(view_id),
                                             comp.now_ms)
        comp.run_until_idle()
        return all(comp.wm.get_view(v).is_minimized for v in ("browser", "editor"))

    def step2_packed(comp: SimulatedCompositor) -> bool:
        """First button at the margin, second right after it."""
        first, second = comp.wm.taskbar.scene.buttons
        margin = comp.wm.config.taskbar.margin
        return first.x == margin and second.x == margin + first.width + margin

    def step3_destroy_first(comp: SimulatedCompositor) -> bool:
        """The remaining button slides to the margin."""
        first = comp.wm.taskbar.scene.buttons[0]
        comp.disconnect_client(first.view_id)
        comp.advance(FRAME_INTERVAL_MS)
        buttons = comp.wm.taskbar.scene.buttons
        return len(buttons) == 1 and buttons[0].x == comp.wm.config.taskbar.margin

    return [step1_setup, step2_packed, step3_destroy_first]


def scenario_client_move(compositor: SimulatedCompositor) -> List[Callable]:
    """
    Client-initiated move scenario.

    A client-decorated terminal starts a move from its own titlebar; the
    release is still delivered to the client.
    """
    def step1_setup(comp: SimulatedCompositor) -> bool:
        """Map a client-decorated terminal and press inside it."""
        view = comp.connect_client(create_test_clients()[2])
        comp.move_pointer(absolute=(view.x + view.width // 2, view.y + view.height // 2))
        comp.click_button(PointerButton.LEFT, True)
        return comp.clients["terminal"].last_press_serial is not None

    def step2_request_move(comp: SimulatedCompositor) -> bool:
        """The request with the press serial is granted."""
        return comp.request_move("terminal") and comp.wm.grab_mode == GrabMode.MOVING

    def step3_move_and_release(comp: SimulatedCompositor) -> bool:
        """The view follows the pointer and the client sees the release."""
        view = comp.wm.get_view("terminal")
        start = (view.x, view.y)
        comp.move_pointer(-20, 15)
        comp.click_button(PointerButton.LEFT, False)
        received = comp.clients["terminal"].buttons_received
        return ((view.x, view.y) == (start[0] - 20, start[1] + 15) and
                comp.wm.grab_mode == GrabMode.IDLE and
                received[-1][:2] == (PointerButton.LEFT, False))

    return [step1_setup, step2_request_move, step3_move_and_release]


BUILTIN_SCENARIOS = {
    "corner-resize": (scenario_corner_resize, "Corner resize by (+50, +30)"),
    "minimize-restore": (scenario_minimize_restore, "Minimize button and taskbar restore"),
    "taskbar-packing": (scenario_taskbar_packing, "Taskbar packing after destroy"),
    "client-move": (scenario_client_move, "Client-initiated move grab"),
}
