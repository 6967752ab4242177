"""
Unit tests for WindowManager.
"""

import unittest
from flux_wm.config import Config
from flux_wm.core import (
    Box,
    DecorationMode,
    DecorationNotFoundError,
    DuplicateIdError,
    Event,
    EventType,
    LifeState,
    Modifier,
    ShellEvent,
    ShellEventType,
    Transition,
    ViewNotFoundError,
    WindowManager,
)


def shell(wm, event_type, view_id=None, **data):
    return wm.handle_shell_event(ShellEvent(event_type, view_id, data))


def add_view(wm, view_id, width=640, height=480, mode=DecorationMode.SERVER_SIDE):
    shell(wm, ShellEventType.NEW_TOPLEVEL, view_id, title=view_id)
    if mode is not None:
        shell(wm, ShellEventType.NEW_DECORATION, view_id, mode=mode,
              decoration_id=f"{view_id}-deco")
    shell(wm, ShellEventType.COMMIT, view_id, surface_width=width, surface_height=height)
    shell(wm, ShellEventType.MAP, view_id)
    return wm.get_view(view_id)


class ManagerTestCase(unittest.TestCase):

    def setUp(self):
        self.wm = WindowManager(Config())
        self.wm.set_layout_bounds(Box(0, 0, 1280, 720))
        self.events = []
        self.wm.add_event_listener(self.events.append)

    def event_types(self):
        return [e.event_type for e in self.events]


class TestViewLifecycle(ManagerTestCase):
    """Tests for create/map/unmap/destroy."""

    def test_new_toplevel(self):
        """Test a new view is created hidden and unmapped."""
        view_id = shell(self.wm, ShellEventType.NEW_TOPLEVEL, app_id="foot", title="sh")
        view = self.wm.get_view(view_id)
        self.assertEqual(view.life_state, LifeState.UNMAPPED)
        self.assertFalse(view.visible)
        self.assertEqual(view.app_id, "foot")
        self.assertIn(EventType.VIEW_CREATED, self.event_types())

    def test_map_focuses(self):
        """Test mapping shows, focuses and raises the view."""
        view = add_view(self.wm, "a")
        self.assertTrue(view.is_interactive)
        self.assertTrue(view.visible)
        self.assertTrue(view.scene.enabled)
        self.assertEqual(self.wm.focused_view, view)
        self.assertIn(EventType.VIEW_MAPPED, self.event_types())

    def test_unmap_clears_focus(self):
        """Test unmapping drops keyboard focus and hides the view."""
        view = add_view(self.wm, "a")
        shell(self.wm, ShellEventType.UNMAP, "a")
        self.assertEqual(view.life_state, LifeState.UNMAPPED)
        self.assertFalse(view.visible)
        self.assertIsNone(self.wm.keyboard_focus_id)

    def test_unmap_during_animation(self):
        """Test unmapping mid-animation snaps the scene back."""
        view = add_view(self.wm, "a")
        self.wm.animation.begin_minimize(self.wm, view, 0)
        self.wm.frame(90)
        shell(self.wm, ShellEventType.UNMAP, "a")
        self.assertEqual(view.transition, Transition.NONE)
        self.assertEqual(view.scene.content.dest_width, 0)
        self.assertEqual(view.scene.title.width, view.width)

    def test_remap(self):
        """Test an unmapped view can map again."""
        view = add_view(self.wm, "a")
        shell(self.wm, ShellEventType.UNMAP, "a")
        shell(self.wm, ShellEventType.MAP, "a")
        self.assertTrue(view.is_interactive)

    def test_destroy(self):
        """Test destroying removes the view from every list."""
        add_view(self.wm, "a")
        shell(self.wm, ShellEventType.UNMAP, "a")
        shell(self.wm, ShellEventType.DESTROY, "a")
        self.assertIsNone(self.wm.lookup_view("a"))
        self.assertEqual(self.wm.focus_stack, [])
        with self.assertRaises(ViewNotFoundError):
            self.wm.get_view("a")

    def test_duplicate_view_id_rejected(self):
        """Test a second toplevel with a live id leaves the first intact."""
        view = add_view(self.wm, "a")
        with self.assertRaises(DuplicateIdError):
            shell(self.wm, ShellEventType.NEW_TOPLEVEL, "a", title="again")
        self.assertIs(self.wm.get_view("a"), view)
        self.assertEqual([v.id for v in self.wm.focus_stack], ["a"])
        shell(self.wm, ShellEventType.DESTROY, "a")
        self.assertEqual(self.wm.focus_stack, [])

    def test_duplicate_decoration_id_rejected(self):
        """Test a live decoration id cannot be attached to another view."""
        add_view(self.wm, "a")
        shell(self.wm, ShellEventType.NEW_TOPLEVEL, "b", title="b")
        with self.assertRaises(DuplicateIdError):
            shell(self.wm, ShellEventType.NEW_DECORATION, "b",
                  mode=DecorationMode.SERVER_SIDE, decoration_id="a-deco")
        self.assertEqual(self.wm.get_decoration("a-deco").view_id, "a")
        self.assertIsNone(self.wm.get_view("b").decoration_id)

    def test_unknown_view(self):
        """Test events for unknown views raise."""
        with self.assertRaises(ViewNotFoundError):
            shell(self.wm, ShellEventType.MAP, "missing")

    def test_commit_ignored_while_minimized(self):
        """Test commits while minimized do not touch the frame."""
        view = add_view(self.wm, "a")
        self.wm.animation.begin_minimize(self.wm, view, 0)
        self.wm.frame(200)
        shell(self.wm, ShellEventType.COMMIT, "a", surface_width=300, surface_height=200)
        self.assertEqual((view.width, view.height), (644, 510))
        self.assertEqual(view.surface_width, 300)

    def test_commit_with_geometry(self):
        """Test reported geometry drives the frame."""
        view = add_view(self.wm, "a")
        shell(self.wm, ShellEventType.COMMIT, "a", surface_width=660, surface_height=500,
              geometry=Box(10, 10, 640, 480))
        self.assertEqual((view.width, view.height), (644, 510))
        self.assertEqual((view.content_x, view.content_y), (-8, 18))

    def test_set_title_dirties_taskbar(self):
        """Test title changes schedule a taskbar recompute."""
        add_view(self.wm, "a")
        self.wm.frame(16)
        shell(self.wm, ShellEventType.SET_TITLE, "a", title="Renamed")
        self.assertEqual(self.wm.get_view("a").title, "Renamed")
        self.assertTrue(self.wm.taskbar.dirty)


class TestPlacement(ManagerTestCase):
    """Tests for cascade placement."""

    def test_cascade(self):
        """Test views step down and right from the base position."""
        positions = [(add_view(self.wm, str(i)).x, self.wm.get_view(str(i)).y)
                     for i in range(3)]
        self.assertEqual(positions, [(48, 40), (82, 66), (116, 92)])

    def test_cascade_wraps(self):
        """Test the cascade returns to the base once it runs out of room."""
        for i in range(12):
            add_view(self.wm, str(i))
        view = add_view(self.wm, "wrapped")
        self.assertEqual((view.x, view.y), (48, 40))

    def test_small_layout(self):
        """Test a layout too small to cascade keeps the base position."""
        self.wm.set_layout_bounds(Box(0, 0, 400, 300))
        first = add_view(self.wm, "a")
        second = add_view(self.wm, "b")
        self.assertEqual((first.x, first.y), (48, 40))
        self.assertEqual((second.x, second.y), (48, 40))

    def test_layout_offset(self):
        """Test placement is relative to the layout origin."""
        self.wm.set_layout_bounds(Box(1280, 0, 1920, 1080))
        view = add_view(self.wm, "a")
        self.assertEqual((view.x, view.y), (1328, 40))


class TestDecorations(ManagerTestCase):
    """Tests for decoration negotiation and weak handles."""

    def test_no_decoration_object(self):
        """Test views without a decoration object draw their own."""
        view = add_view(self.wm, "a", mode=None)
        self.assertEqual(view.decoration_mode, DecorationMode.CLIENT_SIDE)
        self.assertEqual((view.width, view.height), (640, 480))

    def test_requested_mode_honored(self):
        """Test the decoration request sets the mode."""
        view = add_view(self.wm, "a")
        self.assertEqual(view.decoration_mode, DecorationMode.SERVER_SIDE)
        self.assertEqual(self.wm.get_decoration("a-deco").current_mode,
                         DecorationMode.SERVER_SIDE)

    def test_mode_change_request(self):
        """Test the client can switch modes after mapping."""
        view = add_view(self.wm, "a")
        shell(self.wm, ShellEventType.DECORATION_REQUEST_MODE,
              decoration_id="a-deco", mode=DecorationMode.CLIENT_SIDE)
        self.assertEqual(view.decoration_mode, DecorationMode.CLIENT_SIDE)
        self.assertEqual((view.width, view.height), (640, 480))

    def test_forced_mode(self):
        """Test the config override beats the client request."""
        self.wm.config.input.decoration_mode = "server"
        view = add_view(self.wm, "a", mode=DecorationMode.CLIENT_SIDE)
        self.assertEqual(view.decoration_mode, DecorationMode.SERVER_SIDE)

    def test_decoration_destroyed_first(self):
        """Test destroying the decoration clears the view's handle."""
        view = add_view(self.wm, "a")
        shell(self.wm, ShellEventType.DECORATION_DESTROY, decoration_id="a-deco")
        self.assertIsNone(view.decoration_id)
        self.assertEqual(view.decoration_mode, DecorationMode.CLIENT_SIDE)
        self.assertEqual(self.wm.decorations, [])

    def test_view_destroyed_first(self):
        """Test destroying the view clears the decoration's handle."""
        add_view(self.wm, "a")
        shell(self.wm, ShellEventType.UNMAP, "a")
        shell(self.wm, ShellEventType.DESTROY, "a")
        decoration = self.wm.get_decoration("a-deco")
        self.assertIsNone(decoration.view_id)

        shell(self.wm, ShellEventType.DECORATION_REQUEST_MODE,
              decoration_id="a-deco", mode=DecorationMode.CLIENT_SIDE)
        self.assertEqual(decoration.requested_mode, DecorationMode.CLIENT_SIDE)
        shell(self.wm, ShellEventType.DECORATION_DESTROY, decoration_id="a-deco")
        self.assertEqual(self.wm.decorations, [])

    def test_replacing_decoration_unlinks_old(self):
        """Test a second decoration object replaces the first."""
        view = add_view(self.wm, "a")
        shell(self.wm, ShellEventType.NEW_DECORATION, "a",
              mode=DecorationMode.CLIENT_SIDE, decoration_id="second")
        self.assertEqual(view.decoration_id, "second")
        self.assertIsNone(self.wm.get_decoration("a-deco").view_id)
        self.assertEqual(view.decoration_mode, DecorationMode.CLIENT_SIDE)

    def test_unknown_decoration(self):
        """Test events for unknown decorations raise."""
        with self.assertRaises(DecorationNotFoundError):
            shell(self.wm, ShellEventType.DECORATION_DESTROY, decoration_id="nope")


class TestFocus(ManagerTestCase):
    """Tests for keyboard focus and stacking."""

    def test_focus_switch(self):
        """Test focusing deactivates the previous view."""
        a = add_view(self.wm, "a")
        b = add_view(self.wm, "b")
        self.assertTrue(b.activated)
        self.assertFalse(a.activated)

        self.wm.focus_view(a)
        self.assertTrue(a.activated)
        self.assertFalse(b.activated)
        self.assertEqual([v.id for v in self.wm.focus_stack], ["a", "b"])
        self.assertEqual(a.scene.title.color, self.wm.config.theme.color_title_active)
        self.assertEqual(b.scene.title.color, self.wm.config.theme.color_title_inactive)

    def test_refocus_is_noop(self):
        """Test focusing the focused view emits nothing."""
        a = add_view(self.wm, "a")
        self.events.clear()
        self.wm.focus_view(a)
        self.assertNotIn(EventType.FOCUS_CHANGED, self.event_types())

    def test_focus_refuses_minimized(self):
        """Test minimized views cannot take focus."""
        a = add_view(self.wm, "a")
        self.wm.animation.begin_minimize(self.wm, a, 0)
        self.wm.focus_view(a)
        self.assertIsNone(self.wm.keyboard_focus_id)

    def test_request_activate(self):
        """Test activation requests from clients."""
        a = add_view(self.wm, "a")
        add_view(self.wm, "b")
        self.assertTrue(shell(self.wm, ShellEventType.REQUEST_ACTIVATE, "a"))
        self.assertEqual(self.wm.focused_view, a)
        self.wm.animation.begin_minimize(self.wm, a, 0)
        self.assertFalse(shell(self.wm, ShellEventType.REQUEST_ACTIVATE, "a"))


class TestPointer(ManagerTestCase):
    """Tests for cursor handling."""

    def test_cursor_clamped_to_layout(self):
        """Test the cursor stays inside the output layout."""
        self.wm.warp_pointer(5000, -20, 0)
        self.assertEqual(self.wm.cursor, (1279, 0))
        self.wm.pointer_motion(-2000, 800, 1)
        self.assertEqual(self.wm.cursor, (0, 719))

    def test_view_at_decoration(self):
        """Test decorations report the view without surface coordinates."""
        view = add_view(self.wm, "a")
        self.assertEqual(self.wm.view_at(300, 60), (view, None))
        self.assertEqual(self.wm.view_at(300, 300), (view, (250, 232)))
        self.assertEqual(self.wm.view_at(5, 5), (None, None))

    def test_client_side_frame_outside_input(self):
        """Test client-decorated frames outside the input region hit nothing."""
        add_view(self.wm, "a", mode=None)
        shell(self.wm, ShellEventType.COMMIT, "a", input_region=Box(0, 0, 100, 100))
        self.assertEqual(self.wm.view_at(400, 400), (None, None))
        self.assertEqual(self.wm.view_frame_at(400, 400).id, "a")


class TestKeyboard(ManagerTestCase):
    """Tests for compositor keybindings."""

    def test_quit_binding(self):
        """Test modifier+Escape requests quit."""
        self.wm.set_modifiers(Modifier.LOGO)
        self.assertTrue(self.wm.handle_key("Escape", True, 0))
        self.assertIn(EventType.QUIT_REQUESTED, self.event_types())

    def test_keys_without_modifier_pass_through(self):
        """Test unbound keys are left for the client."""
        self.assertFalse(self.wm.handle_key("Escape", True, 0))
        self.wm.set_modifiers(Modifier.ALT)
        self.assertFalse(self.wm.handle_key("q", True, 0))
        self.assertFalse(self.wm.handle_key("Escape", False, 0))

    def test_ctrl_is_not_move_modifier(self):
        """Test modifiers outside the configured mask do nothing."""
        self.wm.set_modifiers(Modifier.CTRL)
        self.assertFalse(self.wm.move_modifier_held())

    def test_restore_binding(self):
        """Test modifier+m restores the topmost minimized view."""
        a = add_view(self.wm, "a")
        b = add_view(self.wm, "b")
        self.wm.animation.begin_minimize(self.wm, a, 0)
        self.wm.animation.begin_minimize(self.wm, b, 0)
        self.wm.frame(200)

        self.wm.set_modifiers(Modifier.ALT)
        self.assertTrue(self.wm.handle_key("m", True, 300))
        self.assertEqual(b.transition, Transition.RESTORING)
        self.assertTrue(a.is_minimized)

    def test_restore_binding_with_nothing_minimized(self):
        """Test the binding is consumed even with nothing to restore."""
        add_view(self.wm, "a")
        self.wm.set_modifiers(Modifier.ALT)
        self.assertTrue(self.wm.handle_key("m", True, 0))
        self.assertIsNone(self.wm.restore_topmost_minimized(0))


class TestFrame(ManagerTestCase):
    """Tests for frame scheduling and events."""

    def test_frame_scheduled_once(self):
        """Test repeated requests coalesce until the next frame."""
        self.wm.frame(0)
        self.events.clear()
        self.wm.schedule_frame()
        self.wm.schedule_frame()
        self.assertEqual(self.event_types().count(EventType.FRAME_SCHEDULED), 1)
        self.wm.frame(16)
        self.assertFalse(self.wm.frame_scheduled)

    def test_taskbar_recomputed_once_per_frame(self):
        """Test several invalidations cost one recompute."""
        a = add_view(self.wm, "a")
        self.wm.animation.begin_minimize(self.wm, a, 0)
        self.wm.frame(200)
        count = self.wm.taskbar.recompute_count
        shell(self.wm, ShellEventType.SET_TITLE, "a", title="x")
        shell(self.wm, ShellEventType.SET_TITLE, "a", title="y")
        self.wm.frame(216)
        self.assertEqual(self.wm.taskbar.recompute_count, count + 1)
        self.assertEqual(self.wm.taskbar.scene.buttons[0].label, "y")

    def test_animation_keeps_frames_coming(self):
        """Test frames reschedule while an animation runs."""
        a = add_view(self.wm, "a")
        self.wm.animation.begin_minimize(self.wm, a, 0)
        self.assertTrue(self.wm.frame(16))
        self.assertTrue(self.wm.frame_scheduled)
        self.assertFalse(self.wm.frame(500))

    def test_listener_errors_logged(self):
        """Test a failing listener does not stop the others."""
        def broken(event: Event):
            raise RuntimeError("boom")

        seen = []
        self.wm.add_event_listener(broken)
        self.wm.add_event_listener(seen.append)
        with self.assertLogs("flux_wm.core.manager", level="ERROR"):
            add_view(self.wm, "a")
        self.assertTrue(seen)

        self.wm.remove_event_listener(broken)
        add_view(self.wm, "b")

    def test_get_status(self):
        """Test the status snapshot."""
        add_view(self.wm, "a")
        status = self.wm.get_status()
        self.assertEqual(status["views"][0]["id"], "a")
        self.assertEqual(status["views"][0]["frame"]["width"], 644)
        self.assertEqual(status["grab"]["mode"], "IDLE")
        self.assertEqual(status["keyboard_focus"], "a")
        self.assertEqual(status["taskbar"], [])


if __name__ == "__main__":
    unittest.main()
