#!/usr/bin/env python3
"""
flux-ctl: Command-line tool for inspecting the Flux window manager core.

This tool allows:
- Showing and editing the configuration
- Classifying a point against a synthetic view (hit-testing)
- Packing a list of titles into the taskbar
- Running the built-in simulation scenarios
"""

import argparse
import sys
import json
import logging
import os
from pathlib import Path
from typing import Optional

from ..core import (
    WindowManager,
    Box,
    DecorationMode,
    LifeState,
    View,
    ShellEvent,
    ShellEventType,
    TaskbarLayout,
)
from ..config import ConfigManager, ConfigError, SECTIONS
from ..simulation import SimulatedCompositor, ScenarioRunner, BUILTIN_SCENARIOS

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
XDG_STATE_HOME = os.environ.get("XDG_STATE_HOME", os.path.expanduser("~/.local/state"))
DEFAULT_LOG_FILE = Path(XDG_STATE_HOME) / "flux" / "flux.log"


def configure_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """
    Set up root logging.

    Args:
        verbose: Log DEBUG instead of WARNING
        log_file: Also log to this file; "" selects the default state path
    """
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        path = Path(log_file) if log_file else DEFAULT_LOG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


class FluxController:
    """
    High-level controller for flux-ctl operations.

    Bridges between CLI commands and the core window manager.
    """

    def __init__(self, config_dir: Optional[str] = None):
        """Initialize controller with optional config directory override."""
        config_path = Path(config_dir) if config_dir else None
        self.config_manager = ConfigManager(config_path)
        self.config = self.config_manager.load_config()

    def get_config(self) -> dict:
        """Get current configuration."""
        from dataclasses import asdict

        data = {"version": self.config.version}
        for name in SECTIONS:
            data[name] = asdict(getattr(self.config, name))
        return data

    def set_option(self, section: str, key: str, raw_value: str) -> None:
        """
        Set one configuration field from its command-line text and save.

        The value is parsed as JSON when possible, else kept as a string.
        """
        try:
            value = json.loads(raw_value)
        except json.JSONDecodeError:
            value = raw_value
        self.config_manager.update_section(section, **{key: value})

    def hit_test(self, x: float, y: float, width: int, height: int,
                 view_x: int, view_y: int, app_id: str,
                 client_side: bool) -> dict:
        """Classify a point against a synthetic mapped view."""
        wm = WindowManager(self.config)
        wm.set_layout_bounds(Box(0, 0, 1280, 720))

        view_id = wm.handle_shell_event(ShellEvent(
            ShellEventType.NEW_TOPLEVEL, data={"app_id": app_id, "title": app_id}))
        mode = DecorationMode.CLIENT_SIDE if client_side else DecorationMode.SERVER_SIDE
        wm.handle_shell_event(ShellEvent(
            ShellEventType.NEW_DECORATION, view_id, {"mode": mode}))
        wm.handle_shell_event(ShellEvent(
            ShellEventType.COMMIT, view_id,
            {"surface_width": width, "surface_height": height}))
        wm.handle_shell_event(ShellEvent(ShellEventType.MAP, view_id))

        view = wm.get_view(view_id)
        view.x, view.y = view_x, view_y
        tester = wm.hit_tester
        result = tester.classify(view, x, y)

        return {
            "view": {"x": view.x, "y": view.y, "width": view.width,
                     "height": view.height, "decoration": view.decoration_mode.name},
            "point": {"x": x, "y": y},
            "region": result.region.name,
            "edges": [e.name for e in type(result.edges) if e and e in result.edges],
            "resize_margin": tester.resize_margin(view),
            "move_margin": tester.move_margin(view),
            "outer_grab_pad": tester.outer_grab_pad(view),
        }

    def pack_taskbar(self, titles: list, width: int, height: int) -> dict:
        """Pack minimized views with the given titles into a taskbar."""
        layout = TaskbarLayout(self.config.taskbar)
        views = [View(id=f"view{i}", title=title, life_state=LifeState.MINIMIZED)
                 for i, title in enumerate(titles)]
        layout.update(views, Box(0, 0, width, height))

        return {
            "bar": {"x": layout.scene.x, "y": layout.scene.y,
                    "width": layout.scene.width, "height": layout.scene.height,
                    "enabled": layout.scene.enabled},
            "buttons": [
                {"title": v.title, "placed": v.taskbar_slot is not None,
                 "box": None if v.taskbar_slot is None else {
                     "x": v.taskbar_slot.x, "y": v.taskbar_slot.y,
                     "width": v.taskbar_slot.width, "height": v.taskbar_slot.height},
                 "label": (layout.scene.button_for(v.id).label
                           if layout.scene.button_for(v.id) else None)}
                for v in views
            ],
        }

    def simulate(self, names: list, render: bool = False) -> dict:
        """Run built-in scenarios, each on a fresh compositor."""
        results = []
        renders = {}
        report_lines = []
        for name in names:
            factory, description = BUILTIN_SCENARIOS[name]
            compositor = SimulatedCompositor(config=self.config)
            runner = ScenarioRunner(compositor)
            runner.run_scenario(name, factory(compositor), description)
            results.extend(runner.results)
            report_lines.append(runner.get_report())
            if render:
                renders[name] = compositor.render_ascii()

        return {"results": results, "renders": renders,
                "report": "\n".join(report_lines)}


def cmd_config(args, controller: FluxController) -> int:
    """Handle 'config' command."""
    config = controller.get_config()

    if args.json:
        print(json.dumps(config, indent=2))
    else:
        print("Configuration")
        print("=" * 40)
        for section in SECTIONS:
            print(f"\n{section}:")
            for key, value in config[section].items():
                print(f"  {key}: {value}")

    return 0


def cmd_set(args, controller: FluxController) -> int:
    """Handle 'set' command."""
    try:
        controller.set_option(args.section, args.key, args.value)
        print(f"Set {args.section}.{args.key} = {args.value}")
        return 0
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_reset_config(args, controller: FluxController) -> int:
    """Handle 'reset-config' command."""
    controller.config_manager.reset_to_defaults()
    print(f"Configuration reset to defaults ({controller.config_manager.config_file})")
    return 0


def cmd_hit_test(args, controller: FluxController) -> int:
    """Handle 'hit-test' command."""
    result = controller.hit_test(args.x, args.y, args.width, args.height,
                                 args.view_x, args.view_y, args.app_id,
                                 args.client_side)

    if args.json:
        print(json.dumps(result, indent=2))
    else:
        view = result["view"]
        print(f"View: ({view['x']}, {view['y']}) {view['width']}x{view['height']} "
              f"{view['decoration']}")
        print(f"Point: ({args.x:.0f}, {args.y:.0f})")
        edges = "+".join(result["edges"]) or "-"
        print(f"Region: {result['region']} edges={edges}")
        print(f"Margins: resize={result['resize_margin']} move={result['move_margin']} "
              f"pad={result['outer_grab_pad']}")

    return 0


def cmd_taskbar(args, controller: FluxController) -> int:
    """Handle 'taskbar' command."""
    result = controller.pack_taskbar(args.titles, args.output_width, args.output_height)

    if args.json:
        print(json.dumps(result, indent=2))
    else:
        bar = result["bar"]
        state = "enabled" if bar["enabled"] else "disabled"
        print(f"Taskbar: y={bar['y']} {bar['width']}x{bar['height']} ({state})")
        for button in result["buttons"]:
            if button["box"] is None:
                print(f"  {button['title']}: (does not fit)")
                continue
            box = button["box"]
            print(f"  [{button['label']}] x={box['x']} y={box['y']} "
                  f"{box['width']}x{box['height']}")

    return 0


def cmd_simulate(args, controller: FluxController) -> int:
    """Handle 'simulate' command."""
    names = list(BUILTIN_SCENARIOS) if args.scenario == "all" else [args.scenario]
    result = controller.simulate(names, render=args.render)
    passed = all(r["passed"] for r in result["results"])

    if args.json:
        print(json.dumps({"results": result["results"], "renders": result["renders"]},
                         indent=2))
    else:
        print(result["report"])
        for name, art in result["renders"].items():
            print(f"--- {name} ---")
            print(art)

    return 0 if passed else 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="flux-ctl",
        description="Flux window manager control utility",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  flux-ctl config                       Show configuration
  flux-ctl set input move_modifier alt  Change the move modifier
  flux-ctl hit-test 691 549             Classify a point against a 640x480 view
  flux-ctl taskbar Editor Browser       Pack two minimized windows
  flux-ctl simulate all --render        Run every scenario and draw the result
""",
    )

    parser.add_argument(
        "--config-dir",
        help="Override configuration directory",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--log-file",
        nargs="?",
        const="",
        default=None,
        help="Also log to a file (default location if no path is given)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # config
    subparsers.add_parser("config", help="Show configuration")

    # set
    p = subparsers.add_parser("set", help="Set a configuration field")
    p.add_argument("section", help="Section name (theme, input, animation, taskbar)")
    p.add_argument("key", help="Field name")
    p.add_argument("value", help="New value (JSON or plain string)")

    # reset-config
    subparsers.add_parser("reset-config", help="Reset configuration to defaults")

    # hit-test
    p = subparsers.add_parser("hit-test", help="Classify a point against a view")
    p.add_argument("x", type=float, help="Point x in layout coordinates")
    p.add_argument("y", type=float, help="Point y in layout coordinates")
    p.add_argument("--width", type=int, default=640, help="Client surface width")
    p.add_argument("--height", type=int, default=480, help="Client surface height")
    p.add_argument("--view-x", type=int, default=48, help="Frame x position")
    p.add_argument("--view-y", type=int, default=40, help="Frame y position")
    p.add_argument("--app-id", default="org.example.app", help="Client app id")
    p.add_argument("--client-side", action="store_true",
                   help="Client draws its own decorations")

    # taskbar
    p = subparsers.add_parser("taskbar", help="Pack minimized window titles")
    p.add_argument("titles", nargs="+", help="Window titles in focus order")
    p.add_argument("--output-width", type=int, default=1280, help="Output width")
    p.add_argument("--output-height", type=int, default=720, help="Output height")

    # simulate
    p = subparsers.add_parser("simulate", help="Run simulation scenarios")
    p.add_argument("scenario", nargs="?", default="all",
                   choices=["all"] + list(BUILTIN_SCENARIOS),
                   help="Scenario to run")
    p.add_argument("--render", action="store_true", help="Print ASCII render")

    return parser


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    controller = FluxController(args.config_dir)
    global_config = controller.config.global_config
    log_file = args.log_file
    if log_file is None and global_config.log_file:
        log_file = global_config.log_file
    configure_logging(args.verbose or global_config.verbose, log_file)

    commands = {
        "config": cmd_config,
        "set": cmd_set,
        "reset-config": cmd_reset_config,
        "hit-test": cmd_hit_test,
        "taskbar": cmd_taskbar,
        "simulate": cmd_simulate,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args, controller)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
