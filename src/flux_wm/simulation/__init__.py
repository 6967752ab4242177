"""
Simulation module for testing Flux without a display.

Provides virtual clients, a simulated compositor, and test scenarios.
"""

from .simulator import (
    SimulatedCompositor,
    VirtualClient,
    SimulationEvent,
    SimulationEventType,
    ScenarioRunner,
    BUILTIN_SCENARIOS,
    create_test_clients,
    scenario_corner_resize,
    scenario_minimize_restore,
    scenario_taskbar_packing,
    scenario_client_move,
)

__all__ = [
    "SimulatedCompositor",
    "VirtualClient",
    "SimulationEvent",
    "SimulationEventType",
    "ScenarioRunner",
    "BUILTIN_SCENARIOS",
    "create_test_clients",
    "scenario_corner_resize",
    "scenario_minimize_restore",
    "scenario_taskbar_packing",
    "scenario_client_move",
]
