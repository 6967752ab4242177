"""
CLI module for the Flux window manager.

Provides the flux-ctl command-line tool.
"""

from .flux_ctl import FluxController, configure_logging, main

__all__ = ["FluxController", "configure_logging", "main"]
