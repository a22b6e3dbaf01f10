# src/ttlsweep/core/__init__.py
"""Core infrastructure: clock, config, logging, stores and retention."""

from ttlsweep.core.clock import DEFAULT_CLOCK, Clock, MockClock, SystemClock
from ttlsweep.core.config import TtlSweepSettings, load_settings
from ttlsweep.core.logging import configure_logging

__all__ = [
    "DEFAULT_CLOCK",
    "Clock",
    "MockClock",
    "SystemClock",
    "TtlSweepSettings",
    "configure_logging",
    "load_settings",
]
