"""
Hourly timelines of servers and players online.

The recorder is imported from ``mcstats.timeline.recorder`` directly since it
depends on ``mcstats.plugins``.
"""

from .window import HOUR, compute_window, current_epoch, join_timelines, round_to_hour

__all__ = [
    "HOUR",
    "compute_window",
    "current_epoch",
    "join_timelines",
    "round_to_hour",
]
