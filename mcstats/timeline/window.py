"""Time window helpers for hourly timelines."""

import math
import time
from typing import Dict, List, Optional, Tuple

from ..models import TimelinePoint

HOUR = 60 * 60


def current_epoch() -> int:
    return int(time.time())


def round_to_hour(epoch: float) -> int:
    """Round an epoch to the nearest hour boundary, halves round up."""
    return int(math.floor(epoch / HOUR + 0.5)) * HOUR


def compute_window(hours: int, now: Optional[float] = None) -> Tuple[int, int]:
    """Get the ``(minimum, maximum)`` epochs covering the last ``hours`` hours.

    Both bounds sit on hour boundaries, ``maximum`` is ``now`` rounded to the
    nearest hour.
    """
    if now is None:
        now = current_epoch()
    base_epoch = round_to_hour(now)
    return base_epoch - hours * HOUR, base_epoch


def join_timelines(
    servers: Dict[int, int], players: Dict[int, int]
) -> List[TimelinePoint]:
    """Inner join two epoch keyed series, keeping the order of ``servers``.

    Epochs missing from ``players`` are dropped.
    """
    return [
        TimelinePoint(epoch=epoch, servers=count, players=players[epoch])
        for epoch, count in servers.items()
        if epoch in players
    ]
