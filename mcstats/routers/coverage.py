"""Servers and players online over the last hours."""

import re
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query

from ..config import settings
from ..dependencies import get_plugin
from ..errors import InputMissing, UnsupportedRange
from ..models import TimelinePoint
from ..plugins import PluginAccessor
from ..timeline.window import compute_window, join_timelines

router = APIRouter(tags=["coverage"])

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_hours(raw: Optional[str], max_hours: int) -> int:
    """Validate the ``hours`` parameter.

    Raises:
        InputMissing: If the parameter is absent
        UnsupportedRange: If it is not an integer in ``1..max_hours``
    """
    if raw is None:
        raise InputMissing("No amount of days provided.")

    # int() alone would also take "1_0" and non-ASCII digits
    if not _INTEGER_PATTERN.fullmatch(raw.strip()):
        raise UnsupportedRange()

    hours = int(raw)
    if hours <= 0 or hours > max_hours:
        raise UnsupportedRange()
    return hours


@router.get("/coverage", response_model=List[TimelinePoint])
@router.get("/coverage.php", response_model=List[TimelinePoint], include_in_schema=False)
async def get_coverage(
    hours: Annotated[Optional[str], Query()] = None,
    plugin: PluginAccessor = Depends(get_plugin),
):
    """
    Get servers and players online for a plugin, one point per hour.

    Hours with only one of the two counts recorded are left out.
    """
    minimum, maximum = compute_window(parse_hours(hours, settings.max_lookback_hours))

    servers = await plugin.get_timeline_servers(minimum, maximum)
    players = await plugin.get_timeline_players(minimum, maximum)

    return join_timelines(servers, players)
