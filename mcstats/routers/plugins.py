"""Plugin overview API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.database import get_db
from ..errors import InvalidPlugin
from ..models import PluginSummary, VersionUsage
from ..plugins import PluginAccessor, get_plugin_by_name
from ..timeline.window import HOUR, current_epoch

router = APIRouter(prefix="/plugins", tags=["plugins"])


@router.get("/{name}", response_model=PluginSummary)
async def get_plugin_summary(
    name: str,
    db: AsyncSession = Depends(get_db),
):
    """
    Get an overview of a plugin.

    Returns hit and server counts, players online in the last hour and the
    number of servers on each known version, newest version first.
    """
    row = await get_plugin_by_name(db, name)
    if row is None:
        raise InvalidPlugin()
    plugin = PluginAccessor.from_row(db, row)

    now = current_epoch()
    versions = [
        VersionUsage(
            version=version,
            servers=await plugin.count_servers_using_version(version),
        )
        for version in await plugin.get_versions()
    ]

    return PluginSummary(
        name=plugin.name,
        global_hits=plugin.global_hits,
        servers_total=await plugin.count_servers(),
        servers_last_hour=await plugin.count_servers_last_updated(now - HOUR, now),
        players_last_hour=await plugin.sum_players_of_servers_last_updated(
            now - HOUR, now
        ),
        version_changes_last_day=await plugin.count_version_changes(
            now - 24 * HOUR, now
        ),
        versions=versions,
    )
