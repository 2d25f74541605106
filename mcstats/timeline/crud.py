"""CRUD operations for the hourly timelines."""

from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import PlayerTimeline, ServerTimeline


async def upsert_server_timeline(
    session: AsyncSession, plugin_id: int, epoch: int, servers: int
) -> None:
    """Write the servers online for a plugin at an epoch.

    An existing bucket for the same plugin and epoch is overwritten.
    """
    stmt = insert(ServerTimeline).values(
        {
            ServerTimeline.plugin: plugin_id,
            ServerTimeline.epoch: epoch,
            ServerTimeline.servers: servers,
        }
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["Plugin", "Epoch"],
        set_={"Servers": servers},
    )
    await session.execute(stmt)


async def upsert_player_timeline(
    session: AsyncSession, plugin_id: int, epoch: int, players: int
) -> None:
    """Write the players online for a plugin at an epoch.

    An existing bucket for the same plugin and epoch is overwritten.
    """
    stmt = insert(PlayerTimeline).values(
        {
            PlayerTimeline.plugin: plugin_id,
            PlayerTimeline.epoch: epoch,
            PlayerTimeline.players: players,
        }
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["Plugin", "Epoch"],
        set_={"Players": players},
    )
    await session.execute(stmt)
