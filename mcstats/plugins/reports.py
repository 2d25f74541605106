"""Ping ingestion: apply one server report to the database."""

from typing import Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from ..logger import logger
from ..models import Server, ServerRecord, VersionHistory
from ..timeline.window import current_epoch
from .accessor import PluginAccessor
from .crud import get_or_create_plugin


async def record_ping(
    session: AsyncSession,
    plugin_name: str,
    guid: str,
    plugin_version: str,
    server_version: str,
    players: int,
    now: Optional[int] = None,
) -> ServerRecord:
    """Record a ping from a server running a plugin.

    Creates the plugin and server rows on first contact, logs a version
    change when the reported plugin version differs from the stored one,
    refreshes the server row and bumps both hit counters in one commit.

    Args:
        session: Database session
        plugin_name: Name of the reporting plugin
        guid: Server GUID
        plugin_version: Plugin version running on the server
        server_version: Server software version string
        players: Players currently online
        now: Ping time, defaults to the current epoch

    Returns:
        The server as stored after the ping

    Raises:
        ValueError: If players is negative
        PluginCreationError: If the plugin row can't be created
        ServerCreationError: If the server row can't be created
    """
    if players < 0:
        raise ValueError(f"Player count can't be negative: {players}")
    if now is None:
        now = current_epoch()

    plugin = PluginAccessor.from_row(
        session, await get_or_create_plugin(session, plugin_name)
    )
    server = await plugin.get_or_create_server(guid)

    if server.current_version != plugin_version:
        session.add(
            VersionHistory(plugin=plugin.id, version=plugin_version, created=now)
        )
        logger.info(
            f"Server {guid} changed {plugin.name} version "
            f"{server.current_version!r} -> {plugin_version!r}"
        )

    await session.execute(
        update(Server)
        .where(Server.id == server.id)
        .values(
            {
                Server.players: players,
                Server.server_version: server_version,
                Server.current_version: plugin_version,
                Server.updated: now,
                Server.hits: Server.hits + 1,
            }
        )
    )
    await plugin.increment_global_hits(commit=False)
    await session.commit()
    logger.debug(f"Recorded ping from {guid} for {plugin.name} ({players} players)")

    return await plugin.get_or_create_server(guid)
