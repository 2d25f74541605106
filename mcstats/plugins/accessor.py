"""Queries scoped to a single plugin."""

from typing import Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ServerCreationError
from ..logger import logger
from ..models import (
    PlayerTimeline,
    Plugin,
    Server,
    ServerRecord,
    ServerTimeline,
    VersionHistory,
)
from ..timeline.window import current_epoch


class PluginAccessor:
    """Read and aggregate queries for one plugin, plus saving its row.

    Every query is filtered by the plugin id unless noted otherwise. Ranges
    are inclusive on both ends and upper bounds default to now.
    """

    def __init__(
        self, session: AsyncSession, plugin_id: int, name: str, global_hits: int = 0
    ):
        self.session = session
        self._id = plugin_id
        self.name = name
        self.global_hits = global_hits

    @classmethod
    def from_row(cls, session: AsyncSession, plugin: Plugin) -> "PluginAccessor":
        return cls(session, plugin.id, plugin.name, plugin.global_hits or 0)

    @property
    def id(self) -> int:
        return self._id

    async def _scalar(self, stmt) -> int:
        result = await self.session.execute(stmt)
        return result.scalar_one() or 0

    async def get_versions(self) -> List[str]:
        """Get the distinct versions reported for this plugin, newest first."""
        result = await self.session.execute(
            select(VersionHistory.version)
            .where(VersionHistory.plugin == self._id)
            .group_by(VersionHistory.version)
            .order_by(
                func.max(VersionHistory.created).desc(),
                VersionHistory.version.desc(),
            )
        )
        return list(result.scalars().all())

    async def sum_players_of_servers_last_updated(
        self, min_updated: int, max_updated: Optional[int] = None
    ) -> int:
        """Sum the player counts of servers that pinged between the two bounds."""
        if max_updated is None:
            max_updated = current_epoch()

        return await self._scalar(
            select(func.coalesce(func.sum(Server.players), 0)).where(
                Server.plugin == self._id,
                Server.updated >= min_updated,
                Server.updated <= max_updated,
            )
        )

    async def count_version_changes(self, min_created: int, max_created: int) -> int:
        """Count version changes created between the two bounds.

        Not filtered by plugin: this counts changes of every plugin.
        """
        return await self._scalar(
            select(func.count()).select_from(VersionHistory).where(
                VersionHistory.created >= min_created,
                VersionHistory.created <= max_created,
            )
        )

    async def count_servers(self) -> int:
        return await self._scalar(
            select(func.count()).select_from(Server).where(Server.plugin == self._id)
        )

    async def count_servers_last_updated(
        self, min_updated: int, max_updated: Optional[int] = None
    ) -> int:
        """Count the servers that pinged between the two bounds."""
        if max_updated is None:
            max_updated = current_epoch()

        return await self._scalar(
            select(func.count())
            .select_from(Server)
            .where(
                Server.plugin == self._id,
                Server.updated >= min_updated,
                Server.updated <= max_updated,
            )
        )

    async def count_servers_using_version(self, version: str) -> int:
        return await self._scalar(
            select(func.count())
            .select_from(Server)
            .where(Server.plugin == self._id, Server.current_version == version)
        )

    async def get_timeline_players(
        self, min_epoch: int, max_epoch: Optional[int] = None
    ) -> Dict[int, int]:
        """Get players online keyed by epoch."""
        if max_epoch is None:
            max_epoch = current_epoch()

        result = await self.session.execute(
            select(PlayerTimeline.epoch, PlayerTimeline.players)
            .where(
                PlayerTimeline.plugin == self._id,
                PlayerTimeline.epoch >= min_epoch,
                PlayerTimeline.epoch <= max_epoch,
            )
            .order_by(PlayerTimeline.epoch)
        )
        return {epoch: players for epoch, players in result.all()}

    async def get_timeline_servers(
        self, min_epoch: int, max_epoch: Optional[int] = None
    ) -> Dict[int, int]:
        """Get servers online keyed by epoch."""
        if max_epoch is None:
            max_epoch = current_epoch()

        result = await self.session.execute(
            select(ServerTimeline.epoch, ServerTimeline.servers)
            .where(
                ServerTimeline.plugin == self._id,
                ServerTimeline.epoch >= min_epoch,
                ServerTimeline.epoch <= max_epoch,
            )
            .order_by(ServerTimeline.epoch)
        )
        return {epoch: servers for epoch, servers in result.all()}

    async def _get_server(self, guid: str) -> Optional[ServerRecord]:
        result = await self.session.execute(
            select(Server)
            .where(Server.guid == guid)
            .execution_options(populate_existing=True)
        )
        server = result.scalar_one_or_none()
        return ServerRecord.model_validate(server) if server else None

    async def get_or_create_server(self, guid: str) -> ServerRecord:
        """Get a server by its GUID, creating it if it doesn't exist.

        Raises:
            ServerCreationError: If the server can't be read back after insert
        """
        server = await self._get_server(guid)
        if server:
            return server

        now = current_epoch()
        # A concurrent insert of the same GUID is ignored, the reselect picks it up
        stmt = insert(Server).values(
            {
                Server.plugin: self._id,
                Server.guid: guid,
                Server.players: 0,
                Server.server_version: "",
                Server.current_version: "",
                Server.hits: 0,
                Server.created: now,
                Server.updated: now,
            }
        )
        stmt = stmt.on_conflict_do_nothing(index_elements=["GUID"])
        await self.session.execute(stmt)
        await self.session.commit()

        server = await self._get_server(guid)
        if server is None:
            logger.error(f"Server {guid} for plugin {self.name} missing after insert")
            raise ServerCreationError(guid)

        logger.info(f"Created server {guid} for plugin {self.name}")
        return server

    async def save(self, commit: bool = True) -> None:
        """Write name and global hits back to the plugin row.

        With ``commit=False`` the update joins the caller's transaction.
        """
        await self.session.execute(
            update(Plugin)
            .where(Plugin.id == self._id)
            .values({Plugin.name: self.name, Plugin.global_hits: self.global_hits})
        )
        if commit:
            await self.session.commit()

    async def increment_global_hits(self, commit: bool = True) -> None:
        # TODO: use an atomic GlobalHits + 1 update, concurrent pings lose increments here
        self.global_hits += 1
        await self.save(commit=commit)
