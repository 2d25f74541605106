"""Hourly job writing the server and player timelines."""

from typing import Callable, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.ext.asyncio import AsyncSession

from ..logger import log_exception, logger
from ..models import TimelinePoint
from ..plugins import PluginAccessor, get_all_plugins
from .crud import upsert_player_timeline, upsert_server_timeline
from .window import current_epoch, round_to_hour

SNAPSHOT_JOB_ID = "timeline_snapshot"


class TimelineRecorder:
    """Snapshots servers and players online per plugin into the timelines.

    A server counts as online when it pinged within ``ping_window_seconds``
    before the snapshot. Buckets are keyed by the snapshot time rounded to
    the nearest hour.
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        cron: str = "0 * * * *",
        ping_window_seconds: int = 60 * 60,
    ):
        self.session_factory = session_factory
        self.cron = cron
        self.ping_window_seconds = ping_window_seconds
        self._scheduler: Optional[AsyncIOScheduler] = None

    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    async def start(self) -> None:
        if self.is_running():
            logger.warning("Timeline recorder is already running")
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self._scheduled_snapshot,
            trigger=CronTrigger.from_crontab(self.cron),
            id=SNAPSHOT_JOB_ID,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info(f"Timeline recorder started with cron '{self.cron}'")

    async def stop(self) -> None:
        if not self.is_running():
            return

        assert self._scheduler is not None
        self._scheduler.shutdown()
        self._scheduler = None
        logger.info("Timeline recorder stopped")

    @log_exception("Timeline snapshot")
    async def _scheduled_snapshot(self) -> None:
        await self.record_snapshot()

    async def record_snapshot(
        self, now: Optional[int] = None
    ) -> Dict[str, TimelinePoint]:
        """Write one timeline bucket for every plugin.

        Args:
            now: Snapshot time, defaults to the current epoch

        Returns:
            The written bucket of each plugin, keyed by plugin name
        """
        if now is None:
            now = current_epoch()
        epoch = round_to_hour(now)
        since = now - self.ping_window_seconds

        points: Dict[str, TimelinePoint] = {}
        async with self.session_factory() as session:
            for row in await get_all_plugins(session):
                plugin = PluginAccessor.from_row(session, row)
                servers = await plugin.count_servers_last_updated(since, now)
                players = await plugin.sum_players_of_servers_last_updated(since, now)

                await upsert_server_timeline(session, plugin.id, epoch, servers)
                await upsert_player_timeline(session, plugin.id, epoch, players)
                points[plugin.name] = TimelinePoint(
                    epoch=epoch, servers=servers, players=players
                )

            await session.commit()

        logger.info(f"Recorded timeline bucket {epoch} for {len(points)} plugins")
        return points
