"""
Tests for ping ingestion.
"""

import pytest
from sqlalchemy import select

from mcstats.errors import PluginCreationError
from mcstats.models import Plugin, Server, VersionHistory
from mcstats.plugins import PluginAccessor, record_ping
from fixtures.rows import add_plugin


async def _version_history(session):
    result = await session.execute(
        select(VersionHistory.version, VersionHistory.created).order_by(
            VersionHistory.created
        )
    )
    return result.all()


@pytest.mark.asyncio
async def test_first_ping_creates_plugin_and_server(test_database, monkeypatch):
    db = test_database
    monkeypatch.setattr("mcstats.plugins.accessor.current_epoch", lambda: 1000)

    async with db() as session:
        server = await record_ping(
            session, "LWC", "guid-1", "4.00", "git-Bukkit-1.2.5", players=8, now=1000
        )

    assert server.guid == "guid-1"
    assert server.players == 8
    assert server.current_version == "4.00"
    assert server.server_version == "git-Bukkit-1.2.5"
    assert server.hits == 1
    assert server.created == 1000
    assert server.updated == 1000

    async with db() as session:
        plugin = (
            await session.execute(select(Plugin).where(Plugin.name == "LWC"))
        ).scalar_one()
        history = await _version_history(session)

    assert plugin.global_hits == 1
    assert server.plugin == plugin.id
    assert history == [("4.00", 1000)]


@pytest.mark.asyncio
async def test_repeated_ping_updates_server(test_database):
    db = test_database

    async with db() as session:
        await add_plugin(session, "LWC", global_hits=10)

    async with db() as session:
        await record_ping(session, "LWC", "guid-1", "4.00", "1.2.5", players=3, now=1000)
    async with db() as session:
        server = await record_ping(
            session, "LWC", "guid-1", "4.00", "1.2.6", players=5, now=2000
        )

    assert server.hits == 2
    assert server.players == 5
    assert server.server_version == "1.2.6"
    assert server.updated == 2000

    async with db() as session:
        plugin = (
            await session.execute(select(Plugin).where(Plugin.name == "LWC"))
        ).scalar_one()
        history = await _version_history(session)
        servers = (await session.execute(select(Server))).scalars().all()

    assert plugin.global_hits == 12
    assert history == [("4.00", 1000)]
    assert len(servers) == 1


@pytest.mark.asyncio
async def test_version_change_is_logged(test_database):
    db = test_database

    async with db() as session:
        await record_ping(session, "LWC", "guid-1", "4.00", "1.2.5", players=1, now=1000)
    async with db() as session:
        server = await record_ping(
            session, "LWC", "guid-1", "4.01", "1.2.5", players=1, now=2000
        )

    assert server.current_version == "4.01"

    async with db() as session:
        history = await _version_history(session)

    assert history == [("4.00", 1000), ("4.01", 2000)]


@pytest.mark.asyncio
async def test_negative_players_rejected(test_database):
    db = test_database

    async with db() as session:
        with pytest.raises(ValueError):
            await record_ping(session, "LWC", "guid-1", "4.00", "1.2.5", players=-1)

        plugins = (await session.execute(select(Plugin))).scalars().all()

    assert plugins == []


@pytest.mark.asyncio
async def test_failed_hit_increment_rolls_back_server_update(
    test_database, monkeypatch
):
    db = test_database

    async with db() as session:
        await record_ping(session, "LWC", "guid-1", "4.00", "1.2.5", players=3, now=1000)

    async def failing_increment(self, commit=True):
        raise RuntimeError("database is locked")

    monkeypatch.setattr(PluginAccessor, "increment_global_hits", failing_increment)

    async with db() as session:
        with pytest.raises(RuntimeError):
            await record_ping(
                session, "LWC", "guid-1", "4.01", "1.2.6", players=9, now=2000
            )

    async with db() as session:
        server = (await session.execute(select(Server))).scalar_one()
        plugin = (await session.execute(select(Plugin))).scalar_one()
        history = await _version_history(session)

    assert server.hits == 1
    assert server.players == 3
    assert server.current_version == "4.00"
    assert server.updated == 1000
    assert plugin.global_hits == 1
    assert history == [("4.00", 1000)]


@pytest.mark.asyncio
async def test_plugin_missing_after_insert_raises(test_database, monkeypatch):
    db = test_database

    async def always_missing(session, name):
        return None

    monkeypatch.setattr("mcstats.plugins.crud.get_plugin_by_name", always_missing)

    async with db() as session:
        with pytest.raises(PluginCreationError) as exc_info:
            await record_ping(session, "LWC", "guid-1", "4.00", "1.2.5", players=1)

    assert exc_info.value.name == "LWC"
    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "Failed to create plugin."
