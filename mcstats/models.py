from typing import List

from pydantic import BaseModel, ConfigDict
from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(AsyncAttrs, DeclarativeBase):
    """SQLAlchemy declarative base for all ORM models with async support."""

    pass


# Table and column names follow the schema shared with the ping collectors,
# timestamps are integer unix epochs.


class Plugin(Base):
    """Tracked plugin."""

    __tablename__ = "Plugin"

    id: Mapped[int] = mapped_column("ID", primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column("Name", String(40), unique=True, index=True)
    global_hits: Mapped[int] = mapped_column("GlobalHits", Integer, default=0)


class Server(Base):
    """One reporting server installation."""

    __tablename__ = "Server"
    __table_args__ = (Index("idx_server_plugin_updated", "Plugin", "Updated"),)

    id: Mapped[int] = mapped_column("ID", primary_key=True, autoincrement=True)
    plugin: Mapped[int] = mapped_column("Plugin", ForeignKey("Plugin.ID"), index=True)
    guid: Mapped[str] = mapped_column("GUID", String(40), unique=True, index=True)
    players: Mapped[int] = mapped_column("Players", Integer, default=0)
    server_version: Mapped[str] = mapped_column("ServerVersion", String(75), default="")
    current_version: Mapped[str] = mapped_column(
        "CurrentVersion", String(40), default=""
    )
    hits: Mapped[int] = mapped_column("Hits", Integer, default=0)
    created: Mapped[int] = mapped_column("Created", Integer)
    updated: Mapped[int] = mapped_column("Updated", Integer)


class VersionHistory(Base):
    """Append-only log of version changes reported by servers."""

    __tablename__ = "VersionHistory"
    __table_args__ = (Index("idx_version_history_plugin_created", "Plugin", "Created"),)

    id: Mapped[int] = mapped_column("ID", primary_key=True, autoincrement=True)
    plugin: Mapped[int] = mapped_column("Plugin", ForeignKey("Plugin.ID"))
    version: Mapped[str] = mapped_column("Version", String(40))
    created: Mapped[int] = mapped_column("Created", Integer, index=True)


class ServerTimeline(Base):
    """Servers online per plugin, one row per hour bucket."""

    __tablename__ = "ServerTimeline"
    __table_args__ = (
        Index("idx_server_timeline_plugin_epoch", "Plugin", "Epoch", unique=True),
    )

    id: Mapped[int] = mapped_column("ID", primary_key=True, autoincrement=True)
    plugin: Mapped[int] = mapped_column("Plugin", ForeignKey("Plugin.ID"))
    epoch: Mapped[int] = mapped_column("Epoch", Integer)
    servers: Mapped[int] = mapped_column("Servers", Integer)


class PlayerTimeline(Base):
    """Players online per plugin, one row per hour bucket."""

    __tablename__ = "PlayerTimeline"
    __table_args__ = (
        Index("idx_player_timeline_plugin_epoch", "Plugin", "Epoch", unique=True),
    )

    id: Mapped[int] = mapped_column("ID", primary_key=True, autoincrement=True)
    plugin: Mapped[int] = mapped_column("Plugin", ForeignKey("Plugin.ID"))
    epoch: Mapped[int] = mapped_column("Epoch", Integer)
    players: Mapped[int] = mapped_column("Players", Integer)


# Pydantic models for entities and API responses


class ServerRecord(BaseModel):
    """Immutable snapshot of a Server row."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    plugin: int
    guid: str
    players: int
    server_version: str
    current_version: str
    hits: int
    created: int
    updated: int


class TimelinePoint(BaseModel):
    """Servers and players online at one epoch."""

    epoch: int
    servers: int
    players: int


class VersionUsage(BaseModel):
    version: str
    servers: int


class PluginSummary(BaseModel):
    """Plugin overview for the summary endpoint."""

    name: str
    global_hits: int
    servers_total: int
    servers_last_hour: int
    players_last_hour: int
    version_changes_last_day: int
    versions: List[VersionUsage]
