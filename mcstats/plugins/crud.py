"""CRUD operations for Plugin model."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import PluginCreationError
from ..logger import logger
from ..models import Plugin


async def get_plugin_by_name(session: AsyncSession, name: str) -> Optional[Plugin]:
    """Get plugin by name.

    Args:
        session: Database session
        name: Plugin name

    Returns:
        Plugin or None if not found
    """
    result = await session.execute(
        select(Plugin)
        .where(Plugin.name == name)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_all_plugins(session: AsyncSession) -> List[Plugin]:
    """Get all plugins ordered by id."""
    result = await session.execute(select(Plugin).order_by(Plugin.id))
    return list(result.scalars().all())


async def get_or_create_plugin(session: AsyncSession, name: str) -> Plugin:
    """Get plugin by name, creating it with zero hits if it doesn't exist.

    Args:
        session: Database session
        name: Plugin name

    Returns:
        Plugin

    Raises:
        PluginCreationError: If the plugin can't be read back after insert
    """
    plugin = await get_plugin_by_name(session, name)
    if plugin:
        return plugin

    stmt = insert(Plugin).values({Plugin.name: name, Plugin.global_hits: 0})
    stmt = stmt.on_conflict_do_nothing(index_elements=["Name"])
    await session.execute(stmt)
    await session.commit()

    plugin = await get_plugin_by_name(session, name)
    if plugin is None:
        logger.error(f"Plugin {name} missing after insert")
        raise PluginCreationError(name)

    logger.info(f"Added plugin {name} ({plugin.id}) to database")
    return plugin
