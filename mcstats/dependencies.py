from typing import Annotated, Optional

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from .db.database import get_db
from .errors import InputMissing, InvalidPlugin
from .plugins import PluginAccessor, get_plugin_by_name


async def get_plugin(
    plugin: Annotated[Optional[str], Query()] = None,
    db: AsyncSession = Depends(get_db),
) -> PluginAccessor:
    """
    Resolve the ``plugin`` query parameter to a plugin accessor.

    Raises:
        InputMissing: If the parameter is absent
        InvalidPlugin: If no plugin has that name
    """
    if plugin is None:
        raise InputMissing("No plugin provided.")

    row = await get_plugin_by_name(db, plugin)
    if row is None:
        raise InvalidPlugin()

    return PluginAccessor.from_row(db, row)
