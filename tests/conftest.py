"""Shared fixtures.

Settings are read at import time, so the environment is prepared before any
``mcstats`` module is imported.
"""

import os
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path

_TEST_ROOT = Path(tempfile.mkdtemp(prefix="mcstats-tests-"))
os.environ.setdefault("MCSTATS_CONFIG", str(_TEST_ROOT / "config.toml"))
os.environ.setdefault("MCSTATS_ENV", str(_TEST_ROOT / ".env"))
os.environ.setdefault("MCSTATS_DATABASE_URL", f"sqlite:///{_TEST_ROOT / 'mcstats.db'}")
os.environ.setdefault("MCSTATS_LOGS_DIR", str(_TEST_ROOT / "logs"))
os.environ.setdefault("MCSTATS_TIMELINE__ENABLED", "false")

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool  # noqa: E402

from mcstats.models import Base  # noqa: E402


@pytest.fixture
async def test_database():
    """Create isolated test database.

    Yields a factory of async session context managers. Connections are not
    pooled so sessions can also be opened from TestClient's event loop.
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name

    db_url = f"sqlite+aiosqlite:///{db_path}"
    engine = create_async_engine(db_url, echo=False, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    @asynccontextmanager
    async def get_session():
        async with async_session_maker() as session:
            yield session

    yield get_session

    await engine.dispose()
    Path(db_path).unlink(missing_ok=True)
