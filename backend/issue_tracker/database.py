"""
Database engine and per-request sessions.

Services own their transactions; sessions handed out here are closed after
the request and never committed on the service's behalf.
"""

import logging
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from issue_tracker.core.config import get_settings

logger = logging.getLogger(__name__)

# Seconds a SQLite writer waits for another connection's write lock
SQLITE_BUSY_TIMEOUT = 5.0


def engine_options(database_url: str, debug: bool = False) -> dict[str, Any]:
    """Keyword arguments for create_async_engine, tuned per backend."""
    options: dict[str, Any] = {"echo": debug}
    if make_url(database_url).get_backend_name() == "sqlite":
        options["connect_args"] = {"timeout": SQLITE_BUSY_TIMEOUT}
    else:
        options["pool_pre_ping"] = True
    return options


settings = get_settings()

engine = create_async_engine(settings.database_url, **engine_options(settings.database_url, settings.debug))

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session dependency."""
    async with async_session_factory() as session:
        yield session


async def check_db(session: AsyncSession) -> bool:
    """Run a trivial query; False if the database cannot be reached."""
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        return False
    return True


async def init_db() -> None:
    """Create all tables. There is no migration tooling; tables are created directly."""
    # Register every table with SQLModel.metadata before create_all
    import issue_tracker.models.counter  # noqa: F401
    import issue_tracker.models.issue  # noqa: F401
    import issue_tracker.models.property_definition  # noqa: F401
    import issue_tracker.models.property_value  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
