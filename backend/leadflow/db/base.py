"""SQLAlchemy base, engine lifecycle and session factory for the session store."""

import structlog
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from leadflow.core.config import get_settings

logger = structlog.get_logger(__name__)


class Base(DeclarativeBase):
    pass


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _engine_options(db_url: str, echo: bool) -> dict:
    """Engine keyword arguments for the configured backend.

    SQLite (local runs and tests) keeps a single file connection, so only
    pooled server backends get connection health checks.
    """
    options: dict = {"echo": echo}
    if make_url(db_url).get_backend_name() != "sqlite":
        options["pool_pre_ping"] = True
    return options


async def init_db(url: str | None = None) -> None:
    """Create the engine and session factory, then create the questionnaire tables.

    Idempotent: a second call while the engine is alive does nothing.

    Args:
        url: Database URL override (defaults to settings.database_url)
    """
    global _engine, _session_factory

    if _engine is not None:
        return

    settings = get_settings()
    db_url = url or settings.database_url

    _engine = create_async_engine(db_url, **_engine_options(db_url, settings.debug))
    _session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    # questionnaire_sessions must be registered on Base.metadata before create_all
    import leadflow.db.models  # noqa: F401

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info(
        "database_initialized",
        url=make_url(db_url).render_as_string(hide_password=True),
        tables=sorted(Base.metadata.tables),
    )


async def close_db() -> None:
    """Dispose of the engine and release all connections."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the configured session factory.

    Raises RuntimeError if init_db() has not been called.
    """
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _session_factory


async def ping_db() -> bool:
    """Return True if the session store database answers a trivial query."""
    if _session_factory is None:
        return False
    async with _session_factory() as session:
        await session.execute(text("SELECT 1"))
    return True
