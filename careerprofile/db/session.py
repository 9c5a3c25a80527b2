# careerprofile/db/session.py
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from careerprofile.core.config import database_settings
from careerprofile.db.models import Base


def get_async_engine(db_url: str = database_settings.url, **overrides) -> AsyncEngine:
    """Creates an asynchronous SQLAlchemy engine instance."""
    options = {"echo": database_settings.echo, "pool_pre_ping": True}
    if not db_url.startswith("sqlite"):
        # SQLite uses a static/null pool and rejects these
        options.update(
            pool_size=database_settings.pool_size,
            max_overflow=database_settings.max_overflow,
            pool_recycle=database_settings.pool_recycle,
        )
    options.update(overrides)
    engine = create_async_engine(db_url, **options)
    if db_url.startswith("sqlite"):
        _enable_sqlite_savepoints(engine)
    return engine

def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Lets SQLAlchemy emit BEGIN itself so SAVEPOINTs nest inside the transaction."""

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

def get_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

async def create_tables(engine: AsyncEngine) -> None:
    """Creates any missing tables. Local SQLite setups and tests only."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

async_engine = get_async_engine()
SessionFactory = get_session_factory(async_engine)

async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a session per request.
    Commits when the request succeeds and rolls back when it raises.
    """
    async with SessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
