import os
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from wholesale.core.config import settings


def async_database_uri(uri: str) -> str:
    """Switch a plain sqlite URI to the aiosqlite driver"""
    if uri.startswith("sqlite:///"):
        return uri.replace("sqlite:///", "sqlite+aiosqlite:///")
    return uri


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite only honours ON DELETE CASCADE / SET NULL with this pragma
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(uri: str = None) -> AsyncEngine:
    """Create an async engine; SQL echo only when SQL_DEBUG=true"""
    url = async_database_uri(uri or settings.SQLITE_DATABASE_URI)
    async_engine = create_async_engine(
        url,
        echo=os.getenv("SQL_DEBUG", "false").lower() == "true",
        future=True,
    )
    if url.startswith("sqlite"):
        event.listen(async_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return async_engine


def create_session_factory(bind: AsyncEngine) -> sessionmaker:
    """Session factory bound to an engine"""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# Application engine and sessions
engine = create_engine()
SessionLocal = create_session_factory(engine)
