"""Database engine and session factory. SQLite for development, pooled for servers."""
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from kanha.core.config import settings


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores REFERENCES clauses unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, **kwargs) -> Engine:
    """Create an engine configured for the given backend."""
    if database_url.startswith("sqlite"):
        from sqlalchemy.pool import NullPool

        kwargs.setdefault("poolclass", NullPool)
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            **kwargs,
        )
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    # PostgreSQL/MySQL: small bounded pool, long acquisition timeout
    return create_engine(
        database_url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=0,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=3600,
        pool_pre_ping=True,
        **kwargs,
    )


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
