"""Database session. SQLite compatible with connection pooling."""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from app.core.config import settings


def make_engine(database_url: str) -> Engine:
    connect_args = (
        {"check_same_thread": False}
        if database_url.startswith("sqlite")
        else {}
    )

    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # In-memory: every session must share the one connection
        from sqlalchemy.pool import StaticPool
        return create_engine(database_url, connect_args=connect_args, poolclass=StaticPool)

    if database_url.startswith("sqlite"):
        # SQLite: Use NullPool for thread-safety
        from sqlalchemy.pool import NullPool
        return create_engine(
            database_url,
            connect_args=connect_args,
            poolclass=NullPool
        )

    # PostgreSQL/MySQL: Use QueuePool with sensible defaults
    return create_engine(
        database_url,
        connect_args=connect_args,
        pool_size=5,  # Number of persistent connections
        max_overflow=10,  # Max temporary connections
        pool_timeout=30,  # Seconds to wait for connection
        pool_recycle=3600,  # Recycle connections after 1 hour
        pool_pre_ping=True  # Verify connection health
    )


engine = make_engine(settings.DATABASE_URL)
