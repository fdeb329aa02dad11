"""Database connection manager and session factory."""

from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from yolcu.core.config import settings


def _engine_options(url: str) -> Dict[str, Any]:
    """Pool options for the configured backend."""
    if url.startswith("sqlite"):
        # SQLite pools do not accept QueuePool sizing arguments
        return {"echo": settings.SQL_ECHO}
    return {
        "pool_size": settings.POOL_SIZE,
        "max_overflow": settings.MAX_OVERFLOW,
        "pool_recycle": settings.POOL_RECYCLE,
        "pool_timeout": settings.POOL_TIMEOUT,
        "pool_pre_ping": settings.POOL_PRE_PING,  # Validates connections before use
        "echo": settings.SQL_ECHO,
    }


engine = create_engine(
    settings.APP_DATABASE_URL, **_engine_options(settings.APP_DATABASE_URL)
)

# Session factory
SessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
)


def get_session_local() -> sessionmaker:
    """Get the SessionLocal factory for testing or advanced use cases."""
    return SessionLocal
