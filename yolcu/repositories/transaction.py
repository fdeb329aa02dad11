"""Transaction context manager for coordinated multi-repository operations."""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy.orm import Session

from yolcu.core.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def transaction_scope(session_factory) -> Generator[Session, None, None]:
    """
    Context manager for coordinated multi-repository operations.

    Provides a session that can be shared across multiple repositories
    for atomic operations spanning multiple aggregates.

    Usage:
        with transaction_scope(SessionLocal) as session:
            room = room_repo.create_room(..., session=session)
            room_repo.add_member(room.id, user_id, session=session)
            # Both operations committed together

    Args:
        session_factory: SQLAlchemy session factory (e.g., SessionLocal)

    Yields:
        Session: SQLAlchemy session for coordinated operations

    Raises:
        Exception: Any exception from repository operations (after rollback)
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
