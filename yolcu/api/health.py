"""Health check endpoints for system monitoring."""

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from yolcu.dependencies import SessionFactory

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "yolcu-chat-backend"}


@router.get("/health/database")
async def database_health(session_factory: SessionFactory):
    """Health check for database connection."""
    session = session_factory()
    try:
        session.execute(text("SELECT 1"))
        return {"status": "healthy", "database_connected": True}
    except SQLAlchemyError as e:
        return {"status": "unhealthy", "database_connected": False, "error": str(e)}
    finally:
        session.close()


@router.get("/health/live")
async def liveness_check():
    """Liveness check for Kubernetes/container orchestration."""
    return {"status": "alive"}
