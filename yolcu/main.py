"""Yolcu Chat backend main application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from yolcu.api.errors import register_exception_handlers
from yolcu.api.health import router as health_router
from yolcu.api.messages import router as messages_router
from yolcu.api.profiles import router as profiles_router
from yolcu.api.rooms import router as rooms_router
from yolcu.core.config import settings
from yolcu.core.logging import (
    configure_sqlalchemy_logging,
    get_logger,
    log_shutdown_info,
    log_startup_info,
    setup_logging,
)

# Initialize logging first
setup_logging()
configure_sqlalchemy_logging(echo=settings.SQL_ECHO)

# Get logger after setup
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    log_startup_info()
    logger.info("FastAPI application started successfully")
    yield
    # Shutdown
    log_shutdown_info()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Group chat rooms with invite codes, membership, push fan-out and call tokens",
    version="0.1.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

# Include routers
app.include_router(rooms_router, prefix=settings.API_V1_STR)
app.include_router(messages_router, prefix=settings.API_V1_STR)
app.include_router(profiles_router, prefix=settings.API_V1_STR)
app.include_router(health_router, tags=["health"])


@app.get("/")
async def root():
    """Root endpoint for health checks."""
    return {"message": "Yolcu Chat backend is running", "status": "healthy"}
