"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from taskboard.api import auth, profile, tasks
from taskboard.api.errors import register_exception_handlers
from taskboard.config import get_settings
from taskboard.logging_config import setup_logging
from taskboard.services.storage import STORAGE_MOUNT

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    setup_logging(settings.log_level)
    logger.info(f"Starting Taskboard API ({settings.environment})")
    yield


app = FastAPI(
    title="Taskboard API",
    description="Personal task management with per-user row scoping",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for development
if settings.is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://localhost:5173",
            "http://localhost:8080",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

register_exception_handlers(app)

# Register routers
app.include_router(auth.router)
app.include_router(tasks.router)
app.include_router(profile.router)

# Uploaded avatars
Path(settings.storage_dir).mkdir(parents=True, exist_ok=True)
app.mount(STORAGE_MOUNT, StaticFiles(directory=settings.storage_dir), name="storage")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
