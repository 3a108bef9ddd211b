"""
Planboard - stateless HTTP facade over the project scheduling engine.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from planboard import __version__
from planboard.config import get_settings
from planboard.exceptions import register_exception_handlers
from planboard.logging_config import get_logger, setup_logging
from planboard.routes import conflicts, scheduling

# Initialize logging
setup_logging()
logger = get_logger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    logger.info(f"Starting {settings.app_name} API...")
    yield
    logger.info(f"Shutting down {settings.app_name} API...")


app = FastAPI(
    title=settings.app_name,
    description="CPM scheduling, dependency cascading and double-booking detection",
    version=__version__,
    lifespan=lifespan,
)

# Register custom exception handlers
register_exception_handlers(app)

# Include routers
app.include_router(scheduling.router, prefix="/scheduling", tags=["Scheduling"])
app.include_router(conflicts.router, prefix="/conflicts", tags=["Conflicts"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
