"""NVR Recording Monitor - Main Application."""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from database import db
from core.registry import registry
from core.poller import poller
from api.devices import router as devices_router
from api.status import router as status_router
from api.discovery import router as discovery_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("Starting NVR Recording Monitor...")
    await db.connect()
    await db.import_legacy_text(settings.legacy_cameras_txt)
    registry.load(await db.load())
    registry.bind_store(db.save)
    logger.info(f"Devices: {len(registry.devices)}")

    if settings.poll_autostart:
        poller.start(settings.poll_interval)

    logger.info(f"Server ready at http://{settings.host}:{settings.port}")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await poller.stop()
    registry.bind_store(None)
    await db.close()
    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="NVR Recording Monitor",
    description="Recording status dashboard and VRM device discovery",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(devices_router)
app.include_router(status_router)
app.include_router(discovery_router)


# Health check
@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": VERSION}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )
