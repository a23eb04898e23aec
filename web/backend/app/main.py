"""FastAPI application for the App Registry.

Provides REST API endpoints wrapping the appregistry package for:
- Listing and filtering registered apps
- Registering, importing and unregistering apps
- Inspecting app configuration metadata
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from appregistry import __version__
from appregistry.config import AppRegistrySettings
from appregistry.registry.factory import build_service
from appregistry.registry.prefetch import WorkerPool
from web.backend.app.middleware.errors import register_exception_handlers
from web.backend.app.routers import apps

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the shared prefetch pool and service; drain the pool on shutdown."""
    settings = AppRegistrySettings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    pool = WorkerPool(max_workers=settings.prefetch_workers).start()
    app.state.service = build_service(settings, pool)
    logger.info("App registry started (registry dir %s)", settings.registry_dir)
    try:
        yield
    finally:
        pool.shutdown(wait=True)
        logger.info("App registry stopped")


app = FastAPI(
    title="App Registry API",
    description=(
        "REST API for the App Registry. "
        "Provides endpoints for listing, registering, importing and "
        "inspecting application artifacts."
    ),
    version=__version__,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS middleware (allow all origins for development)
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Include routers
# ---------------------------------------------------------------------------
app.include_router(apps.router)


# ---------------------------------------------------------------------------
# Root and health-check endpoints
# ---------------------------------------------------------------------------


@app.get("/", tags=["meta"])
async def root():
    """Return basic API information."""
    return {
        "name": "App Registry API",
        "version": __version__,
        "description": "Registry of application artifacts",
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


@app.get("/health", tags=["meta"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
