"""
Main entrypoint for the VendorHive API.

This module assembles the FastAPI application, sets up logging,
builds the storage facade and includes versioned routers.  The
``create_app`` function builds and configures the app, which is then
instantiated at module import time as ``app``.  Importing the app here
makes it easy to run with uvicorn or another ASGI server, e.g.::

    uvicorn vendorhive_api.app.main:app --reload

The application title, version and storage backend are provided via
``Settings`` from ``core.config``.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from .api.v1.router import router as v1_router
from .core.config import Settings, settings as default_settings
from .core.logging_config import setup_logging
from .storage import Storage, create_storage


def create_app(settings: Optional[Settings] = None, storage: Optional[Storage] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to use; the environment-derived settings when
        omitted.
    storage : Optional[Storage]
        Storage facade to serve from.  Built from ``settings`` with
        ``create_storage`` when omitted.  It is connected on startup
        and closed on shutdown either way.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    settings = settings or default_settings
    # Initialise logging before anything else so that the storage
    # backends can log while they start.
    setup_logging(settings.log_level, settings.log_file or None)
    logger = logging.getLogger(__name__)

    storage = storage or create_storage(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Starting %s with %s storage", settings.project_name, settings.storage_backend)
        await storage.connect()
        try:
            yield
        finally:
            await storage.close()
            logger.info("Storage closed")

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.storage = storage

    # Mount versioned routes under /api/v1.
    app.include_router(v1_router, prefix="/api/v1")

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
