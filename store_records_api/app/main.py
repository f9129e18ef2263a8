"""
Main entrypoint for the Store Records API.

This module assembles the FastAPI application: it validates the
configuration, sets up logging, builds the record service client and
the store service, and includes the versioned routers.  The app is
created by the ``create_app`` factory rather than at import time so
that missing configuration fails the start-up explicitly::

    uvicorn store_records_api.app.main:create_app --factory

Settings and the store service are kept on ``app.state`` and handed to
routes through dependencies.
"""

import logging
from typing import Optional

from fastapi import FastAPI

from .api.v1.router import router as v1_router
from .core.config import Settings
from .core.logging_config import setup_logging
from .services.store_service import StoreService

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store_service: Optional[StoreService] = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to use.  Read from the environment when omitted.
    store_service : Optional[StoreService]
        Service to expose.  Built from ``settings`` when omitted.

    Returns
    -------
    FastAPI
        A configured application instance.

    Raises
    ------
    ConfigurationMissing
        If the tabular store application id or access key is not set.
    """
    settings = (settings or Settings()).validate()
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version)
    app.state.settings = settings
    app.state.store_service = store_service or StoreService.from_settings(settings)

    app.include_router(v1_router, prefix="/api/v1")

    logger.info("%s %s configured for app %s", settings.project_name, settings.api_version, settings.app_id)
    return app
