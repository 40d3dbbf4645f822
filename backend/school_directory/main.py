"""FastAPI application entrypoint and configuration.

This module provides the application factory that configures logging,
sets up CORS middleware, includes the schools router, serves stored
school images, renders directory errors as JSON, and exposes a health
check endpoint for monitoring.

Example:
    The application can be run with uvicorn:
        $ uvicorn school_directory.main:app --reload

    Or imported and used programmatically:
        >>> from school_directory.main import app
        >>> # Use app in ASGI server
"""

from __future__ import annotations

import contextlib
import locale
import logging
from typing import TYPE_CHECKING

import fastapi
from fastapi import responses, staticfiles
from fastapi.middleware import cors

from school_directory.api import schools
from school_directory.core import config, errors
from school_directory.db import connection, database

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@contextlib.asynccontextmanager
async def _lifespan(_app: fastapi.FastAPI) -> AsyncIterator[None]:
    """Close the shared database connection on shutdown.

    The repository is dropped as well, since it holds the closed manager.
    """
    yield
    database.reset_school_repository()
    connection.reset_connection_manager()


async def _registry_error_handler(
    _request: fastapi.Request,
    exc: Exception,
) -> responses.JSONResponse:
    """Render a RegistryError as a JSON body with its mapped status."""
    if not isinstance(exc, errors.RegistryError):
        raise exc
    return responses.JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


def create_app() -> fastapi.FastAPI:
    """Create and configure the FastAPI application.

    Configures logging and the collation locale used by directory
    sorting from the environment, includes the schools router, mounts
    the image directory under the image URL prefix, installs CORS
    middleware and the directory error handler, and adds a health check
    endpoint.

    Returns:
        Configured FastAPI application instance ready for ASGI server.
    """
    settings = config.get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error:
        logger.warning("Collation locale unavailable; sorting by code point")

    app = fastapi.FastAPI(
        title="School Directory",
        version="0.1.0",
        lifespan=_lifespan,
    )

    app.include_router(schools.router)
    app.add_exception_handler(errors.RegistryError, _registry_error_handler)

    app.mount(
        settings.image_url_prefix,
        staticfiles.StaticFiles(directory=settings.image_dir, check_dir=False),
        name="school-images",
    )

    app.add_middleware(
        cors.CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health() -> dict[str, str]:  # type: ignore[misc]
        """Health check endpoint for monitoring and load balancers.

        Returns:
            Dictionary with status "ok" if the service is running.
        """
        return {"status": "ok"}

    logger.debug("Application created with image dir %s", settings.image_dir)
    return app


app = create_app()
