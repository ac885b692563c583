"""
Main entrypoint for the Shiptivity API.

This module assembles the FastAPI application, sets up logging and
includes versioned routers.  The ``create_app`` function builds and
configures the app, which is then instantiated at module import time
as ``app``.  Run it with uvicorn, e.g.::

    uvicorn shiptivity_api.app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.config import settings
from .core.db import get_database_path, init_db
from .core.errors import InvalidInput, RankError
from .core.logging_config import setup_logging
from .api.v1.router import router as v1_router


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Apply migrations at startup.  This creates the database file if
    # it does not exist and brings the schema up to date.
    init_db()
    logger.info("Database ready at %s", get_database_path())
    yield
    logger.info("%s shutting down", settings.project_name)


async def rank_error_handler(request: Request, exc: RankError) -> JSONResponse:
    """Render a service validation failure with its kind and messages."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_dict()})


async def invalid_input_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report unparseable ids, priorities and bodies as ``InvalidInput``."""
    fields = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "path", "query")]
        fields.append(f"{'.'.join(loc) or 'request'}: {error.get('msg')}")
    err = InvalidInput("; ".join(fields) or "Request could not be parsed.")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": err.to_dict()})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Initialise logging before anything else so that the routers and
    # services can log from the first request on.
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RankError, rank_error_handler)
    app.add_exception_handler(RequestValidationError, invalid_input_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/", tags=["info"])
    async def root() -> dict:
        return {"message": "SHIPTIVITY API. Read documentation to see API docs"}

    app.include_router(v1_router, prefix="/api/v1")
    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
