"""Entry point for the Shiptivity API server.

This script launches the FastAPI application with uvicorn.  It is
intended to be executed from the project root, for example under
Docker, where you only specify a single Python file to run.

Host, port and the database location are read from environment
variables (``API_HOST``, ``API_PORT``, ``DATABASE_URL``); see
``shiptivity_api/app/core/config.py`` for the full list.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from shiptivity_api.app.core.config import settings
from shiptivity_api.app.main import app


async def run_api() -> None:
    """Serve the API until the process is interrupted."""
    config = Config(
        app=app,
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    logging.getLogger(__name__).info("app running on port %s", settings.api_port)
    await server.serve()


def main() -> None:
    try:
        asyncio.run(run_api())
    except (KeyboardInterrupt, SystemExit):
        pass


if __name__ == "__main__":
    main()
