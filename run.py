"""Entry point for the studio API.

Serves ``studio_api.app.main:app`` with uvicorn.  It is intended to be
executed from the project root, for example under Docker, where you
only specify a single Python file to run.

Configuration such as ``SECRET_KEY``, ``DATABASE_URL`` and the
``OAUTH_*`` values is read from the environment (see
``studio_api/app/core/config.py``).

Usage:
    python run.py
"""
import asyncio
import logging
import os

from uvicorn import Config, Server

from studio_api.app.main import app


async def run_api() -> None:
    """Start the API using Uvicorn.

    Host and port are read from environment variables `API_HOST` and
    `API_PORT`. Defaults are `0.0.0.0` and `8000`.
    """
    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    config = Config(app=app, host=host, port=port, reload=False, log_level="info")
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(run_api())
    except (KeyboardInterrupt, SystemExit):
        logging.getLogger(__name__).info("API stopped")
