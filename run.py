"""Entry point for the Store Records API.

Builds the FastAPI application and serves it with Uvicorn.  It is
intended to be executed from the project root, for example under
Docker, where you only specify a single Python file to run.

Configuration is read from environment variables; see
``store_records_api.app.core.config`` for the full list.  The tabular
store application id (``APPSHEET_APP_ID``) and access key
(``APPSHEET_ACCESS_KEY``) are required; without them the process exits
before serving any request.

Usage:
    python run.py
"""
import asyncio
import logging
import os
import sys

from uvicorn import Config, Server

from store_records_api.app.core.errors import ConfigurationMissing
from store_records_api.app.main import create_app


async def serve() -> None:
    """Start the API using Uvicorn.

    Host and port are read from environment variables ``HOST`` and
    ``PORT``.  Defaults are ``0.0.0.0`` and ``8000``.
    """
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    app = create_app()
    config = Config(app=app, host=host, port=port, reload=False, log_level="info")
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(serve())
    except ConfigurationMissing as exc:
        logging.basicConfig(level=logging.INFO)
        logging.critical("Cannot start: %s", exc)
        sys.exit(1)
    except (KeyboardInterrupt, SystemExit):
        pass
