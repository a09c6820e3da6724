"""Entry point for the VendorHive API.

Runs the FastAPI application with Uvicorn.  Intended to be executed
from the project root, for example in Docker, where you only specify a
single Python file to run.

Configuration (storage backend, MongoDB URI, secret key, log level)
is read from environment variables; see ``vendorhive_api/app/core/config.py``.

Usage:
    python run.py
"""
import asyncio
import logging
import os

from uvicorn import Config, Server

from vendorhive_api.app.main import app


async def main() -> None:
    """Serve the API until interrupted.

    Host and port are read from environment variables ``HOST`` and
    ``PORT``. Defaults are ``0.0.0.0`` and ``8000``.
    """
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    config = Config(app=app, host=host, port=port, reload=False, log_level="info")
    server = Server(config)
    logging.getLogger(__name__).info("Serving VendorHive API on %s:%s", host, port)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
