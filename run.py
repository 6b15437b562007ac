"""Entry point for serving the Calendar API.

Host, port and log level are read from the same environment variables
as the application settings (``HOST``, ``PORT``, ``LOG_LEVEL``); put
them in the environment or export them before starting.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from calendar_api.app.core.config import settings
from calendar_api.app.main import app


async def main() -> None:
    """Serve the API until interrupted."""
    config = Config(
        app=app,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logging.getLogger(__name__).info("Server stopped")
