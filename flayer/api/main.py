"""FastAPI application for the Flayer core.

Serves read-only views of the fee ledger and shutdown engine, and internal
fill quotes.
"""

import logging
import os

import structlog
import uvicorn
from fastapi import FastAPI

from flayer import __version__
from flayer.api.endpoints import router

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("FLAYER_HOST", "0.0.0.0")
PORT = int(os.environ.get("FLAYER_PORT", "8000"))
DEBUG = os.environ.get("FLAYER_DEBUG", "false").lower() in ("true", "1", "yes")
LOG_LEVEL = os.environ.get("FLAYER_LOG_LEVEL", "INFO").upper()

app = FastAPI(
    title="Flayer core",
    description="Fee-redirection swap engine and collection shutdown engine",
    version=__version__,
)

app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Configure structlog for the server process."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
    )


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - FLAYER_HOST: Host to bind to (default: 0.0.0.0)
    - FLAYER_PORT: Port to bind to (default: 8000)
    - FLAYER_DEBUG: Enable debug/reload mode (default: false)
    - FLAYER_LOG_LEVEL: Minimum log level (default: INFO)
    """
    configure_logging()
    uvicorn.run(
        "flayer.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
