"""Liveness HTTP endpoint for process supervision."""

from __future__ import annotations

import logging
import threading

import uvicorn
from fastapi import FastAPI, Response
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

logger = logging.getLogger(__name__)

_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

# ------------------------------------------------------------------
# FastAPI app
# ------------------------------------------------------------------

# Docs routes disabled so the catch-all owns every path
app = FastAPI(
    title="Instances Collector",
    version="0.1.0",
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)
FastAPIInstrumentor.instrument_app(app)


@app.api_route("/{path:path}", methods=_METHODS, include_in_schema=False)
def liveness(path: str) -> Response:
    """Answer every request with 200 and an empty body."""
    return Response(status_code=200)


# ------------------------------------------------------------------
# Server helpers
# ------------------------------------------------------------------


def run_api_server(host: str, port: int) -> None:
    """Run the API server (blocking)."""
    uvicorn.run(app, host=host, port=port, log_level="warning")


def start_api_server_thread(host: str, port: int) -> threading.Thread:
    """Start API server in a background thread."""
    logger.info("Starting liveness server on %s:%d", host, port)
    thread = threading.Thread(
        target=run_api_server,
        args=(host, port),
        daemon=True,
        name="api-server",
    )
    thread.start()
    return thread
