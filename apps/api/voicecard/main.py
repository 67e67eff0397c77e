"""FastAPI application for the voice card experience."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from .core.config import settings
from .core.errors import ProvisioningError, error_response
from .routers import cards, connection

logger = logging.getLogger(__name__)

app = FastAPI(title="Voice Card API", version="0.1.0")

if settings.cors_allow_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(connection.router, prefix="/api", tags=["session"])
app.include_router(cards.router, prefix="/api/cards", tags=["cards"])


@app.exception_handler(ProvisioningError)
async def provisioning_error_handler(request: Request, exc: ProvisioningError) -> Response:
    """Map errors raised outside route bodies (e.g. dependencies) to the JSON error contract."""

    logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc.message, status_code=exc.status_code)


@app.get("/api/health", tags=["meta"])
async def health() -> dict[str, str]:
    """Simple liveness probe."""

    return {"status": "ok"}


@app.head("/api/health", tags=["meta"])
async def health_head() -> Response:
    """Allow HEAD for uptime monitors that only need the status code."""

    return Response(status_code=200)
