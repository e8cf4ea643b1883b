# src/staylink/main.py
"""Main entry point for the StayLink messaging relay."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from staylink.api.v1 import messages_router, realtime_router, system_router
from staylink.core.errors import MessagingError
from staylink.core.logging import configure_logging
from staylink.core.settings import settings
from staylink.services.cipher import get_content_cipher

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging(settings.log_level)
    # Key derivation is deliberately slow; pay for it once before serving.
    get_content_cipher()
    logger.info("%s %s ready", settings.app_name, settings.app_version)
    yield


# Initialize FastAPI app
app = FastAPI(
    title="StayLink Messaging API",
    description="Listing-scoped messaging with encrypted storage and live relay",
    version=settings.app_version,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


@app.exception_handler(MessagingError)
async def messaging_error_handler(request: Request, exc: MessagingError) -> JSONResponse:
    """Map messaging core failures onto HTTP status codes."""
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.public_detail})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Report database failures outside the message store as server errors."""
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": MessagingError.default_detail})


# Include API routers
app.include_router(messages_router, prefix="/api/v1")
app.include_router(realtime_router)
app.include_router(system_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("staylink.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
