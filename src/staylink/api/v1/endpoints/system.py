# src/staylink/api/v1/endpoints/system.py
"""Service metadata endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from staylink.core.settings import settings

router = APIRouter(tags=["system"])


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@router.get("/")
async def root() -> dict[str, object]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "endpoints": {
            "messages": "/api/v1/messages",
            "realtime": "/ws",
        },
    }
