# tests/helpers.py
"""Shared test doubles and request helpers."""
from __future__ import annotations

from typing import Any

from staylink.core.security import create_access_token
from staylink.models import User


class FakeConnection:
    """In-memory stand-in for a WebSocket handle."""

    def __init__(self, *, is_open: bool = True, fail: bool = False) -> None:
        self.is_open = is_open
        self.fail = fail
        self.sent: list[dict[str, Any]] = []

    async def send_json(self, data: dict[str, Any]) -> None:
        if self.fail:
            raise RuntimeError("socket gone")
        self.sent.append(data)


def auth_headers(user: User) -> dict[str, str]:
    """Return authorization headers for a persisted user."""
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}
