# src/staylink/api/v1/endpoints/realtime.py
"""WebSocket transport for the message relay."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, WebSocket
from starlette.websockets import WebSocketState

from ..dependencies import RelayServiceDep

router = APIRouter(tags=["realtime"])

logger = logging.getLogger(__name__)


class WebSocketConnection:
    """Adapts a Starlette WebSocket to the relay's connection handle."""

    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket

    @property
    def is_open(self) -> bool:
        return (
            self.websocket.client_state is WebSocketState.CONNECTED
            and self.websocket.application_state is WebSocketState.CONNECTED
        )

    async def send_json(self, data: dict[str, Any]) -> None:
        await self.websocket.send_json(data)


@router.websocket("/ws")
async def relay_socket(websocket: WebSocket, relay: RelayServiceDep) -> None:
    """Accept a client and feed its frames to the relay until it disconnects."""
    await websocket.accept()
    session = relay.open(WebSocketConnection(websocket))
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            if raw is None:
                continue
            await session.receive(raw)
    finally:
        session.close()
        logger.debug("Connection closed for user %s", session.user_id)
