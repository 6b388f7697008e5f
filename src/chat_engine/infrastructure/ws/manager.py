"""In-process WebSocket connection manager."""
from __future__ import annotations

import logging

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks WebSocket connections and their conversation subscriptions."""

    def __init__(self) -> None:
        self._connections: dict[str, WebSocket] = {}
        self._subscriptions: dict[str, set[str]] = {}

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def connect(self, ws: WebSocket, connection_id: str) -> None:
        await ws.accept()
        self._connections[connection_id] = ws
        logger.debug("WS connected: %s (total=%d)", connection_id, len(self._connections))

    def disconnect(self, connection_id: str) -> None:
        self._connections.pop(connection_id, None)
        for conversation_id in list(self._subscriptions):
            self.unsubscribe(connection_id, conversation_id)
        logger.debug("WS disconnected: %s", connection_id)

    def subscribe(self, connection_id: str, conversation_id: str) -> None:
        self._subscriptions.setdefault(conversation_id, set()).add(connection_id)

    def unsubscribe(self, connection_id: str, conversation_id: str) -> None:
        subs = self._subscriptions.get(conversation_id)
        if subs:
            subs.discard(connection_id)
            if not subs:
                del self._subscriptions[conversation_id]

    def subscribers(self, conversation_id: str) -> frozenset[str]:
        return frozenset(self._subscriptions.get(conversation_id, ()))

    @property
    def subscribed_conversations(self) -> frozenset[str]:
        return frozenset(self._subscriptions)

    async def broadcast(self, raw: str) -> None:
        """Send a frame to every open connection."""
        await self._send_many(list(self._connections), raw)

    async def broadcast_to_conversation(self, conversation_id: str, raw: str) -> None:
        """Send a frame to connections subscribed to a conversation's timeline."""
        await self._send_many(list(self.subscribers(conversation_id)), raw)

    async def _send_many(self, connection_ids: list[str], raw: str) -> None:
        dead: list[str] = []
        for cid in connection_ids:
            ws = self._connections.get(cid)
            if ws is None:
                continue
            try:
                await ws.send_text(raw)
            except Exception:
                logger.debug("WS send failed for %s", cid, exc_info=True)
                dead.append(cid)
        for cid in dead:
            self.disconnect(cid)
