"""Queue-backed bridge from synchronous engine listeners to async WebSocket sends."""
from __future__ import annotations

import asyncio
import logging
from typing import Callable

from chat_engine.application.ports.listener import EngineEvent
from chat_engine.infrastructure.ws.manager import ConnectionManager

logger = logging.getLogger(__name__)

# Returns (conversation_id or None for every connection, serialized frame).
EventEncoder = Callable[[EngineEvent], tuple[str | None, str]]


class WsFanout:
    """Background task that drains engine events and pushes them to WS connections."""

    def __init__(self, manager: ConnectionManager, encode: EventEncoder) -> None:
        self._manager = manager
        self._encode = encode
        self._queue: asyncio.Queue[EngineEvent] = asyncio.Queue()
        self._task: asyncio.Task[None] | None = None

    def __call__(self, event: EngineEvent) -> None:
        # Engine listeners are synchronous; sending happens on the pump task.
        if self._task is None:
            return
        self._queue.put_nowait(event)

    async def start(self) -> None:
        self._task = asyncio.create_task(self._pump(), name="ws-fanout")
        logger.info("WS fan-out started")

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("WS fan-out stopped")

    async def _pump(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                conversation_id, raw = self._encode(event)
                if conversation_id is None:
                    await self._manager.broadcast(raw)
                else:
                    await self._manager.broadcast_to_conversation(conversation_id, raw)
            except Exception:
                logger.exception("Error fanning out %s", type(event).__name__)
            finally:
                self._queue.task_done()
