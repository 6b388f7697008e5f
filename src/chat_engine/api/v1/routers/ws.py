from __future__ import annotations

import asyncio
import logging
import uuid

import pydantic
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from chat_engine.api.v1.schemas.message import MessageResponse
from chat_engine.application.exceptions import (
    AppError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from chat_engine.config import settings
from chat_engine.domain.entities.message import Message
from chat_engine.engine import ChatEngine
from chat_engine.infrastructure.ws.manager import ConnectionManager
from chat_engine.infrastructure.ws.protocol import (
    INBOUND_SCHEMAS,
    MarkReadData,
    MessageReceivedData,
    MessageSendData,
    PresenceChangedData,
    StatusUpdateData,
    SubscribeData,
    TypingChangedData,
    WsInbound,
    error_frame,
    frame,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


def _error_code(exc: AppError) -> str:
    if isinstance(exc, NotFoundError):
        return "not_found"
    if isinstance(exc, InvalidTransitionError):
        return "invalid_transition"
    if isinstance(exc, ValidationError):
        return "validation_error"
    return "conflict"


@router.websocket("/ws/chat")
async def ws_chat(websocket: WebSocket) -> None:
    engine: ChatEngine = websocket.app.state.engine
    manager: ConnectionManager = websocket.app.state.ws_manager

    connection_id = uuid.uuid4().hex
    await manager.connect(websocket, connection_id)

    heartbeat_task = asyncio.create_task(
        _heartbeat(websocket), name=f"ws-heartbeat-{connection_id}",
    )
    try:
        await _read_loop(websocket, connection_id, engine, manager)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", connection_id)
    finally:
        heartbeat_task.cancel()
        manager.disconnect(connection_id)


async def _heartbeat(ws: WebSocket) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    try:
        while True:
            await asyncio.sleep(interval)
            await ws.send_text(frame("pong"))
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.debug("WS heartbeat stopped", exc_info=True)


async def _read_loop(
    ws: WebSocket,
    connection_id: str,
    engine: ChatEngine,
    manager: ConnectionManager,
) -> None:
    while True:
        raw = await ws.receive_text()
        try:
            msg = WsInbound.model_validate_json(raw)
        except pydantic.ValidationError:
            await ws.send_text(error_frame("invalid_payload"))
            continue

        if msg.type == "ping":
            await ws.send_text(frame("pong"))
            continue

        schema = INBOUND_SCHEMAS.get(msg.type)
        if schema is None:
            await ws.send_text(error_frame("unknown_type", type=msg.type))
            continue

        try:
            data = schema.model_validate(msg.data)
        except pydantic.ValidationError as exc:
            await ws.send_text(error_frame("invalid_data", str(exc), type=msg.type))
            continue

        try:
            reply = _dispatch(msg.type, data, connection_id, engine, manager)
        except AppError as exc:
            await ws.send_text(error_frame(_error_code(exc), exc.detail, type=msg.type))
            continue

        if reply is not None:
            await ws.send_text(reply)


def _dispatch(
    event_type: str,
    data: pydantic.BaseModel,
    connection_id: str,
    engine: ChatEngine,
    manager: ConnectionManager,
) -> str | None:
    """Apply one inbound event to the engine; returns an optional direct reply frame."""
    if isinstance(data, SubscribeData):
        engine.conversation(data.conversation_id)
        if event_type == "subscribe":
            manager.subscribe(connection_id, data.conversation_id)
        else:
            manager.unsubscribe(connection_id, data.conversation_id)
        return None

    if isinstance(data, MessageReceivedData):
        engine.on_message_received(Message(
            id=data.id,
            conversation_id=data.conversation_id,
            sender_id=data.sender_id,
            content=data.content,
            created_at=data.created_at,
            kind=data.kind,
            reply_to_id=data.reply_to_id,
            file_url=data.file_url,
        ))
    elif isinstance(data, MessageSendData):
        message_id = engine.send_local_message(
            data.conversation_id,
            data.content,
            data.kind,
            reply_to_id=data.reply_to_id,
            file_url=data.file_url,
        )
        sent = MessageResponse.model_validate(engine.message(message_id), from_attributes=True)
        return frame("message.sent", {"message": sent.model_dump(mode="json")})
    elif isinstance(data, StatusUpdateData):
        engine.on_status_update(data.message_id, data.status)
    elif isinstance(data, TypingChangedData):
        engine.on_typing_changed(data.conversation_id, data.user_id)
    elif isinstance(data, PresenceChangedData):
        engine.on_presence_changed(data.user_id, data.presence)
    elif isinstance(data, MarkReadData):
        engine.mark_read(data.conversation_id)
    return None
