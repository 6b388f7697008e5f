"""WebSocket message envelope models."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from chat_engine.domain.value_objects.enums import MessageKind, MessageStatus, Presence


class WsInbound(BaseModel):
    """Transport/client → engine."""

    # ping | subscribe | unsubscribe | message.received | message.send
    # | status.update | typing.changed | presence.changed | mark_read
    type: str
    data: dict[str, Any] = {}


class WsOutbound(BaseModel):
    """Engine → client."""

    type: str  # conversation_list.changed | timeline.changed | error | pong | message.sent
    data: dict[str, Any] = {}


class SubscribeData(BaseModel):
    conversation_id: str


class MessageReceivedData(BaseModel):
    id: str
    conversation_id: str
    sender_id: str
    content: str
    created_at: datetime
    kind: MessageKind = MessageKind.TEXT
    reply_to_id: str | None = None
    file_url: str | None = None


class MessageSendData(BaseModel):
    conversation_id: str
    content: str
    kind: MessageKind = MessageKind.TEXT
    reply_to_id: str | None = None
    file_url: str | None = None


class StatusUpdateData(BaseModel):
    message_id: str
    status: MessageStatus


class TypingChangedData(BaseModel):
    conversation_id: str
    user_id: str | None = None


class PresenceChangedData(BaseModel):
    user_id: str
    presence: Presence


class MarkReadData(BaseModel):
    conversation_id: str


def error_frame(code: str, detail: str = "", **extra: Any) -> str:
    data: dict[str, Any] = {"code": code, **extra}
    if detail:
        data["detail"] = detail
    return WsOutbound(type="error", data=data).model_dump_json()


def frame(event_type: str, data: dict[str, Any] | None = None) -> str:
    return WsOutbound(type=event_type, data=data or {}).model_dump_json()


INBOUND_SCHEMAS: dict[str, type[BaseModel]] = {
    "subscribe": SubscribeData,
    "unsubscribe": SubscribeData,
    "message.received": MessageReceivedData,
    "message.send": MessageSendData,
    "status.update": StatusUpdateData,
    "typing.changed": TypingChangedData,
    "presence.changed": PresenceChangedData,
    "mark_read": MarkReadData,
}
