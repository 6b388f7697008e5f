from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from chat_engine.domain.value_objects.enums import MessageKind, MessageStatus


class SendMessageRequest(BaseModel):
    content: str
    kind: MessageKind = MessageKind.TEXT
    reply_to_id: str | None = None
    file_url: str | None = None


class StatusUpdateRequest(BaseModel):
    status: MessageStatus


class ReactionRequest(BaseModel):
    reaction: str


class MessageResponse(BaseModel):
    id: str
    conversation_id: str
    sender_id: str
    content: str
    created_at: datetime
    kind: MessageKind
    status: MessageStatus
    reactions: list[str]
    reply_to_id: str | None
    file_url: str | None

    model_config = {"from_attributes": True}
