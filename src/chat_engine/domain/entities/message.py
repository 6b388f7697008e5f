from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from chat_engine.domain.value_objects.enums import MessageKind, MessageStatus


@dataclass(frozen=True, slots=True)
class Message:
    id: str
    conversation_id: str
    sender_id: str
    content: str
    created_at: datetime
    kind: MessageKind = MessageKind.TEXT
    status: MessageStatus = MessageStatus.SENT
    reactions: tuple[str, ...] = ()
    reply_to_id: str | None = None
    file_url: str | None = None
