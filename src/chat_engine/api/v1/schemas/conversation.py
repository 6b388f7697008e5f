from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from chat_engine.domain.entities.conversation import Conversation
from chat_engine.domain.value_objects.enums import ConversationKind, Presence


class UpsertConversationRequest(BaseModel):
    kind: ConversationKind
    participant_ids: list[str] = Field(min_length=2)
    name: str | None = None
    avatar_ref: str | None = None

    def to_entity(self, conversation_id: str) -> Conversation:
        return Conversation(
            id=conversation_id,
            kind=self.kind,
            participant_ids=tuple(self.participant_ids),
            name=self.name,
            avatar_ref=self.avatar_ref,
        )


class TypingRequest(BaseModel):
    user_id: str | None = None


class ConversationResponse(BaseModel):
    id: str
    kind: ConversationKind
    display_name: str
    avatar_ref: str | None
    unread_count: int
    unread_badge: str | None
    is_typing: bool
    typing_user_id: str | None
    preview: str
    last_message_id: str | None
    last_message_at: datetime | None
    peer_presence: Presence | None
    member_count: int

    model_config = {"from_attributes": True}
