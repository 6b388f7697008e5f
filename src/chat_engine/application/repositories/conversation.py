from __future__ import annotations

from typing import Protocol

from chat_engine.domain.entities.conversation import Conversation


class ConversationReader(Protocol):
    def get_by_id(self, conversation_id: str) -> Conversation | None: ...

    def list_all(self) -> list[Conversation]:
        """All conversations in creation order."""
        ...

    def list_for_user(self, user_id: str) -> list[Conversation]: ...


class ConversationWriter(Protocol):
    def upsert(self, conversation: Conversation) -> Conversation: ...

    def increment_unread(self, conversation_id: str) -> Conversation: ...

    def reset_unread(self, conversation_id: str) -> Conversation: ...

    def set_typing(self, conversation_id: str, user_id: str | None) -> Conversation: ...
