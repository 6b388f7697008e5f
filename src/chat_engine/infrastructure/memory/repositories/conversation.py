from __future__ import annotations

import dataclasses

from chat_engine.domain.entities.conversation import Conversation
from chat_engine.infrastructure.memory.session import MemorySession


class ConversationReaderRepo:
    def __init__(self, session: MemorySession) -> None:
        self._session = session

    def get_by_id(self, conversation_id: str) -> Conversation | None:
        return self._session.conversations.get(conversation_id)

    def list_all(self) -> list[Conversation]:
        order = self._session.conversation_order
        return sorted(self._session.conversations.values(), key=lambda c: order[c.id])

    def list_for_user(self, user_id: str) -> list[Conversation]:
        return [c for c in self.list_all() if c.has_participant(user_id)]


class ConversationWriterRepo:
    def __init__(self, session: MemorySession) -> None:
        self._session = session

    def upsert(self, conversation: Conversation) -> Conversation:
        # Replacing keeps the original creation position.
        self._session.conversation_order.setdefault(conversation.id, self._session.next_seq())
        self._session.conversations[conversation.id] = conversation
        return conversation

    def increment_unread(self, conversation_id: str) -> Conversation:
        conv = self._session.conversations[conversation_id]
        return self._store(dataclasses.replace(conv, unread_count=conv.unread_count + 1))

    def reset_unread(self, conversation_id: str) -> Conversation:
        conv = self._session.conversations[conversation_id]
        return self._store(dataclasses.replace(conv, unread_count=0))

    def set_typing(self, conversation_id: str, user_id: str | None) -> Conversation:
        conv = self._session.conversations[conversation_id]
        return self._store(dataclasses.replace(conv, typing_user_id=user_id))

    def _store(self, conversation: Conversation) -> Conversation:
        self._session.conversations[conversation.id] = conversation
        return conversation
