from __future__ import annotations

import bisect
from typing import Iterator

from chat_engine.domain.entities.message import Message
from chat_engine.infrastructure.memory.session import MemorySession


class ConversationMessages:
    """Lazy view over one conversation's messages.

    Every iteration starts over from the current state, in
    ``(created_at, insertion sequence)`` order.
    """

    __slots__ = ("_session", "_conversation_id")

    def __init__(self, session: MemorySession, conversation_id: str) -> None:
        self._session = session
        self._conversation_id = conversation_id

    def __iter__(self) -> Iterator[Message]:
        keys = list(self._session.message_index.get(self._conversation_id, ()))
        for _ts, _seq, message_id in keys:
            yield self._session.messages[message_id]

    def __len__(self) -> int:
        return len(self._session.message_index.get(self._conversation_id, ()))


class MessageReaderRepo:
    def __init__(self, session: MemorySession) -> None:
        self._session = session

    def get_by_id(self, message_id: str) -> Message | None:
        return self._session.messages.get(message_id)

    def list_messages(self, conversation_id: str) -> ConversationMessages:
        return ConversationMessages(self._session, conversation_id)

    def last_message(self, conversation_id: str) -> Message | None:
        keys = self._session.message_index.get(conversation_id)
        if not keys:
            return None
        return self._session.messages[keys[-1][2]]


class MessageWriterRepo:
    def __init__(self, session: MemorySession) -> None:
        self._session = session

    def create_if_not_exists(self, message: Message) -> tuple[Message, bool]:
        """Insert message idempotently. Returns (message, created_flag)."""
        existing = self._session.messages.get(message.id)
        if existing is not None:
            return existing, False

        self._session.messages[message.id] = message
        index = self._session.message_index.setdefault(message.conversation_id, [])
        bisect.insort(index, (message.created_at, self._session.next_seq(), message.id))
        return message, True

    def replace(self, message: Message) -> Message:
        """Swap the stored record for an updated copy; ordering fields never change."""
        if message.id not in self._session.messages:
            raise KeyError(message.id)
        self._session.messages[message.id] = message
        return message
