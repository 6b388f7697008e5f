from __future__ import annotations

from typing import Iterable, Protocol

from chat_engine.domain.entities.message import Message


class MessageReader(Protocol):
    def get_by_id(self, message_id: str) -> Message | None: ...

    def list_messages(self, conversation_id: str) -> Iterable[Message]:
        """Restartable iterable ordered by (created_at, insertion sequence)."""
        ...

    def last_message(self, conversation_id: str) -> Message | None: ...


class MessageWriter(Protocol):
    def create_if_not_exists(self, message: Message) -> tuple[Message, bool]:
        """Insert message. Return (message, created). Known id → return existing."""
        ...

    def replace(self, message: Message) -> Message: ...
