from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from chat_engine.application.repositories.conversation import (
    ConversationReader,
    ConversationWriter,
)
from chat_engine.application.repositories.message import MessageReader, MessageWriter
from chat_engine.application.repositories.user import UserReader, UserWriter


@dataclass(frozen=True, slots=True)
class ChangeSet:
    """What a single commit touched."""

    version: int
    list_changed: bool
    timelines: frozenset[str] = field(default_factory=frozenset)


class UnitOfWork(Protocol):
    users: UserReader
    users_w: UserWriter
    conversations: ConversationReader
    conversations_w: ConversationWriter
    messages: MessageReader
    messages_w: MessageWriter

    @property
    def version(self) -> int:
        """Incremented by every commit that carries changes."""
        ...

    def touch_list(self) -> None:
        """Record that the ordered conversation list must be re-derived."""
        ...

    def touch_timeline(self, conversation_id: str) -> None: ...

    def commit(self) -> ChangeSet | None: ...
    def rollback(self) -> None: ...
