"""Process-lifetime tables shared by the in-memory repositories."""
from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from datetime import datetime

from chat_engine.domain.entities.conversation import Conversation
from chat_engine.domain.entities.message import Message
from chat_engine.domain.entities.user import User

# (created_at, insertion sequence, message id); the sequence makes the key unique.
OrderKey = tuple[datetime, int, str]


@dataclass
class MemorySession:
    users: dict[str, User] = field(default_factory=dict)
    conversations: dict[str, Conversation] = field(default_factory=dict)
    conversation_order: dict[str, int] = field(default_factory=dict)
    messages: dict[str, Message] = field(default_factory=dict)
    message_index: dict[str, list[OrderKey]] = field(default_factory=dict)
    _seq: itertools.count = field(default_factory=itertools.count)

    def next_seq(self) -> int:
        return next(self._seq)
