"""Shared test fixtures."""
from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from datetime import datetime, timezone

import pytest

from chat_engine.application.ports.clock import FrozenClock
from chat_engine.application.ports.listener import EngineEvent
from chat_engine.domain.entities.conversation import Conversation
from chat_engine.domain.entities.message import Message
from chat_engine.domain.entities.user import User
from chat_engine.domain.events.conversation_list_changed import ConversationListChanged
from chat_engine.domain.events.timeline_changed import TimelineChanged
from chat_engine.domain.value_objects.enums import (
    ConversationKind,
    MessageKind,
    MessageStatus,
    Presence,
)
from chat_engine.engine import ChatEngine
from chat_engine.infrastructure.memory.uow import InMemoryUoW

LOCAL = "me"
NOW = datetime(2024, 1, 2, 12, 0, tzinfo=timezone.utc)

_ids = itertools.count(1)


def make_user(user_id: str, name: str | None = None, **kwargs) -> User:
    return User(id=user_id, name=name or user_id.title(), **kwargs)


def make_conversation(
    conversation_id: str,
    *participants: str,
    kind: ConversationKind = ConversationKind.DIRECT,
    name: str | None = None,
    unread_count: int = 0,
) -> Conversation:
    return Conversation(
        id=conversation_id,
        kind=kind,
        participant_ids=(LOCAL, *participants),
        name=name,
        unread_count=unread_count,
    )


def make_message(
    conversation_id: str,
    sender_id: str,
    *,
    content: str = "hello",
    created_at: datetime = NOW,
    message_id: str | None = None,
    status: MessageStatus = MessageStatus.SENT,
    kind: MessageKind = MessageKind.TEXT,
    reply_to_id: str | None = None,
) -> Message:
    return Message(
        id=message_id or f"m{next(_ids)}",
        conversation_id=conversation_id,
        sender_id=sender_id,
        content=content,
        created_at=created_at,
        kind=kind,
        status=status,
        reply_to_id=reply_to_id,
    )


ROSTER_USERS = [
    make_user(LOCAL, "You", presence=Presence.ONLINE),
    make_user("sarah", "Sarah Wilson", presence=Presence.ONLINE),
    make_user("mike", "Mike Chen"),
    make_user("emma", "Emma Davis", presence=Presence.AWAY),
]

ROSTER_CONVERSATIONS = [
    make_conversation("c-sarah", "sarah"),
    make_conversation("c-mike", "mike"),
    make_conversation(
        "c-design", "sarah", "mike", "emma",
        kind=ConversationKind.GROUP, name="Design Team",
    ),
]


def seeded_uow() -> InMemoryUoW:
    uow = InMemoryUoW()
    uow.users_w.put_many(ROSTER_USERS)
    for conv in ROSTER_CONVERSATIONS:
        uow.conversations_w.upsert(conv)
    uow.rollback()
    return uow


@pytest.fixture
def uow() -> InMemoryUoW:
    return seeded_uow()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(NOW)


@pytest.fixture
def engine(clock: FrozenClock) -> ChatEngine:
    eng = ChatEngine(LOCAL, clock=clock, tz=timezone.utc)
    eng.on_roster_loaded(ROSTER_USERS, ROSTER_CONVERSATIONS)
    return eng


@dataclass
class RecordingListener:
    events: list[EngineEvent] = field(default_factory=list)

    def __call__(self, event: EngineEvent) -> None:
        self.events.append(event)

    @property
    def list_events(self) -> list[ConversationListChanged]:
        return [e for e in self.events if isinstance(e, ConversationListChanged)]

    @property
    def timeline_events(self) -> list[TimelineChanged]:
        return [e for e in self.events if isinstance(e, TimelineChanged)]

    def clear(self) -> None:
        self.events.clear()


@pytest.fixture
def listener(engine: ChatEngine) -> RecordingListener:
    rec = RecordingListener()
    engine.subscribe(rec)
    return rec
