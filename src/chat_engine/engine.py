"""Engine facade: the single ingestion point for inbound events and the read side for views."""
from __future__ import annotations

import logging
from datetime import date, tzinfo
from typing import Any, Callable, Iterable, Sequence

from chat_engine.application.dto.conversation import ConversationSummary, PreviewPolicy
from chat_engine.application.dto.timeline import DateGroup
from chat_engine.application.exceptions import NotFoundError, ValidationError
from chat_engine.application.ports.clock import Clock, SystemClock
from chat_engine.application.ports.listener import ChangeListener, EngineEvent
from chat_engine.application.uow import ChangeSet
from chat_engine.domain.entities.conversation import Conversation
from chat_engine.domain.entities.message import Message
from chat_engine.domain.entities.user import User
from chat_engine.domain.events.conversation_list_changed import ConversationListChanged
from chat_engine.domain.events.timeline_changed import TimelineChanged
from chat_engine.domain.value_objects.enums import (
    ConversationCategory,
    MessageKind,
    MessageStatus,
    Presence,
)
from chat_engine.infrastructure.memory.uow import InMemoryUoW
from chat_engine.services import (
    conversation_service,
    message_service,
    presence_service,
    roster_service,
    search_service,
    timeline_service,
)

logger = logging.getLogger(__name__)


class ChatEngine:
    """Owns one store for one local user.

    All mutations are synchronous and run one at a time; callers with several
    event sources must serialize delivery. Derived views are memoized against
    the store version and recomputed after every commit.
    """

    def __init__(
        self,
        local_user_id: str,
        uow: InMemoryUoW | None = None,
        *,
        clock: Clock | None = None,
        tz: tzinfo | None = None,
        policy: PreviewPolicy | None = None,
        max_reaction_length: int = message_service.DEFAULT_MAX_REACTION_LENGTH,
    ) -> None:
        self.local_user_id = local_user_id
        self.uow = uow or InMemoryUoW()
        self.clock = clock or SystemClock()
        self.tz = tz
        self.policy = policy or PreviewPolicy()
        self.max_reaction_length = max_reaction_length
        self._listeners: list[ChangeListener] = []
        self._memo: dict[str, tuple[int, tuple[Any, ...], Any]] = {}
        self.uow.add_commit_hook(self._on_commit)

    # -- subscriptions ------------------------------------------------------

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, event: EngineEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener %r failed on %s", listener, type(event).__name__)

    def _on_commit(self, changes: ChangeSet) -> None:
        self._memo.clear()
        if not self._listeners:
            return
        if changes.list_changed:
            self._emit(ConversationListChanged(conversations=self.conversation_list()))
        for conversation_id in sorted(changes.timelines):
            if self.uow.conversations.get_by_id(conversation_id) is None:
                continue
            self._emit(TimelineChanged(
                conversation_id=conversation_id,
                groups=self.timeline(conversation_id),
            ))

    def _memoized(
        self,
        slot: str,
        args: tuple[Any, ...],
        compute: Callable[[], Any],
    ) -> Any:
        """Cache one value per slot, valid for the current version and these args only."""
        version = self.uow.version
        cached = self._memo.get(slot)
        if cached is not None and cached[0] == version and cached[1] == args:
            return cached[2]
        value = compute()
        self._memo[slot] = (version, args, value)
        return value

    # -- inbound events -----------------------------------------------------

    def on_message_received(self, message: Message) -> Message:
        msg, _created = message_service.append_message(message, self.local_user_id, self.uow)
        return msg

    def on_status_update(self, message_id: str, status: MessageStatus) -> Message:
        return message_service.advance_status(message_id, MessageStatus(status), self.uow)

    def on_typing_changed(self, conversation_id: str, user_id: str | None) -> Conversation:
        return presence_service.set_typing(conversation_id, user_id, self.uow)

    def on_presence_changed(self, user_id: str, presence: Presence) -> User:
        return presence_service.set_presence(user_id, Presence(presence), self.uow, self.clock)

    def on_roster_loaded(
        self,
        users: Sequence[User],
        conversations: Sequence[Conversation],
        messages: Sequence[Message] = (),
    ) -> None:
        roster_service.load_roster(users, conversations, messages, self.local_user_id, self.uow)

    # -- consumer actions ---------------------------------------------------

    def send_local_message(
        self,
        conversation_id: str,
        content: str,
        kind: MessageKind = MessageKind.TEXT,
        *,
        reply_to_id: str | None = None,
        file_url: str | None = None,
    ) -> str:
        """Append a local message and return its provisional id for optimistic echo."""
        msg = message_service.send_local_message(
            conversation_id,
            content,
            MessageKind(kind),
            self.local_user_id,
            self.uow,
            self.clock,
            reply_to_id=reply_to_id,
            file_url=file_url,
        )
        return msg.id

    def mark_read(self, conversation_id: str) -> Conversation:
        return conversation_service.mark_read(conversation_id, self.uow)

    def add_reaction(self, message_id: str, reaction: str) -> Message:
        return message_service.add_reaction(
            message_id, reaction, self.uow, max_length=self.max_reaction_length,
        )

    def upsert_conversation(self, conversation: Conversation) -> Conversation:
        return conversation_service.upsert_conversation(conversation, self.local_user_id, self.uow)

    def add_user(self, user: User) -> User:
        if not user.id:
            raise ValidationError("User id must not be empty")
        self.uow.users_w.put(user)
        self.uow.touch_list()
        self.uow.commit()
        return user

    # -- read side ----------------------------------------------------------

    def user(self, user_id: str) -> User | None:
        return self.uow.users.get_by_id(user_id)

    def message(self, message_id: str) -> Message:
        msg = self.uow.messages.get_by_id(message_id)
        if msg is None:
            raise NotFoundError(f"Message {message_id!r} not found")
        return msg

    def conversation(self, conversation_id: str) -> Conversation:
        return conversation_service.get_conversation(conversation_id, self.uow)

    def last_message(self, conversation_id: str) -> Message | None:
        return conversation_service.last_message(conversation_id, self.uow)

    def messages_for(self, conversation_id: str) -> Iterable[Message]:
        return message_service.messages_for(conversation_id, self.uow)

    def summary(self, conversation_id: str) -> ConversationSummary:
        conv = conversation_service.get_conversation(conversation_id, self.uow)
        return conversation_service.summarize(conv, self.local_user_id, self.uow, self.policy)

    def today(self) -> date:
        """Current calendar day in the viewer zone."""
        return timeline_service.local_day(self.clock.now(), self.tz)

    def conversation_list(self) -> tuple[ConversationSummary, ...]:
        return self._memoized(
            "conversation_list", (),
            lambda: tuple(
                conversation_service.list_summaries(self.local_user_id, self.uow, self.policy)
            ),
        )

    def filter(
        self,
        query: str = "",
        category: ConversationCategory = ConversationCategory.ALL,
    ) -> tuple[ConversationSummary, ...]:
        category = ConversationCategory(category)
        return self._memoized(
            "filter", (query, category),
            lambda: search_service.filter_conversations(self.conversation_list(), query, category),
        )

    def timeline(self, conversation_id: str) -> tuple[DateGroup, ...]:
        messages = self.messages_for(conversation_id)
        return self._memoized(
            f"timeline:{conversation_id}", (),
            lambda: timeline_service.project_timeline(messages, self.local_user_id, self.tz),
        )
