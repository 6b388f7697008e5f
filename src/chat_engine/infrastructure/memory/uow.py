"""In-memory Unit-of-Work: the single owned store handed to every service."""
from __future__ import annotations

import logging
from types import TracebackType
from typing import Callable, Self

from chat_engine.application.uow import ChangeSet
from chat_engine.infrastructure.memory.repositories.conversation import (
    ConversationReaderRepo,
    ConversationWriterRepo,
)
from chat_engine.infrastructure.memory.repositories.message import (
    MessageReaderRepo,
    MessageWriterRepo,
)
from chat_engine.infrastructure.memory.repositories.user import (
    UserReaderRepo,
    UserWriterRepo,
)
from chat_engine.infrastructure.memory.session import MemorySession

logger = logging.getLogger(__name__)


CommitHook = Callable[[ChangeSet], None]


class InMemoryUoW:
    def __init__(self, session: MemorySession | None = None) -> None:
        self._session = session or MemorySession()
        self.users = UserReaderRepo(self._session)
        self.users_w = UserWriterRepo(self._session)
        self.conversations = ConversationReaderRepo(self._session)
        self.conversations_w = ConversationWriterRepo(self._session)
        self.messages = MessageReaderRepo(self._session)
        self.messages_w = MessageWriterRepo(self._session)
        self._version = 0
        self._list_dirty = False
        self._dirty_timelines: set[str] = set()
        self._hooks: list[CommitHook] = []

    @property
    def version(self) -> int:
        return self._version

    def add_commit_hook(self, hook: CommitHook) -> None:
        self._hooks.append(hook)

    def touch_list(self) -> None:
        self._list_dirty = True

    def touch_timeline(self, conversation_id: str) -> None:
        self._dirty_timelines.add(conversation_id)

    def commit(self) -> ChangeSet | None:
        if not self._list_dirty and not self._dirty_timelines:
            return None
        self._version += 1
        changes = ChangeSet(
            version=self._version,
            list_changed=self._list_dirty,
            timelines=frozenset(self._dirty_timelines),
        )
        self._list_dirty = False
        self._dirty_timelines.clear()
        logger.debug(
            "Committed version %d (list=%s, timelines=%d)",
            changes.version, changes.list_changed, len(changes.timelines),
        )
        for hook in self._hooks:
            hook(changes)
        return changes

    def rollback(self) -> None:
        # Services validate before mutating, so only pending notifications are left to drop.
        self._list_dirty = False
        self._dirty_timelines.clear()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            self.rollback()
