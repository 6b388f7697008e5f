from __future__ import annotations

from typing import Protocol

from chat_engine.domain.events.conversation_list_changed import ConversationListChanged
from chat_engine.domain.events.timeline_changed import TimelineChanged

EngineEvent = ConversationListChanged | TimelineChanged


class ChangeListener(Protocol):
    def __call__(self, event: EngineEvent) -> None: ...
