from __future__ import annotations

from dataclasses import dataclass

from chat_engine.domain.value_objects.enums import ConversationKind


@dataclass(frozen=True, slots=True)
class Conversation:
    id: str
    kind: ConversationKind
    participant_ids: tuple[str, ...]
    name: str | None = None
    avatar_ref: str | None = None
    unread_count: int = 0
    typing_user_id: str | None = None

    @property
    def is_typing(self) -> bool:
        return self.typing_user_id is not None

    @property
    def is_group(self) -> bool:
        return self.kind == ConversationKind.GROUP

    def has_participant(self, user_id: str) -> bool:
        return user_id in self.participant_ids

    def peer_id(self, local_user_id: str) -> str | None:
        """The non-local participant of a direct conversation."""
        if self.is_group:
            return None
        for pid in self.participant_ids:
            if pid != local_user_id:
                return pid
        return None
