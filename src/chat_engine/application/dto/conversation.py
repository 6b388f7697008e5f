from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from chat_engine.domain.value_objects.enums import ConversationKind, Presence


@dataclass(frozen=True, slots=True)
class PreviewPolicy:
    """Empty-state and badge texts used when summarizing conversations."""

    empty_text: str = "No messages yet"
    typing_text: str = "typing..."
    badge_cap: int = 99


@dataclass(frozen=True, slots=True)
class ConversationSummary:
    """One row of the conversation list, fully resolved for display."""

    id: str
    kind: ConversationKind
    display_name: str
    avatar_ref: str | None
    unread_count: int
    unread_badge: str | None
    is_typing: bool
    typing_user_id: str | None
    preview: str
    last_message_id: str | None
    last_message_at: datetime | None
    peer_presence: Presence | None
    member_count: int
