from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from chat_engine.domain.value_objects.enums import Presence


@dataclass(frozen=True, slots=True)
class User:
    id: str
    name: str
    avatar_ref: str | None = None
    presence: Presence = Presence.OFFLINE
    last_seen: datetime | None = None
    bio: str | None = None
