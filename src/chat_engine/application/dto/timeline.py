from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from chat_engine.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class TimelineEntry:
    message: Message
    is_own: bool
    show_avatar: bool


@dataclass(frozen=True, slots=True)
class DateGroup:
    """Messages of one calendar day in the viewer's time zone."""

    day: date
    entries: tuple[TimelineEntry, ...]

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(e.message for e in self.entries)
