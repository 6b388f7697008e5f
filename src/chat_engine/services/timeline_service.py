"""Date-grouped timeline projection.

Pure functions over an ordered message sequence; nothing here touches the store.
"""
from __future__ import annotations

import itertools
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable

from chat_engine.application.dto.timeline import DateGroup, TimelineEntry
from chat_engine.domain.entities.message import Message


def local_day(ts: datetime, tz: tzinfo | None = None) -> date:
    """Calendar day of ``ts`` as seen in the viewer's zone (process local zone when ``tz`` is None)."""
    return ts.astimezone(tz).date()


def project_timeline(
    messages: Iterable[Message],
    local_user_id: str,
    tz: tzinfo | None = None,
) -> tuple[DateGroup, ...]:
    """Partition ordered messages into calendar-day groups.

    Within a group, a remote message shows its sender's avatar only when it
    opens the group or follows a message from someone else. Local messages
    never show one.
    """
    groups: list[DateGroup] = []
    for day, day_messages in itertools.groupby(messages, key=lambda m: local_day(m.created_at, tz)):
        entries: list[TimelineEntry] = []
        previous: Message | None = None
        for msg in day_messages:
            is_own = msg.sender_id == local_user_id
            show_avatar = not is_own and (
                previous is None or previous.sender_id != msg.sender_id
            )
            entries.append(TimelineEntry(message=msg, is_own=is_own, show_avatar=show_avatar))
            previous = msg
        groups.append(DateGroup(day=day, entries=tuple(entries)))
    return tuple(groups)


def date_separator_label(day: date, today: date) -> str:
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    return f"{day:%B} {day.day}, {day.year}"
