from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chat_engine.application.dto.timeline import DateGroup


@dataclass(frozen=True, slots=True)
class TimelineChanged:
    conversation_id: str
    groups: tuple[DateGroup, ...]
