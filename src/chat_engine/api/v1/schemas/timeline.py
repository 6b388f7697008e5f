from __future__ import annotations

from datetime import date
from typing import Sequence

from pydantic import BaseModel

from chat_engine.api.v1.schemas.message import MessageResponse
from chat_engine.application.dto.timeline import DateGroup
from chat_engine.services.timeline_service import date_separator_label


class TimelineEntryResponse(BaseModel):
    message: MessageResponse
    is_own: bool
    show_avatar: bool

    model_config = {"from_attributes": True}


class DateGroupResponse(BaseModel):
    day: date
    label: str
    entries: list[TimelineEntryResponse]


def to_timeline_response(groups: Sequence[DateGroup], today: date) -> list[DateGroupResponse]:
    return [
        DateGroupResponse(
            day=g.day,
            label=date_separator_label(g.day, today),
            entries=[TimelineEntryResponse.model_validate(e, from_attributes=True) for e in g.entries],
        )
        for g in groups
    ]
