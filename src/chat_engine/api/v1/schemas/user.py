from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from chat_engine.domain.value_objects.enums import Presence


class PresenceRequest(BaseModel):
    presence: Presence


class UserResponse(BaseModel):
    id: str
    name: str
    avatar_ref: str | None
    presence: Presence
    last_seen: datetime | None
    bio: str | None

    model_config = {"from_attributes": True}
