from __future__ import annotations

from fastapi import APIRouter

from chat_engine.api.deps import EngineDep
from chat_engine.api.v1.schemas.user import PresenceRequest, UserResponse
from chat_engine.application.exceptions import NotFoundError

router = APIRouter(prefix="/api/v1/chat/users", tags=["users"])


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, engine: EngineDep) -> UserResponse:
    user = engine.user(user_id)
    if user is None:
        raise NotFoundError(f"User {user_id!r} not found")
    return UserResponse.model_validate(user, from_attributes=True)


@router.put("/{user_id}/presence", response_model=UserResponse)
async def set_presence(
    user_id: str,
    body: PresenceRequest,
    engine: EngineDep,
) -> UserResponse:
    user = engine.on_presence_changed(user_id, body.presence)
    return UserResponse.model_validate(user, from_attributes=True)
