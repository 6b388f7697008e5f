from __future__ import annotations

from fastapi import APIRouter, Query

from chat_engine.api.deps import EngineDep
from chat_engine.api.v1.schemas.conversation import (
    ConversationResponse,
    TypingRequest,
    UpsertConversationRequest,
)
from chat_engine.api.v1.schemas.message import MessageResponse
from chat_engine.domain.value_objects.enums import ConversationCategory

router = APIRouter(prefix="/api/v1/chat/conversations", tags=["conversations"])


@router.get("", response_model=list[ConversationResponse])
async def list_conversations(
    engine: EngineDep,
    q: str = Query(""),
    category: ConversationCategory = Query(ConversationCategory.ALL),
) -> list[ConversationResponse]:
    return [
        ConversationResponse.model_validate(s, from_attributes=True)
        for s in engine.filter(q, category)
    ]


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(conversation_id: str, engine: EngineDep) -> ConversationResponse:
    return ConversationResponse.model_validate(engine.summary(conversation_id), from_attributes=True)


@router.put("/{conversation_id}", response_model=ConversationResponse)
async def upsert_conversation(
    conversation_id: str,
    body: UpsertConversationRequest,
    engine: EngineDep,
) -> ConversationResponse:
    engine.upsert_conversation(body.to_entity(conversation_id))
    return ConversationResponse.model_validate(engine.summary(conversation_id), from_attributes=True)


@router.post("/{conversation_id}/read", response_model=ConversationResponse)
async def mark_read(conversation_id: str, engine: EngineDep) -> ConversationResponse:
    engine.mark_read(conversation_id)
    return ConversationResponse.model_validate(engine.summary(conversation_id), from_attributes=True)


@router.put("/{conversation_id}/typing", response_model=ConversationResponse)
async def set_typing(
    conversation_id: str,
    body: TypingRequest,
    engine: EngineDep,
) -> ConversationResponse:
    engine.on_typing_changed(conversation_id, body.user_id)
    return ConversationResponse.model_validate(engine.summary(conversation_id), from_attributes=True)


@router.get("/{conversation_id}/last-message", response_model=MessageResponse | None)
async def last_message(conversation_id: str, engine: EngineDep) -> MessageResponse | None:
    msg = engine.last_message(conversation_id)
    if msg is None:
        return None
    return MessageResponse.model_validate(msg, from_attributes=True)
