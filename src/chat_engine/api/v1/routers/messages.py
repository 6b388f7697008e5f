from __future__ import annotations

from fastapi import APIRouter

from chat_engine.api.deps import EngineDep
from chat_engine.api.v1.schemas.message import (
    MessageResponse,
    ReactionRequest,
    SendMessageRequest,
    StatusUpdateRequest,
)
from chat_engine.api.v1.schemas.timeline import DateGroupResponse, to_timeline_response

router = APIRouter(prefix="/api/v1/chat", tags=["messages"])


@router.get("/conversations/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_messages(conversation_id: str, engine: EngineDep) -> list[MessageResponse]:
    return [
        MessageResponse.model_validate(m, from_attributes=True)
        for m in engine.messages_for(conversation_id)
    ]


@router.get("/conversations/{conversation_id}/timeline", response_model=list[DateGroupResponse])
async def timeline(conversation_id: str, engine: EngineDep) -> list[DateGroupResponse]:
    return to_timeline_response(engine.timeline(conversation_id), engine.today())


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=201,
)
async def send_message(
    conversation_id: str,
    body: SendMessageRequest,
    engine: EngineDep,
) -> MessageResponse:
    message_id = engine.send_local_message(
        conversation_id,
        body.content,
        body.kind,
        reply_to_id=body.reply_to_id,
        file_url=body.file_url,
    )
    return MessageResponse.model_validate(engine.message(message_id), from_attributes=True)


@router.post("/messages/{message_id}/status", response_model=MessageResponse)
async def update_status(
    message_id: str,
    body: StatusUpdateRequest,
    engine: EngineDep,
) -> MessageResponse:
    msg = engine.on_status_update(message_id, body.status)
    return MessageResponse.model_validate(msg, from_attributes=True)


@router.post("/messages/{message_id}/reactions", response_model=MessageResponse)
async def add_reaction(
    message_id: str,
    body: ReactionRequest,
    engine: EngineDep,
) -> MessageResponse:
    msg = engine.add_reaction(message_id, body.reaction)
    return MessageResponse.model_validate(msg, from_attributes=True)
