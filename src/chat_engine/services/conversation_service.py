from __future__ import annotations

import dataclasses
import logging

from chat_engine.application.dto.conversation import ConversationSummary, PreviewPolicy
from chat_engine.application.exceptions import ValidationError
from chat_engine.application.policies.participation import require_conversation
from chat_engine.application.uow import UnitOfWork
from chat_engine.domain.entities.conversation import Conversation
from chat_engine.domain.entities.message import Message
from chat_engine.domain.value_objects.enums import ConversationKind

logger = logging.getLogger(__name__)


def validate_conversation(
    conversation: Conversation,
    local_user_id: str,
    uow: UnitOfWork,
    *,
    known_user_ids: frozenset[str] = frozenset(),
) -> None:
    """Check the structural invariants of a conversation before it is stored.

    ``known_user_ids`` lets a bulk load vouch for users it is about to insert.
    """
    participants = conversation.participant_ids
    if len(participants) < 2:
        raise ValidationError("A conversation needs at least two participants")
    if len(set(participants)) != len(participants):
        raise ValidationError("Participants must be unique")
    for user_id in participants:
        if user_id not in known_user_ids and not uow.users.exists(user_id):
            raise ValidationError(f"Unknown user id {user_id!r}")

    if conversation.kind == ConversationKind.DIRECT:
        if len(participants) != 2 or local_user_id not in participants:
            raise ValidationError(
                "A direct conversation has exactly two participants, one of them the local user"
            )
    elif not conversation.name or not conversation.name.strip():
        raise ValidationError("A group conversation needs a name")

    if conversation.unread_count < 0:
        raise ValidationError("unread_count must not be negative")
    if conversation.typing_user_id is not None and not conversation.has_participant(
        conversation.typing_user_id
    ):
        raise ValidationError("Typing user must be a participant")


def upsert_conversation(
    conversation: Conversation,
    local_user_id: str,
    uow: UnitOfWork,
) -> Conversation:
    """Insert or replace a conversation by id.

    Unread and typing state belong to the engine: a replacement keeps the
    stored values, dropping typing only if that user left the conversation.
    """
    existing = uow.conversations.get_by_id(conversation.id)
    if existing is not None:
        typing_user_id = existing.typing_user_id
        if typing_user_id is not None and not conversation.has_participant(typing_user_id):
            typing_user_id = None
        conversation = dataclasses.replace(
            conversation,
            unread_count=existing.unread_count,
            typing_user_id=typing_user_id,
        )
    validate_conversation(conversation, local_user_id, uow)
    conversation = uow.conversations_w.upsert(conversation)
    uow.touch_list()
    uow.touch_timeline(conversation.id)
    uow.commit()
    logger.debug("Upserted conversation %s", conversation.id)
    return conversation


def mark_read(conversation_id: str, uow: UnitOfWork) -> Conversation:
    """Reset the unread counter; the consumer calls this when the conversation gains focus."""
    conversation = require_conversation(
        uow.conversations.get_by_id(conversation_id), conversation_id,
    )
    if conversation.unread_count == 0:
        return conversation
    conversation = uow.conversations_w.reset_unread(conversation_id)
    uow.touch_list()
    uow.commit()
    return conversation


def set_typing(
    conversation_id: str,
    user_id: str | None,
    uow: UnitOfWork,
) -> Conversation:
    """Set or clear (``user_id=None``) the typing user of a conversation."""
    conversation = require_conversation(
        uow.conversations.get_by_id(conversation_id), conversation_id,
    )
    if conversation.typing_user_id == user_id:
        return conversation
    conversation = uow.conversations_w.set_typing(conversation_id, user_id)
    uow.touch_list()
    uow.commit()
    return conversation


def get_conversation(conversation_id: str, uow: UnitOfWork) -> Conversation:
    return require_conversation(uow.conversations.get_by_id(conversation_id), conversation_id)


def last_message(conversation_id: str, uow: UnitOfWork) -> Message | None:
    """Latest message of the conversation, or None while it has none."""
    require_conversation(uow.conversations.get_by_id(conversation_id), conversation_id)
    return uow.messages.last_message(conversation_id)


def list_conversations(uow: UnitOfWork) -> list[Conversation]:
    """Conversations ordered for the list view.

    Most recent last message first, ties broken by id. Conversations without
    messages follow in creation order.
    """
    with_messages: list[tuple[Conversation, Message]] = []
    empty: list[Conversation] = []
    for conv in uow.conversations.list_all():
        last = uow.messages.last_message(conv.id)
        if last is None:
            empty.append(conv)
        else:
            with_messages.append((conv, last))

    with_messages.sort(key=lambda pair: pair[0].id)
    with_messages.sort(key=lambda pair: pair[1].created_at, reverse=True)
    return [conv for conv, _ in with_messages] + empty


def display_name(conversation: Conversation, local_user_id: str, uow: UnitOfWork) -> str:
    if conversation.is_group:
        return conversation.name or ""
    peer_id = conversation.peer_id(local_user_id)
    peer = uow.users.get_by_id(peer_id) if peer_id else None
    return peer.name if peer else ""


def display_avatar(
    conversation: Conversation,
    local_user_id: str,
    uow: UnitOfWork,
) -> str | None:
    if conversation.is_group:
        return conversation.avatar_ref
    peer_id = conversation.peer_id(local_user_id)
    peer = uow.users.get_by_id(peer_id) if peer_id else None
    return peer.avatar_ref if peer else None


def unread_badge(count: int, cap: int = 99) -> str | None:
    if count <= 0:
        return None
    if count > cap:
        return f"{cap}+"
    return str(count)


def summarize(
    conversation: Conversation,
    local_user_id: str,
    uow: UnitOfWork,
    policy: PreviewPolicy = PreviewPolicy(),
) -> ConversationSummary:
    last = uow.messages.last_message(conversation.id)
    if conversation.is_typing:
        preview = policy.typing_text
    elif last is not None:
        preview = last.content
    else:
        preview = policy.empty_text

    peer_presence = None
    peer_id = conversation.peer_id(local_user_id)
    if peer_id is not None:
        peer = uow.users.get_by_id(peer_id)
        peer_presence = peer.presence if peer else None

    return ConversationSummary(
        id=conversation.id,
        kind=conversation.kind,
        display_name=display_name(conversation, local_user_id, uow),
        avatar_ref=display_avatar(conversation, local_user_id, uow),
        unread_count=conversation.unread_count,
        unread_badge=unread_badge(conversation.unread_count, policy.badge_cap),
        is_typing=conversation.is_typing,
        typing_user_id=conversation.typing_user_id,
        preview=preview,
        last_message_id=last.id if last else None,
        last_message_at=last.created_at if last else None,
        peer_presence=peer_presence,
        member_count=len(conversation.participant_ids),
    )


def list_summaries(
    local_user_id: str,
    uow: UnitOfWork,
    policy: PreviewPolicy = PreviewPolicy(),
) -> list[ConversationSummary]:
    return [summarize(c, local_user_id, uow, policy) for c in list_conversations(uow)]
