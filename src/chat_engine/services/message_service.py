from __future__ import annotations

import dataclasses
import logging
from typing import Iterable

from chat_engine.application.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from chat_engine.application.policies.participation import (
    assert_participant,
    require_conversation,
)
from chat_engine.application.ports.clock import Clock
from chat_engine.application.uow import UnitOfWork
from chat_engine.domain.entities.conversation import Conversation
from chat_engine.domain.entities.message import Message
from chat_engine.domain.value_objects.enums import MessageKind, MessageStatus
from chat_engine.domain.value_objects.ids import new_message_id

logger = logging.getLogger(__name__)

DEFAULT_MAX_REACTION_LENGTH = 16


def _validate_new_message(message: Message, uow: UnitOfWork) -> Conversation:
    conversation = require_conversation(
        uow.conversations.get_by_id(message.conversation_id), message.conversation_id,
    )
    if not message.content or not message.content.strip():
        raise ValidationError("Message content must not be empty")
    if message.created_at.tzinfo is None:
        raise ValidationError("Message created_at must be timezone-aware")
    assert_participant(conversation, message.sender_id)
    if message.reply_to_id is not None:
        target = uow.messages.get_by_id(message.reply_to_id)
        if target is None or target.conversation_id != message.conversation_id:
            raise ValidationError(
                f"Reply target {message.reply_to_id!r} is not a message of this conversation"
            )
    return conversation


def check_redelivery(existing: Message, incoming: Message) -> None:
    """A known id is only a re-delivery if it names the same conversation and sender."""
    if (
        existing.conversation_id != incoming.conversation_id
        or existing.sender_id != incoming.sender_id
    ):
        raise ConflictError(
            f"Message id {incoming.id!r} already belongs to another message "
            f"in {existing.conversation_id!r}"
        )


def append_message(
    message: Message,
    local_user_id: str,
    uow: UnitOfWork,
) -> tuple[Message, bool]:
    """Store a message as ``sent``.

    Returns (message, created). Re-delivery of a known id returns the stored
    message with created=False and leaves unread counters alone; an id that
    collides with a different message raises ConflictError.
    """
    _validate_new_message(message, uow)

    existing = uow.messages.get_by_id(message.id)
    if existing is not None:
        check_redelivery(existing, message)
        logger.debug("Duplicate delivery of message %s ignored", message.id)
        return existing, False

    msg = dataclasses.replace(message, status=MessageStatus.SENT)
    msg, created = uow.messages_w.create_if_not_exists(msg)

    if created:
        if msg.sender_id != local_user_id:
            uow.conversations_w.increment_unread(msg.conversation_id)
        uow.touch_list()
        uow.touch_timeline(msg.conversation_id)
        uow.commit()
        logger.debug("Appended message %s to %s", msg.id, msg.conversation_id)

    return msg, created


def seed_message(message: Message, uow: UnitOfWork) -> Message:
    """Store a historical message as-is: its status is kept and unread counts are untouched."""
    _validate_new_message(message, uow)
    existing = uow.messages.get_by_id(message.id)
    if existing is not None:
        check_redelivery(existing, message)
    msg, created = uow.messages_w.create_if_not_exists(message)
    if created:
        uow.touch_list()
        uow.touch_timeline(msg.conversation_id)
    return msg


def send_local_message(
    conversation_id: str,
    content: str,
    kind: MessageKind,
    local_user_id: str,
    uow: UnitOfWork,
    clock: Clock,
    *,
    reply_to_id: str | None = None,
    file_url: str | None = None,
) -> Message:
    """Append a message authored by the local user and return it for optimistic echo.

    The id is provisional: the transport later reconciles the status through
    :func:`advance_status` using this same id.
    """
    msg = Message(
        id=new_message_id(),
        conversation_id=conversation_id,
        sender_id=local_user_id,
        content=content,
        created_at=clock.now(),
        kind=kind,
        reply_to_id=reply_to_id,
        file_url=file_url,
    )
    msg, _created = append_message(msg, local_user_id, uow)
    return msg


def advance_status(
    message_id: str,
    new_status: MessageStatus,
    uow: UnitOfWork,
) -> Message:
    """Move a message forward along sent < delivered < read.

    Repeating the current status is a silent no-op; going backwards raises
    InvalidTransitionError.
    """
    msg = uow.messages.get_by_id(message_id)
    if msg is None:
        raise NotFoundError(f"Message {message_id!r} not found")

    if new_status == msg.status:
        return msg
    if new_status.rank < msg.status.rank:
        raise InvalidTransitionError(
            f"Cannot move message {message_id!r} from {msg.status} back to {new_status}"
        )

    msg = uow.messages_w.replace(dataclasses.replace(msg, status=new_status))
    uow.touch_list()
    uow.touch_timeline(msg.conversation_id)
    uow.commit()
    logger.debug("Message %s status -> %s", message_id, new_status)
    return msg


def add_reaction(
    message_id: str,
    reaction: str,
    uow: UnitOfWork,
    *,
    max_length: int = DEFAULT_MAX_REACTION_LENGTH,
) -> Message:
    msg = uow.messages.get_by_id(message_id)
    if msg is None:
        raise NotFoundError(f"Message {message_id!r} not found")
    if not reaction or not reaction.strip():
        raise ValidationError("Reaction must not be empty")
    if len(reaction) > max_length:
        raise ValidationError(f"Reaction longer than {max_length} characters")

    msg = uow.messages_w.replace(
        dataclasses.replace(msg, reactions=(*msg.reactions, reaction))
    )
    uow.touch_timeline(msg.conversation_id)
    uow.commit()
    return msg


def messages_for(conversation_id: str, uow: UnitOfWork) -> Iterable[Message]:
    require_conversation(uow.conversations.get_by_id(conversation_id), conversation_id)
    return uow.messages.list_messages(conversation_id)
