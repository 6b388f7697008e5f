from __future__ import annotations

import logging
from typing import Sequence

from chat_engine.application.exceptions import NotFoundError, ValidationError
from chat_engine.application.uow import UnitOfWork
from chat_engine.domain.entities.conversation import Conversation
from chat_engine.domain.entities.message import Message
from chat_engine.domain.entities.user import User
from chat_engine.services import conversation_service, message_service

logger = logging.getLogger(__name__)


def _check_messages(
    messages: Sequence[Message],
    conversations: dict[str, Conversation],
    uow: UnitOfWork,
) -> None:
    seen: dict[str, Message] = {}
    for msg in messages:
        conv = conversations.get(msg.conversation_id) or uow.conversations.get_by_id(
            msg.conversation_id
        )
        if conv is None:
            raise NotFoundError(f"Conversation {msg.conversation_id!r} not found")
        if not msg.content or not msg.content.strip():
            raise ValidationError(f"Message {msg.id!r} has empty content")
        if msg.created_at.tzinfo is None:
            raise ValidationError(f"Message {msg.id!r} created_at must be timezone-aware")
        if not conv.has_participant(msg.sender_id):
            raise ValidationError(
                f"Sender {msg.sender_id!r} of message {msg.id!r} is not a participant"
            )
        if msg.reply_to_id is not None:
            target = seen.get(msg.reply_to_id) or uow.messages.get_by_id(msg.reply_to_id)
            if target is None or target.conversation_id != msg.conversation_id:
                raise ValidationError(
                    f"Reply target {msg.reply_to_id!r} of message {msg.id!r} is unknown"
                )
        previous = seen.get(msg.id) or uow.messages.get_by_id(msg.id)
        if previous is not None:
            message_service.check_redelivery(previous, msg)
        else:
            seen[msg.id] = msg


def load_roster(
    users: Sequence[User],
    conversations: Sequence[Conversation],
    messages: Sequence[Message],
    local_user_id: str,
    uow: UnitOfWork,
) -> None:
    """Seed initial state in one commit.

    Everything is validated before the first write, so a bad roster leaves
    the store untouched. Messages keep their status; unread counts come from
    the supplied conversations.
    """
    known = frozenset(u.id for u in users)
    if local_user_id not in known and not uow.users.exists(local_user_id):
        raise ValidationError(f"Local user {local_user_id!r} missing from roster")

    by_id: dict[str, Conversation] = {}
    for conv in conversations:
        conversation_service.validate_conversation(
            conv, local_user_id, uow, known_user_ids=known,
        )
        by_id[conv.id] = conv
    _check_messages(messages, by_id, uow)

    uow.users_w.put_many(users)
    for conv in conversations:
        uow.conversations_w.upsert(conv)
        uow.touch_timeline(conv.id)
    for msg in messages:
        message_service.seed_message(msg, uow)
    uow.touch_list()
    uow.commit()
    logger.info(
        "Roster loaded: %d users, %d conversations, %d messages",
        len(users), len(conversations), len(messages),
    )
