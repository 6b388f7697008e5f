from __future__ import annotations

import dataclasses
import logging

from chat_engine.application.exceptions import ValidationError
from chat_engine.application.policies.participation import (
    assert_participant,
    require_conversation,
)
from chat_engine.application.ports.clock import Clock
from chat_engine.application.uow import UnitOfWork
from chat_engine.domain.entities.conversation import Conversation
from chat_engine.domain.entities.user import User
from chat_engine.domain.value_objects.enums import Presence
from chat_engine.services import conversation_service

logger = logging.getLogger(__name__)


def set_presence(
    user_id: str,
    presence: Presence,
    uow: UnitOfWork,
    clock: Clock,
) -> User:
    """Update a user's presence. Going offline stamps ``last_seen``."""
    user = uow.users.get_by_id(user_id)
    if user is None:
        raise ValidationError(f"Unknown user id {user_id!r}")
    if user.presence == presence:
        return user

    last_seen = clock.now() if presence == Presence.OFFLINE else user.last_seen
    user = dataclasses.replace(user, presence=presence, last_seen=last_seen)
    uow.users_w.put(user)

    if uow.conversations.list_for_user(user_id):
        uow.touch_list()
    uow.commit()
    logger.debug("User %s is now %s", user_id, presence)
    return user


def set_typing(
    conversation_id: str,
    user_id: str | None,
    uow: UnitOfWork,
) -> Conversation:
    """Validated typing update: the typing user must belong to the conversation."""
    conversation = require_conversation(
        uow.conversations.get_by_id(conversation_id), conversation_id,
    )
    if user_id is not None:
        assert_participant(conversation, user_id)
    return conversation_service.set_typing(conversation_id, user_id, uow)
