from __future__ import annotations

from chat_engine.application.exceptions import NotFoundError, ValidationError
from chat_engine.domain.entities.conversation import Conversation


def require_conversation(
    conversation: Conversation | None,
    conversation_id: str,
) -> Conversation:
    if conversation is None:
        raise NotFoundError(f"Conversation {conversation_id!r} not found")
    return conversation


def assert_participant(conversation: Conversation, user_id: str) -> None:
    """Raise if the user is not a member of the conversation."""
    if not conversation.has_participant(user_id):
        raise ValidationError(
            f"User {user_id!r} is not a participant of conversation {conversation.id!r}"
        )
