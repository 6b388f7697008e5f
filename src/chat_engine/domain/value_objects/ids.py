from __future__ import annotations

import uuid
from typing import NewType

ConversationId = NewType("ConversationId", str)
MessageId = NewType("MessageId", str)
UserId = NewType("UserId", str)


def new_message_id() -> MessageId:
    """Provisional id handed back for optimistic local echo."""
    return MessageId(uuid.uuid4().hex)
