from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from chat_engine.application.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from chat_engine.domain.value_objects.enums import MessageKind, MessageStatus
from chat_engine.services import message_service
from tests.conftest import LOCAL, NOW, make_message


def test_append_stores_message_as_sent(uow):
    incoming = make_message("c-sarah", "sarah", status=MessageStatus.READ)

    msg, created = message_service.append_message(incoming, LOCAL, uow)

    assert created is True
    assert msg.status == MessageStatus.SENT
    assert uow.messages.get_by_id(msg.id) == msg
    assert uow.version == 1


def test_append_remote_message_increments_unread(uow):
    for _ in range(3):
        message_service.append_message(make_message("c-sarah", "sarah"), LOCAL, uow)

    assert uow.conversations.get_by_id("c-sarah").unread_count == 3


def test_append_local_message_does_not_touch_unread(uow):
    message_service.append_message(make_message("c-sarah", LOCAL), LOCAL, uow)

    assert uow.conversations.get_by_id("c-sarah").unread_count == 0


def test_append_duplicate_id_is_idempotent(uow):
    first = make_message("c-sarah", "sarah", message_id="dup")
    message_service.append_message(first, LOCAL, uow)

    again, created = message_service.append_message(
        make_message("c-sarah", "sarah", message_id="dup", content="other"), LOCAL, uow,
    )

    assert created is False
    assert again.content == "hello"
    assert uow.conversations.get_by_id("c-sarah").unread_count == 1
    assert uow.version == 1


def test_append_id_collision_across_conversations_is_conflict(uow):
    message_service.append_message(make_message("c-sarah", "sarah", message_id="x1"), LOCAL, uow)

    with pytest.raises(ConflictError):
        message_service.append_message(make_message("c-mike", "mike", message_id="x1"), LOCAL, uow)

    assert uow.messages.get_by_id("x1").conversation_id == "c-sarah"
    assert list(uow.messages.list_messages("c-mike")) == []
    assert uow.conversations.get_by_id("c-mike").unread_count == 0
    assert uow.version == 1


def test_append_id_collision_with_other_sender_is_conflict(uow):
    message_service.append_message(make_message("c-design", "sarah", message_id="x2"), LOCAL, uow)

    with pytest.raises(ConflictError):
        message_service.append_message(make_message("c-design", "emma", message_id="x2"), LOCAL, uow)


@pytest.mark.parametrize("content", ["", "   ", "\n\t"])
def test_append_rejects_blank_content(uow, content):
    with pytest.raises(ValidationError):
        message_service.append_message(make_message("c-sarah", "sarah", content=content), LOCAL, uow)

    assert list(uow.messages.list_messages("c-sarah")) == []
    assert uow.conversations.get_by_id("c-sarah").unread_count == 0


def test_append_rejects_non_participant_sender(uow):
    with pytest.raises(ValidationError):
        message_service.append_message(make_message("c-sarah", "mike"), LOCAL, uow)

    assert uow.version == 0


def test_append_rejects_unknown_conversation(uow):
    with pytest.raises(NotFoundError):
        message_service.append_message(make_message("nope", "sarah"), LOCAL, uow)


def test_append_rejects_naive_timestamp(uow):
    naive = datetime(2024, 1, 1, 12, 0)
    with pytest.raises(ValidationError):
        message_service.append_message(make_message("c-sarah", "sarah", created_at=naive), LOCAL, uow)


def test_append_rejects_reply_to_other_conversation(uow):
    other, _ = message_service.append_message(make_message("c-mike", "mike"), LOCAL, uow)

    with pytest.raises(ValidationError):
        message_service.append_message(
            make_message("c-sarah", "sarah", reply_to_id=other.id), LOCAL, uow,
        )


def test_messages_for_orders_by_timestamp_then_insertion(uow):
    later = make_message("c-sarah", "sarah", content="later", created_at=NOW + timedelta(minutes=5))
    a = make_message("c-sarah", "sarah", content="a", created_at=NOW)
    b = make_message("c-sarah", LOCAL, content="b", created_at=NOW)
    earlier = make_message("c-sarah", LOCAL, content="earlier", created_at=NOW - timedelta(minutes=5))
    c = make_message("c-sarah", "sarah", content="c", created_at=NOW)

    for m in (later, a, b, earlier, c):
        message_service.append_message(m, LOCAL, uow)

    contents = [m.content for m in message_service.messages_for("c-sarah", uow)]
    assert contents == ["earlier", "a", "b", "c", "later"]


def test_messages_for_is_restartable_and_sees_new_messages(uow):
    message_service.append_message(make_message("c-sarah", "sarah", content="one"), LOCAL, uow)
    seq = message_service.messages_for("c-sarah", uow)

    assert [m.content for m in seq] == ["one"]
    assert [m.content for m in seq] == ["one"]

    message_service.append_message(
        make_message("c-sarah", "sarah", content="two", created_at=NOW + timedelta(seconds=1)),
        LOCAL, uow,
    )
    assert [m.content for m in seq] == ["one", "two"]


def test_messages_for_unknown_conversation(uow):
    with pytest.raises(NotFoundError):
        message_service.messages_for("nope", uow)


def test_status_moves_forward(uow):
    msg, _ = message_service.append_message(make_message("c-sarah", LOCAL), LOCAL, uow)

    msg = message_service.advance_status(msg.id, MessageStatus.DELIVERED, uow)
    assert msg.status == MessageStatus.DELIVERED

    msg = message_service.advance_status(msg.id, MessageStatus.READ, uow)
    assert msg.status == MessageStatus.READ
    assert uow.messages.get_by_id(msg.id).status == MessageStatus.READ


def test_status_may_skip_delivered(uow):
    msg, _ = message_service.append_message(make_message("c-sarah", LOCAL), LOCAL, uow)

    assert message_service.advance_status(msg.id, MessageStatus.READ, uow).status == MessageStatus.READ


@pytest.mark.parametrize("backwards", [MessageStatus.SENT, MessageStatus.DELIVERED])
def test_status_never_regresses_from_read(uow, backwards):
    msg, _ = message_service.append_message(make_message("c-sarah", LOCAL), LOCAL, uow)
    message_service.advance_status(msg.id, MessageStatus.READ, uow)

    with pytest.raises(InvalidTransitionError):
        message_service.advance_status(msg.id, backwards, uow)

    assert uow.messages.get_by_id(msg.id).status == MessageStatus.READ


def test_same_status_is_silent_noop(uow):
    msg, _ = message_service.append_message(make_message("c-sarah", LOCAL), LOCAL, uow)
    message_service.advance_status(msg.id, MessageStatus.DELIVERED, uow)
    version = uow.version

    result = message_service.advance_status(msg.id, MessageStatus.DELIVERED, uow)

    assert result.status == MessageStatus.DELIVERED
    assert uow.version == version


def test_advance_status_unknown_message(uow):
    with pytest.raises(NotFoundError):
        message_service.advance_status("missing", MessageStatus.READ, uow)


def test_reactions_keep_arrival_order_and_duplicates(uow):
    msg, _ = message_service.append_message(make_message("c-sarah", "sarah"), LOCAL, uow)

    for r in ("🔥", "❤️", "🔥"):
        msg = message_service.add_reaction(msg.id, r, uow)

    assert msg.reactions == ("🔥", "❤️", "🔥")


def test_reaction_validation(uow):
    msg, _ = message_service.append_message(make_message("c-sarah", "sarah"), LOCAL, uow)

    with pytest.raises(ValidationError):
        message_service.add_reaction(msg.id, " ", uow)
    with pytest.raises(ValidationError):
        message_service.add_reaction(msg.id, "x" * 20, uow, max_length=16)
    with pytest.raises(NotFoundError):
        message_service.add_reaction("missing", "👍", uow)


def test_send_local_message_returns_provisional_message(uow, clock):
    msg = message_service.send_local_message(
        "c-sarah", "on my way", MessageKind.TEXT, LOCAL, uow, clock,
    )

    assert msg.sender_id == LOCAL
    assert msg.created_at == NOW
    assert msg.status == MessageStatus.SENT
    assert uow.messages.get_by_id(msg.id) is msg
    assert uow.conversations.get_by_id("c-sarah").unread_count == 0


def test_seed_message_keeps_status_and_unread(uow):
    msg = message_service.seed_message(
        make_message("c-sarah", "sarah", status=MessageStatus.READ), uow,
    )
    uow.commit()

    assert msg.status == MessageStatus.READ
    assert uow.conversations.get_by_id("c-sarah").unread_count == 0
