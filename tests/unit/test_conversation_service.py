from __future__ import annotations

from datetime import timedelta

import pytest

from chat_engine.application.dto.conversation import PreviewPolicy
from chat_engine.application.exceptions import NotFoundError, ValidationError
from chat_engine.domain.entities.conversation import Conversation
from chat_engine.domain.value_objects.enums import ConversationKind, Presence
from chat_engine.services import conversation_service, message_service
from tests.conftest import LOCAL, NOW, make_conversation, make_message, make_user


def test_upsert_then_last_message_is_none(uow):
    conv = make_conversation("c-emma", "emma")

    conversation_service.upsert_conversation(conv, LOCAL, uow)

    assert conversation_service.last_message("c-emma", uow) is None


def test_upsert_replaces_by_id_and_keeps_position(uow):
    renamed = make_conversation(
        "c-design", "sarah", kind=ConversationKind.GROUP, name="Designers",
    )

    conversation_service.upsert_conversation(renamed, LOCAL, uow)

    ids = [c.id for c in uow.conversations.list_all()]
    assert ids == ["c-sarah", "c-mike", "c-design"]
    assert uow.conversations.get_by_id("c-design").name == "Designers"


def test_upsert_keeps_unread_and_typing_of_existing_conversation(uow):
    for sender in ("sarah", "mike"):
        message_service.append_message(make_message("c-design", sender), LOCAL, uow)
    conversation_service.set_typing("c-design", "emma", uow)

    renamed = make_conversation(
        "c-design", "sarah", "mike", "emma", kind=ConversationKind.GROUP, name="Designers",
    )
    after = conversation_service.upsert_conversation(renamed, LOCAL, uow)

    assert after.name == "Designers"
    assert after.unread_count == 2
    assert after.typing_user_id == "emma"
    assert uow.conversations.get_by_id("c-design").unread_count == 2


def test_upsert_clears_typing_of_removed_participant(uow):
    conversation_service.set_typing("c-design", "emma", uow)

    shrunk = make_conversation(
        "c-design", "sarah", "mike", kind=ConversationKind.GROUP, name="Design Team",
    )
    after = conversation_service.upsert_conversation(shrunk, LOCAL, uow)

    assert after.typing_user_id is None


@pytest.mark.parametrize(
    "conversation",
    [
        Conversation("x", ConversationKind.DIRECT, (LOCAL,)),
        Conversation("x", ConversationKind.DIRECT, (LOCAL, "sarah", "mike")),
        Conversation("x", ConversationKind.DIRECT, ("sarah", "mike")),
        Conversation("x", ConversationKind.GROUP, (LOCAL, "sarah")),
        Conversation("x", ConversationKind.GROUP, (LOCAL, "sarah"), name="  "),
        Conversation("x", ConversationKind.DIRECT, (LOCAL, "ghost")),
        Conversation("x", ConversationKind.DIRECT, (LOCAL, LOCAL)),
        Conversation("x", ConversationKind.DIRECT, (LOCAL, "sarah"), unread_count=-1),
        Conversation("x", ConversationKind.DIRECT, (LOCAL, "sarah"), typing_user_id="mike"),
    ],
)
def test_upsert_rejects_broken_invariants(uow, conversation):
    with pytest.raises(ValidationError):
        conversation_service.upsert_conversation(conversation, LOCAL, uow)

    assert uow.conversations.get_by_id("x") is None


def test_mark_read_resets_any_count(uow):
    for _ in range(7):
        message_service.append_message(make_message("c-sarah", "sarah"), LOCAL, uow)

    conv = conversation_service.mark_read("c-sarah", uow)

    assert conv.unread_count == 0
    message_service.append_message(make_message("c-sarah", "sarah"), LOCAL, uow)
    assert uow.conversations.get_by_id("c-sarah").unread_count == 1


def test_mark_read_unknown_conversation(uow):
    with pytest.raises(NotFoundError):
        conversation_service.mark_read("nope", uow)


def test_set_typing_and_clear(uow):
    conv = conversation_service.set_typing("c-sarah", "sarah", uow)
    assert conv.is_typing is True
    assert conv.typing_user_id == "sarah"

    conv = conversation_service.set_typing("c-sarah", None, uow)
    assert conv.is_typing is False
    assert conv.typing_user_id is None


def test_last_message_is_latest_by_timestamp(uow):
    message_service.append_message(
        make_message("c-sarah", "sarah", content="new", created_at=NOW), LOCAL, uow,
    )
    message_service.append_message(
        make_message("c-sarah", LOCAL, content="old", created_at=NOW - timedelta(hours=1)),
        LOCAL, uow,
    )

    assert conversation_service.last_message("c-sarah", uow).content == "new"


def test_list_orders_by_last_message_then_creation(uow):
    conversation_service.upsert_conversation(make_conversation("c-emma", "emma"), LOCAL, uow)
    message_service.append_message(
        make_message("c-mike", "mike", created_at=NOW - timedelta(hours=2)), LOCAL, uow,
    )
    message_service.append_message(
        make_message("c-design", "emma", created_at=NOW), LOCAL, uow,
    )

    ids = [c.id for c in conversation_service.list_conversations(uow)]

    assert ids == ["c-design", "c-mike", "c-sarah", "c-emma"]


def test_list_breaks_timestamp_ties_by_id(uow):
    message_service.append_message(make_message("c-sarah", "sarah", created_at=NOW), LOCAL, uow)
    message_service.append_message(make_message("c-mike", "mike", created_at=NOW), LOCAL, uow)

    ids = [c.id for c in conversation_service.list_conversations(uow)]

    assert ids[:2] == ["c-mike", "c-sarah"]


def test_display_name_resolution(uow):
    direct = uow.conversations.get_by_id("c-sarah")
    group = uow.conversations.get_by_id("c-design")

    assert conversation_service.display_name(direct, LOCAL, uow) == "Sarah Wilson"
    assert conversation_service.display_name(group, LOCAL, uow) == "Design Team"


@pytest.mark.parametrize(
    "count, badge",
    [(0, None), (1, "1"), (99, "99"), (100, "99+"), (250, "99+")],
)
def test_unread_badge(count, badge):
    assert conversation_service.unread_badge(count) == badge


def test_summary_preview_states(uow):
    conv = uow.conversations.get_by_id("c-sarah")
    summary = conversation_service.summarize(conv, LOCAL, uow)
    assert summary.preview == "No messages yet"
    assert summary.last_message_at is None
    assert summary.peer_presence == Presence.ONLINE

    message_service.append_message(
        make_message("c-sarah", "sarah", content="Are we still meeting?"), LOCAL, uow,
    )
    conv = uow.conversations.get_by_id("c-sarah")
    summary = conversation_service.summarize(conv, LOCAL, uow)
    assert summary.preview == "Are we still meeting?"
    assert summary.unread_badge == "1"

    conv = conversation_service.set_typing("c-sarah", "sarah", uow)
    summary = conversation_service.summarize(conv, LOCAL, uow, PreviewPolicy(typing_text="…"))
    assert summary.preview == "…"


def test_summary_of_group(uow):
    conv = uow.conversations.get_by_id("c-design")

    summary = conversation_service.summarize(conv, LOCAL, uow)

    assert summary.display_name == "Design Team"
    assert summary.member_count == 4
    assert summary.peer_presence is None


def test_display_name_for_newly_added_peer(uow):
    uow.users_w.put(make_user("zoe", "Zoe"))
    conversation_service.upsert_conversation(make_conversation("c-zoe", "zoe"), LOCAL, uow)

    conv = uow.conversations.get_by_id("c-zoe")
    assert conversation_service.display_name(conv, LOCAL, uow) == "Zoe"
