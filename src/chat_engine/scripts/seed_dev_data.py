"""Seed development data: a demo roster of users, conversations and messages."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta

from chat_engine.config import settings
from chat_engine.domain.entities.conversation import Conversation
from chat_engine.domain.entities.message import Message
from chat_engine.domain.entities.user import User
from chat_engine.domain.value_objects.enums import (
    ConversationKind,
    MessageStatus,
    Presence,
)
from chat_engine.engine import ChatEngine

logger = logging.getLogger(__name__)

_AVATAR = "https://api.dicebear.com/7.x/avataaars/svg?seed={}"


def demo_roster(
    local_user_id: str,
    now: datetime,
) -> tuple[list[User], list[Conversation], list[Message]]:
    users = [
        User(local_user_id, "You", _AVATAR.format("you"), Presence.ONLINE, bio="Available"),
        User("sarah", "Sarah Wilson", _AVATAR.format("sarah"), Presence.ONLINE,
             bio="Hey there! I am using ChatApp"),
        User("mike", "Mike Chen", _AVATAR.format("mike"), Presence.OFFLINE,
             last_seen=now - timedelta(hours=1)),
        User("emma", "Emma Davis", _AVATAR.format("emma"), Presence.ONLINE),
        User("alex", "Alex Johnson", _AVATAR.format("alex"), Presence.AWAY),
    ]
    conversations = [
        Conversation(
            "c-sarah", ConversationKind.DIRECT, (local_user_id, "sarah"),
            unread_count=2, typing_user_id="sarah",
        ),
        Conversation("c-mike", ConversationKind.DIRECT, (local_user_id, "mike")),
        Conversation("c-emma", ConversationKind.DIRECT, (local_user_id, "emma"), unread_count=5),
        Conversation(
            "c-design",
            ConversationKind.GROUP,
            (local_user_id, "sarah", "mike", "emma", "alex"),
            name="Design Team",
            avatar_ref="https://api.dicebear.com/7.x/identicon/svg?seed=design",
            unread_count=12,
        ),
    ]

    def msg(mid: str, cid: str, sender: str, content: str, ago: timedelta,
            status: MessageStatus = MessageStatus.READ, **kw) -> Message:
        return Message(mid, cid, sender, content, now - ago, status=status, **kw)

    me = local_user_id
    messages = [
        msg("1", "c-sarah", "sarah", "Hey! How are you doing?", timedelta(seconds=7200)),
        msg("2", "c-sarah", me, "I am doing great, thanks! Just finished the new design 🎨",
            timedelta(seconds=7100)),
        msg("3", "c-sarah", "sarah", "That sounds amazing! Can you share it?", timedelta(seconds=7000)),
        msg("4", "c-sarah", me, "Sure! Let me send you the Figma link", timedelta(seconds=6900)),
        msg("5", "c-sarah", me, "Here it is: figma.com/file/xyz123", timedelta(seconds=6800),
            MessageStatus.DELIVERED),
        msg("6", "c-sarah", "sarah", "This looks incredible! I love the color scheme 💚",
            timedelta(seconds=3600), reactions=("❤️", "🔥")),
        msg("7", "c-sarah", me, "Thanks! The teal really makes it pop", timedelta(seconds=3500)),
        msg("8", "c-sarah", "sarah", "Are we still meeting tomorrow at 3?", timedelta(seconds=1800)),
        msg("m1", "c-mike", "mike", "See you tomorrow!", timedelta(days=1)),
        msg("m2", "c-emma", "emma", "The project is almost done 🚀", timedelta(days=2)),
        msg("m3", "c-design", "alex", "Great work everyone!", timedelta(days=3)),
    ]
    return users, conversations, messages


def seed(engine: ChatEngine) -> None:
    users, conversations, messages = demo_roster(engine.local_user_id, engine.clock.now())
    engine.on_roster_loaded(users, conversations, messages)
    logger.info("Seeded %d conversations with %d messages", len(conversations), len(messages))


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    engine = ChatEngine(settings.LOCAL_USER_ID, tz=settings.viewer_tz)
    seed(engine)
    for summary in engine.conversation_list():
        logger.info(
            "%-14s %-4s %s",
            summary.display_name, summary.unread_badge or "", summary.preview,
        )


if __name__ == "__main__":
    main()
