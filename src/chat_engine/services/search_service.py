from __future__ import annotations

from typing import Iterable

from chat_engine.application.dto.conversation import ConversationSummary
from chat_engine.domain.value_objects.enums import ConversationCategory, ConversationKind


def matches(
    summary: ConversationSummary,
    query: str,
    category: ConversationCategory,
) -> bool:
    if query and query.casefold() not in summary.display_name.casefold():
        return False
    if category == ConversationCategory.UNREAD:
        return summary.unread_count > 0
    if category == ConversationCategory.GROUPS:
        return summary.kind == ConversationKind.GROUP
    return True


def filter_conversations(
    summaries: Iterable[ConversationSummary],
    query: str = "",
    category: ConversationCategory = ConversationCategory.ALL,
) -> tuple[ConversationSummary, ...]:
    """Order-preserving subsequence of the conversation list.

    An empty result is a normal outcome; empty-state presentation belongs to the caller.
    """
    return tuple(s for s in summaries if matches(s, query, category))
