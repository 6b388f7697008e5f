from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chat_engine.application.dto.conversation import ConversationSummary


@dataclass(frozen=True, slots=True)
class ConversationListChanged:
    conversations: tuple[ConversationSummary, ...]
