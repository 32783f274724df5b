"""Derive conversation threads from flat interaction and message rows."""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional


@dataclass(frozen=True)
class ConversationKey:
    """Stable identity of a thread as seen by one acting user."""

    counterpart_id: Optional[int]
    project_id: Optional[int] = None

    def __str__(self) -> str:
        if self.project_id is not None:
            return f"{self.project_id}-{self.counterpart_id}"
        return f"user-{self.counterpart_id}"


@dataclass
class Conversation:
    key: ConversationKey
    header: Dict[str, Any]
    messages: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict:
        payload = dict(self.header)
        payload["id"] = str(self.key)
        payload["messages"] = self.messages
        return payload


def group_conversations(
    rows: Iterable[Any],
    key_of: Callable[[Any], ConversationKey],
    header_of: Callable[[Any], Dict[str, Any]],
    project_row: Callable[[Any], Dict[str, Any]],
) -> List[Conversation]:
    """
    Group rows into conversations in first-seen order.

    Rows are not re-sorted: each conversation keeps its rows in input order,
    so callers pass rows already ordered the way threads should read.
    """
    conversations: Dict[ConversationKey, Conversation] = {}
    for row in rows:
        key = key_of(row)
        conversation = conversations.get(key)
        if conversation is None:
            conversation = Conversation(key=key, header=header_of(row))
            conversations[key] = conversation
        conversation.messages.append(project_row(row))
    return list(conversations.values())


def interaction_key(interaction) -> ConversationKey:
    return ConversationKey(counterpart_id=interaction.project.graduate_id, project_id=interaction.project_id)


def message_key_for(user_id: int) -> Callable[[Any], ConversationKey]:
    def key_of(message) -> ConversationKey:
        other_id = message.recipient_id if message.sender_id == user_id else message.sender_id
        return ConversationKey(counterpart_id=other_id)

    return key_of
