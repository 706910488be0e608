"""
Conversation history validation.

Normalizes raw chat history into what the language model accepts: no empty
turns, only user/assistant roles, and a sequence that starts with a user turn.

Dependencies: docchat.models.chat
System role: History normalization before generation
"""

import logging
from collections.abc import Iterable

from docchat.models.chat import ConversationRole, ConversationTurn

logger = logging.getLogger(__name__)


def normalize_role(role: str) -> str:
    """Map any role to 'user' or 'assistant'."""
    if role.strip().lower() == ConversationRole.USER.value:
        return ConversationRole.USER.value
    return ConversationRole.ASSISTANT.value


def validate_history(
    history: Iterable[ConversationTurn],
    window: int | None = None,
) -> list[ConversationTurn]:
    """
    Validate raw history.

    Steps, in order: drop turns with blank content, map roles, keep the last
    `window` turns, then drop leading non-user turns.

    Args:
        history: Raw turns, oldest first
        window: Maximum number of turns to keep; None keeps all

    Returns:
        list[ConversationTurn]: Empty or starting with a user turn
    """
    turns = [
        ConversationTurn(role=normalize_role(turn.role), content=turn.content)
        for turn in history
        if turn.content and turn.content.strip()
    ]
    if window is not None:
        turns = turns[-window:] if window > 0 else []

    start = 0
    while start < len(turns) and turns[start].role != ConversationRole.USER.value:
        start += 1
    if start:
        logger.debug(f"{__name__}:validate_history - Dropped {start} leading non-user turn(s)")
    return turns[start:]


def format_history(history: Iterable[ConversationTurn]) -> str:
    """Render non-blank turns as "User: ..." / "Assistant: ..." lines in original order."""
    return "\n".join(
        f"{'User' if normalize_role(turn.role) == ConversationRole.USER.value else 'Assistant'}: {turn.content}"
        for turn in history
        if turn.content and turn.content.strip()
    )
