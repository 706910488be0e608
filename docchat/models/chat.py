"""
Chat domain models and schemas.

Conversation turns, retrieved matches and the result of a question.

Dependencies: pydantic
System role: Query path contracts
"""

import enum

from pydantic import BaseModel, Field

from docchat.models.context import AssembledContext


class ConversationRole(str, enum.Enum):
    """The two roles the language model accepts."""

    USER = "user"
    ASSISTANT = "assistant"


class ConversationTurn(BaseModel):
    """Single prior message of the chat history."""

    role: str = Field(description="Message role: 'user' or 'assistant'")
    content: str = Field(default="", description="Message content")


class RetrievedMatch(BaseModel):
    """Chunk returned by similarity search for one query."""

    id: str = Field(description="Vector record id")
    score: float = Field(default=0.0, ge=0.0, le=1.0, description="Similarity score (0.0-1.0)")
    text: str = Field(default="", description="Chunk text")
    source: str = Field(default="unknown", description="Display name of the source document")
    page: int = Field(default=0, ge=0, description="Page of the chunk (0 when unknown)")
    document_id: str | None = Field(default=None)


class AskResult(BaseModel):
    """Answer to a question plus the chunks and context it was grounded on."""

    answer: str
    matches: list[RetrievedMatch] = Field(default_factory=list)
    context: AssembledContext | None = None
