"""
Domain models and API schemas.

Dependencies: pydantic
"""

from docchat.models.chat import AskResult, ConversationRole, ConversationTurn, RetrievedMatch
from docchat.models.chunk import Chunk
from docchat.models.context import AssembledContext
from docchat.models.document import (
    DeleteResult,
    DocumentRecord,
    DocumentStats,
    DocumentStatus,
    IngestResult,
    ResyncReport,
)

__all__ = [
    "AskResult",
    "AssembledContext",
    "Chunk",
    "ConversationRole",
    "ConversationTurn",
    "DeleteResult",
    "DocumentRecord",
    "DocumentStats",
    "DocumentStatus",
    "IngestResult",
    "ResyncReport",
    "RetrievedMatch",
]
