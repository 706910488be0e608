"""
HTTP request/response schemas.

Dependencies: pydantic, docchat.models
System role: API contracts for the documents and chat routers
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from docchat.models.chat import ConversationTurn, RetrievedMatch
from docchat.models.document import DocumentRecord, DocumentStats


class IngestRequest(BaseModel):
    """Request schema for document ingestion. Exactly one of text or pages."""

    model_config = ConfigDict(populate_by_name=True)

    text: str | None = Field(default=None, description="Extracted document text")
    pages: list[str] | None = Field(default=None, description="Extracted text, one entry per page")
    document_name: str = Field(alias="documentName", min_length=1)
    namespace: str | None = Field(default=None)

    @model_validator(mode="after")
    def _text_or_pages(self) -> "IngestRequest":
        if (self.text is None) == (self.pages is None):
            raise ValueError("Provide exactly one of 'text' or 'pages'")
        return self


class IngestResponse(BaseModel):
    """Response schema for document ingestion."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    document_id: str = Field(alias="documentId")
    chunk_count: int = Field(alias="chunkCount")
    pages: int
    namespace: str


class DocumentListResponse(BaseModel):
    """Response schema for document listing."""

    success: bool = True
    namespace: str
    documents: list[DocumentRecord]
    stats: DocumentStats | None = None


class SyncRequest(BaseModel):
    """Request schema for an explicit registry resync."""

    namespace: str | None = None
    force: bool = False


class DeleteResponse(BaseModel):
    """Response schema for deletions."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    namespace: str
    document_ids: list[str] = Field(alias="documentIds")
    vectors_deleted: bool = Field(alias="vectorsDeleted")
    warning: str | None = None


class ChatRequest(BaseModel):
    """Request schema for chat messages."""

    message: str = Field(min_length=1, description="User question or message")
    namespace: str | None = Field(default=None)
    history: list[ConversationTurn] = Field(default_factory=list)


class ChatResponse(BaseModel):
    """Response schema for chat messages."""

    success: bool = True
    answer: str
    matches: list[RetrievedMatch]
