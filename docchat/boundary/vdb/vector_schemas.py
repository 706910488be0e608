"""
Vector index schemas.

Pydantic models for records written to and matches read from the vector index.

Dependencies: pydantic
System role: Type definitions for vector operations
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class VectorMetadata(BaseModel):
    """
    Metadata attached to each vector.

    document_id and namespace are the keys used for deletion, listing and
    isolation. text holds the chunk so matches can be rendered without a
    second lookup.
    """

    document_id: str = Field(description="Owning document; target of deleteByDocument")
    chunk_index: int = Field(ge=0, description="Chunk position within the document")
    page: int = Field(default=0, ge=0, description="Page number in source document")
    text: str = Field(default="", description="Chunk text")
    namespace: str = Field(description="Isolation namespace")
    source: str = Field(default="", description="Display name of the source document")


class VectorRecord(BaseModel):
    """Write-once vector record; replaced whole on re-upsert."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Deterministic chunk identifier")
    values: list[float] = Field(description="Embedding vector")
    metadata: VectorMetadata


class VectorMatch(BaseModel):
    """Raw similarity search hit; missing fields are defaulted by the retriever."""

    id: str
    score: float | None = Field(default=None, description="Similarity (0.0-1.0) when the backend reports one")
    metadata: dict[str, Any] = Field(default_factory=dict)
