"""
Document registry domain models and schemas.

Dependencies: pydantic
System role: Registry records, aggregate statistics, and operation results
"""

import enum
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DocumentStatus(str, enum.Enum):
    """
    Document processing lifecycle states.

    PROCESSING: Chunking and embedding in progress
    COMPLETED: Vectors stored, document is retrievable
    FAILED: Ingest aborted; error_message holds details
    """

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DocumentRecord(BaseModel):
    """One uploaded document as known to the registry."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    document_id: str = Field(description="Registry key, also stamped on every vector")
    owner_namespace: str = Field(description="Isolation namespace of the owner")
    file_name: str = Field(description="Display name of the document")
    total_chunks: int = Field(default=0, ge=0, description="Vectors stored for this document")
    pages: int = Field(default=0, ge=0, description="Number of pages ingested")
    status: DocumentStatus = Field(default=DocumentStatus.PROCESSING)
    uploaded_at: datetime = Field(default_factory=utc_now)
    preview: str | None = Field(default=None, description="Leading text of the document")

    embedding_model: str | None = Field(default=None, description="Model that produced the vectors")
    total_size: int = Field(default=0, ge=0, description="Characters ingested")
    processing_time_ms: int | None = Field(default=None)
    error_message: str | None = Field(default=None)

    @field_validator("uploaded_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # SQLite drops tzinfo on round trip.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class DocumentStats(BaseModel):
    """Aggregate view over a namespace's documents."""

    total_documents: int = 0
    total_chunks: int = 0
    total_pages: int = 0
    average_chunks_per_document: float = 0.0

    @classmethod
    def from_records(cls, records: list[DocumentRecord]) -> "DocumentStats":
        """Aggregate counts; the average is rounded to one decimal."""
        total_documents = len(records)
        total_chunks = sum(r.total_chunks for r in records)
        return cls(
            total_documents=total_documents,
            total_chunks=total_chunks,
            total_pages=sum(r.pages for r in records),
            average_chunks_per_document=(
                round(total_chunks / total_documents, 1) if total_documents else 0.0
            ),
        )


class IngestResult(BaseModel):
    """Outcome of a successful ingest."""

    document_id: str
    chunk_count: int
    pages: int
    namespace: str
    processing_time_ms: int


class DeleteResult(BaseModel):
    """
    Outcome of a delete.

    vectors_deleted is False when the registry deletion succeeded but the
    vector index deletion failed, leaving orphaned vectors behind.
    """

    namespace: str
    document_ids: list[str] = Field(default_factory=list)
    vectors_deleted: bool = True
    error: str | None = None


class ResyncReport(BaseModel):
    """What a resync changed."""

    namespace: str
    skipped: bool = False
    removed: list[str] = Field(default_factory=list, description="Records dropped: no vectors left")
    updated: list[str] = Field(default_factory=list, description="Records whose chunk count was corrected")
    orphans: list[str] = Field(default_factory=list, description="Document ids with vectors but no record")
    purged_orphans: bool = False
    synced_at: datetime | None = None
