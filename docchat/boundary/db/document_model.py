"""
Document ORM model.

Persists registry records: one row per uploaded document, scoped by namespace.

Dependencies: sqlalchemy, docchat.boundary.db.base
System role: Document metadata persistence for the registry
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from docchat.boundary.db.base import Base, TimestampMixin
from docchat.models.document import DocumentStatus


class DocumentModel(Base, TimestampMixin):
    """
    Registry row.

    Lifecycle: ingest starts (PROCESSING) → vectors stored (COMPLETED) or
    ingest aborted (FAILED). Deleted on explicit delete or bulk clear.
    """

    __tablename__ = "documents"

    document_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    owner_namespace: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False, doc="Display filename")
    total_chunks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pages: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[DocumentStatus] = mapped_column(
        Enum(DocumentStatus, native_enum=False),
        nullable=False,
        default=DocumentStatus.PROCESSING,
    )
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    preview: Mapped[str | None] = mapped_column(Text, nullable=True)
    embedding_model: Mapped[str | None] = mapped_column(String(255), nullable=True)
    total_size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    processing_time_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    error_message: Mapped[str | None] = mapped_column(
        String(2048),
        nullable=True,
        doc="Error details if ingest failed",
    )
