"""
Document service orchestrator.

Coordinates ingest (chunk, embed, upsert, register), listing, statistics,
resync and deletion for a namespace.

Dependencies: docchat.core, docchat.boundary
System role: Ingest path and document management operations
"""

import logging
import re
import time
import uuid
from collections.abc import Sequence
from pathlib import Path

from docchat.boundary.llm.embedding_client import EmbeddingClient
from docchat.boundary.pdf.pdf_loader import PdfLoader
from docchat.boundary.vdb.vector_index import VectorIndex
from docchat.boundary.vdb.vector_schemas import VectorMetadata, VectorRecord
from docchat.core.chunker import PAGE_SEPARATOR, Chunker
from docchat.core.exceptions import DocChatError, DocumentNotFoundError, ValidationError
from docchat.core.registry import DocumentRegistry
from docchat.models.document import (
    DeleteResult,
    DocumentRecord,
    DocumentStats,
    DocumentStatus,
    IngestResult,
    ResyncReport,
)

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 200
ERROR_MESSAGE_CHARS = 2048


def make_document_id(document_name: str) -> str:
    """Readable, unique id: sanitized name plus a random suffix."""
    stem = re.sub(r"[^a-zA-Z0-9]+", "_", Path(document_name).stem).strip("_")[:64]
    return f"{stem or 'document'}-{uuid.uuid4().hex[:12]}"


def make_chunk_id(document_id: str, index: int) -> str:
    """Deterministic vector id, so re-upserting a chunk overwrites it."""
    return f"{document_id}_chunk_{index}"


class DocumentService:
    """
    Document service orchestrator.

    Handles document lifecycle: ingest, listing, statistics, resync, deletion.
    """

    def __init__(
        self,
        registry: DocumentRegistry,
        chunker: Chunker,
        embedding_client: EmbeddingClient,
        vector_index: VectorIndex,
        pdf_loader: PdfLoader | None = None,
        default_namespace: str = "default",
    ) -> None:
        """
        Initialize document service.

        Args:
            registry: Document registry
            chunker: Configured chunker
            embedding_client: Embedding boundary (same model as the query path)
            vector_index: Vector index boundary
            pdf_loader: PDF text extraction (created if None)
            default_namespace: Namespace used when a caller gives none
        """
        self.registry = registry
        self.chunker = chunker
        self.embedder = embedding_client
        self.index = vector_index
        self.pdf_loader = pdf_loader or PdfLoader()
        self.default_namespace = default_namespace

    def _namespace(self, namespace: str | None) -> str:
        return namespace or self.default_namespace

    async def ingest(
        self,
        raw_text: str,
        document_name: str,
        namespace: str | None = None,
        document_id: str | None = None,
    ) -> IngestResult:
        """Ingest a single block of text, treated as one page."""
        return await self.ingest_pages(
            [raw_text], document_name, namespace=namespace, document_id=document_id
        )

    async def ingest_pages(
        self,
        pages: Sequence[str],
        document_name: str,
        namespace: str | None = None,
        document_id: str | None = None,
    ) -> IngestResult:
        """
        Ingest page texts.

        Steps:
        1. Register the document as PROCESSING
        2. Chunk with page tracking
        3. Embed all chunks in one batch
        4. Upsert vectors into the namespace
        5. Register as COMPLETED with the chunk count

        Any failure marks the record FAILED and re-raises.

        Args:
            pages: Page texts in order
            document_name: Display name
            namespace: Target namespace (default namespace if None)
            document_id: Existing id to resume an interrupted ingest

        Returns:
            IngestResult: Chunk count, page count and document id

        Raises:
            ValidationError: Blank name or no text
            EmbeddingServiceError, VectorIndexError: Propagated from the boundaries
        """
        namespace = self._namespace(namespace)
        if not document_name or not document_name.strip():
            raise ValidationError("Document name is required", field="document_name")
        text = PAGE_SEPARATOR.join(pages)
        if not text.strip():
            raise ValidationError("Document contains no text", field="text")

        resuming = document_id is not None
        document_id = document_id or make_document_id(document_name)
        started = time.perf_counter()
        logger.info(
            f"{__name__}:ingest_pages - START",
            extra={"namespace": namespace, "document_id": document_id, "pages": len(pages)},
        )

        stale = await self.registry.find_stale(namespace, self.embedder.model_id)
        if stale:
            logger.warning(
                f"{__name__}:ingest_pages - {len(stale)} document(s) indexed with another embedding model",
                extra={"namespace": namespace, "document_ids": [r.document_id for r in stale]},
            )

        record = DocumentRecord(
            document_id=document_id,
            owner_namespace=namespace,
            file_name=document_name,
            pages=len(pages),
            status=DocumentStatus.PROCESSING,
            preview=text[:PREVIEW_CHARS],
            embedding_model=self.embedder.model_id,
            total_size=len(text),
        )
        record = await self.registry.register(record)

        try:
            chunks = self.chunker.chunk_pages(pages, document_id)
            logger.info(f"{__name__}:ingest_pages - Step 1: Chunked into {len(chunks)} chunks")

            vectors = await self.embedder.embed_many([c.text for c in chunks])
            logger.info(f"{__name__}:ingest_pages - Step 2: Embedded {len(vectors)} chunks")

            if resuming:
                # Chunk counts may differ from the interrupted run.
                await self.index.delete_by_document(namespace, document_id)
            await self.index.upsert(
                namespace,
                [
                    VectorRecord(
                        id=make_chunk_id(document_id, chunk.index),
                        values=vector,
                        metadata=VectorMetadata(
                            document_id=document_id,
                            chunk_index=chunk.index,
                            page=chunk.page_number,
                            text=chunk.text,
                            namespace=namespace,
                            source=document_name,
                        ),
                    )
                    for chunk, vector in zip(chunks, vectors)
                ],
            )
            logger.info(f"{__name__}:ingest_pages - Step 3: Upserted {len(vectors)} vectors")
        except Exception as e:
            await self._mark_failed(record, e)
            raise

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        await self.registry.register(
            record.model_copy(
                update={
                    "status": DocumentStatus.COMPLETED,
                    "total_chunks": len(chunks),
                    "processing_time_ms": elapsed_ms,
                    "error_message": None,
                }
            )
        )
        logger.info(
            f"{__name__}:ingest_pages - Completed",
            extra={"document_id": document_id, "chunks": len(chunks), "elapsed_ms": elapsed_ms},
        )
        return IngestResult(
            document_id=document_id,
            chunk_count=len(chunks),
            pages=len(pages),
            namespace=namespace,
            processing_time_ms=elapsed_ms,
        )

    async def _mark_failed(self, record: DocumentRecord, error: Exception) -> None:
        try:
            await self.registry.register(
                record.model_copy(
                    update={
                        "status": DocumentStatus.FAILED,
                        "error_message": str(error)[:ERROR_MESSAGE_CHARS],
                    }
                )
            )
        except DocChatError:
            logger.exception(f"{__name__}:_mark_failed - Could not record failure")

    async def ingest_pdf(
        self,
        file_path: str | Path,
        document_name: str | None = None,
        namespace: str | None = None,
    ) -> IngestResult:
        """
        Extract a PDF's pages and ingest them.

        Raises:
            ParsingError: Missing file, non-PDF, or no extractable text
        """
        pages = await self.pdf_loader.aload_pages(file_path)
        return await self.ingest_pages(
            pages,
            document_name or Path(file_path).name,
            namespace=namespace,
        )

    async def list_documents(
        self,
        namespace: str | None = None,
        status: DocumentStatus | None = None,
        sync: bool = False,
    ) -> list[DocumentRecord]:
        """List records, newest first; with sync, run a (non-forced) resync first."""
        namespace = self._namespace(namespace)
        if sync:
            await self.registry.resync(namespace)
        return await self.registry.list(namespace, status=status)

    async def get_document(self, document_id: str, namespace: str | None = None) -> DocumentRecord:
        return await self.registry.get(self._namespace(namespace), document_id)

    async def stats(self, namespace: str | None = None) -> DocumentStats:
        return await self.registry.stats(self._namespace(namespace))

    async def stale_documents(self, namespace: str | None = None) -> list[DocumentRecord]:
        """Completed documents indexed with a different embedding model than the current one."""
        return await self.registry.find_stale(self._namespace(namespace), self.embedder.model_id)

    async def resync(self, namespace: str | None = None, force: bool = False) -> ResyncReport:
        return await self.registry.resync(self._namespace(namespace), force=force)

    async def delete_document(self, document_id: str, namespace: str | None = None) -> DeleteResult:
        """
        Delete one document: registry record first, then its vectors.

        Raises:
            DocumentNotFoundError: When unknown or owned by another namespace
        """
        namespace = self._namespace(namespace)
        try:
            result = await self.registry.delete(document_id, namespace)
        except DocumentNotFoundError:
            logger.info(
                f"{__name__}:delete_document - Not found",
                extra={"namespace": namespace, "document_id": document_id},
            )
            raise
        # Next read reloads from the store and the next resync is not skipped.
        self.registry.invalidate(namespace)
        return result

    async def delete_all_documents(self, namespace: str | None = None) -> DeleteResult:
        namespace = self._namespace(namespace)
        result = await self.registry.delete_all(namespace)
        self.registry.invalidate(namespace)
        return result
