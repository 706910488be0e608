"""
Document API endpoints.

Routes:
- POST   /documents                 - Ingest extracted text
- POST   /documents/upload          - Upload a PDF (multipart) and ingest it
- GET    /documents                 - List documents (optional stats, optional resync first)
- GET    /documents/stale           - Documents indexed with another embedding model
- GET    /documents/{document_id}   - Get one document
- POST   /documents/sync            - Reconcile registry with the vector index
- DELETE /documents/{document_id}   - Delete one document and its vectors
- DELETE /documents                 - Delete every document of a namespace

Dependencies: docchat.application.services.document_service
System role: Document management HTTP API
"""

import logging
import shutil
import tempfile
from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from docchat.api.deps import get_document_service
from docchat.application.services.document_service import DocumentService
from docchat.core.exceptions import ValidationError
from docchat.models.document import (
    DeleteResult,
    DocumentRecord,
    DocumentStatus,
    IngestResult,
    ResyncReport,
)
from docchat.models.requests import (
    DeleteResponse,
    DocumentListResponse,
    IngestRequest,
    IngestResponse,
    SyncRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])

ALLOWED_EXTENSIONS = {".pdf"}
MAX_FILE_SIZE = 25 * 1024 * 1024  # 25MB


def _ingest_response(result: IngestResult) -> IngestResponse:
    return IngestResponse(
        document_id=result.document_id,
        chunk_count=result.chunk_count,
        pages=result.pages,
        namespace=result.namespace,
    )


def _delete_response(result: DeleteResult) -> DeleteResponse:
    return DeleteResponse(
        namespace=result.namespace,
        document_ids=result.document_ids,
        vectors_deleted=result.vectors_deleted,
        warning=(
            None
            if result.vectors_deleted
            else "Document removed, but its vectors could not be deleted and will be purged on the next sync."
        ),
    )


@router.post("", response_model=IngestResponse, status_code=status.HTTP_201_CREATED)
async def ingest_document(
    request: IngestRequest,
    service: DocumentService = Depends(get_document_service),
) -> IngestResponse:
    """Chunk, embed, index and register a document's extracted text."""
    if request.pages is not None:
        result = await service.ingest_pages(
            request.pages, request.document_name, namespace=request.namespace
        )
    else:
        result = await service.ingest(
            request.text, request.document_name, namespace=request.namespace
        )
    return _ingest_response(result)


@router.post("/upload", response_model=IngestResponse, status_code=status.HTTP_201_CREATED)
async def upload_document(
    file: UploadFile = File(...),
    document_name: str | None = Form(default=None),
    namespace: str | None = Form(default=None),
    service: DocumentService = Depends(get_document_service),
) -> IngestResponse:
    """
    Upload a PDF via multipart form and ingest it.

    The upload is written to a temp directory for the PDF loader and removed
    afterwards, whether ingestion succeeds or not.

    Raises:
        ValidationError: Missing filename, non-PDF extension, or file too large
        ParsingError: The PDF has no extractable text
    """
    if not file.filename:
        raise ValidationError("Filename is required", field="file")

    file_name = Path(file.filename).name
    file_ext = Path(file_name).suffix.lower()
    if file_ext not in ALLOWED_EXTENSIONS:
        logger.warning(
            f"{__name__}:upload_document - Rejected file type",
            extra={"file_name": file_name, "extension": file_ext},
        )
        raise ValidationError(
            f"File type '{file_ext}' not allowed. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}",
            field="file",
        )

    content = await file.read()
    if len(content) > MAX_FILE_SIZE:
        raise ValidationError(
            f"File too large. Maximum size: {MAX_FILE_SIZE // (1024 * 1024)}MB",
            field="file",
            details={"size": len(content)},
        )

    temp_dir = Path(tempfile.mkdtemp(prefix="docchat_"))
    try:
        temp_path = temp_dir / file_name
        temp_path.write_bytes(content)
        logger.info(
            f"{__name__}:upload_document - Saved upload",
            extra={"file_name": file_name, "size": len(content)},
        )
        result = await service.ingest_pdf(
            temp_path,
            document_name=document_name or file_name,
            namespace=namespace,
        )
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)
    return _ingest_response(result)


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    namespace: str | None = None,
    include_stats: bool = Query(default=False, alias="stats"),
    sync: bool = False,
    document_status: DocumentStatus | None = Query(default=None, alias="status"),
    service: DocumentService = Depends(get_document_service),
) -> DocumentListResponse:
    """List documents newest first."""
    documents = await service.list_documents(namespace, status=document_status, sync=sync)
    return DocumentListResponse(
        namespace=namespace or service.default_namespace,
        documents=documents,
        stats=await service.stats(namespace) if include_stats else None,
    )


@router.get("/stale", response_model=list[DocumentRecord])
async def list_stale_documents(
    namespace: str | None = None,
    service: DocumentService = Depends(get_document_service),
) -> list[DocumentRecord]:
    """Documents whose vectors came from a different embedding model."""
    return await service.stale_documents(namespace)


@router.get("/{document_id}", response_model=DocumentRecord)
async def get_document(
    document_id: str,
    namespace: str | None = None,
    service: DocumentService = Depends(get_document_service),
) -> DocumentRecord:
    return await service.get_document(document_id, namespace)


@router.post("/sync", response_model=ResyncReport)
async def sync_documents(
    request: SyncRequest,
    service: DocumentService = Depends(get_document_service),
) -> ResyncReport:
    """Reconcile the registry with the vector index."""
    return await service.resync(request.namespace, force=request.force)


@router.delete("/{document_id}", response_model=DeleteResponse)
async def delete_document(
    document_id: str,
    namespace: str | None = None,
    service: DocumentService = Depends(get_document_service),
) -> DeleteResponse:
    """Delete one document; 404 when unknown or owned by another namespace."""
    return _delete_response(await service.delete_document(document_id, namespace))


@router.delete("", response_model=DeleteResponse)
async def delete_all_documents(
    namespace: str | None = None,
    service: DocumentService = Depends(get_document_service),
) -> DeleteResponse:
    """Delete every document of the namespace."""
    return _delete_response(await service.delete_all_documents(namespace))
