"""
Document CRUD operations.

Extends BaseCRUD with namespace-scoped queries used by the document registry.

Dependencies: sqlalchemy, docchat.boundary.db.document_model
System role: Document metadata persistence operations
"""

from typing import Any, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from docchat.boundary.db.CRUD.base_crud import BaseCRUD
from docchat.boundary.db.document_model import DocumentModel
from docchat.models.document import DocumentStatus


class DocumentCRUD(BaseCRUD[DocumentModel]):
    """CRUD operations for DocumentModel."""

    def __init__(self) -> None:
        """Initialize DocumentCRUD with DocumentModel."""
        super().__init__(DocumentModel)

    async def upsert(
        self,
        session: AsyncSession,
        document_id: str,
        create_only: tuple[str, ...] = ("uploaded_at",),
        **fields: Any,
    ) -> DocumentModel:
        """
        Insert a document row or update it in place.

        Args:
            session: Async database session
            document_id: Primary key
            create_only: Columns written on insert but kept on update
            **fields: Column values

        Returns:
            DocumentModel: The stored row
        """
        update_fields = {k: v for k, v in fields.items() if k not in create_only}
        existing = await self.update_by_id(session, document_id, **update_fields)
        if existing is not None:
            return existing
        return await self.create(session, document_id=document_id, **fields)

    async def get_by_namespace(
        self,
        session: AsyncSession,
        namespace: str,
        status: DocumentStatus | None = None,
    ) -> Sequence[DocumentModel]:
        """
        Retrieve a namespace's documents, newest upload first.

        Args:
            session: Async database session
            namespace: Owner namespace
            status: Optional processing status filter

        Returns:
            Sequence of DocumentModels ordered by uploaded_at descending
        """
        stmt = select(DocumentModel).where(DocumentModel.owner_namespace == namespace)
        if status is not None:
            stmt = stmt.where(DocumentModel.status == status)
        stmt = stmt.order_by(DocumentModel.uploaded_at.desc(), DocumentModel.document_id)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def delete_by_namespace(self, session: AsyncSession, namespace: str) -> list[str]:
        """
        Delete every document of a namespace.

        Returns:
            list[str]: Ids of the deleted rows
        """
        ids = (
            await session.execute(
                select(DocumentModel.document_id).where(DocumentModel.owner_namespace == namespace)
            )
        ).scalars().all()
        if ids:
            await session.execute(
                delete(DocumentModel).where(DocumentModel.owner_namespace == namespace)
            )
        return list(ids)


document_crud = DocumentCRUD()
