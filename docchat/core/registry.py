"""
Document registry.

Authoritative metadata store for uploaded documents, kept eventually
consistent with the vector index. Records are persisted through SQLAlchemy
and mirrored in a per-namespace write-through cache that also remembers when
the namespace was last reconciled against the index.

Mutations (register, delete, delete_all, resync) for one namespace are
serialized by a per-namespace asyncio.Lock; different namespaces never contend.

Dependencies: sqlalchemy, docchat.boundary.db, docchat.boundary.vdb
System role: Single source of truth for "what documents exist"
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker

from docchat.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud
from docchat.boundary.vdb.vector_index import VectorIndex
from docchat.core.exceptions import (
    DocumentNotFoundError,
    RegistryInconsistencyError,
    ValidationError,
    VectorIndexError,
)
from docchat.models.document import (
    DeleteResult,
    DocumentRecord,
    DocumentStats,
    DocumentStatus,
    ResyncReport,
    utc_now,
)

logger = logging.getLogger(__name__)


@dataclass
class RegistryCache:
    """Cached view of one namespace."""

    records: dict[str, DocumentRecord] = field(default_factory=dict)
    last_synced_at: datetime | None = None


class DocumentRegistry:
    """
    Registry of DocumentRecords with a resync protocol against the vector index.

    Invariant restored by resync: a completed record's total_chunks equals the
    number of vectors stored under its document_id.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        vector_index: VectorIndex,
        sync_interval_seconds: float = 300.0,
        purge_orphans: bool = True,
        clock: Callable[[], datetime] = utc_now,
        crud: DocumentCRUD = document_crud,
    ) -> None:
        """
        Initialize registry.

        Args:
            session_factory: Async session factory for the metadata store
            vector_index: Index reconciled by resync and cleaned by delete
            sync_interval_seconds: Staleness window; a non-forced resync inside it is skipped
            purge_orphans: Delete vectors without a registry record during resync
            clock: Time source for the staleness window
            crud: Persistence operations
        """
        self._session_factory = session_factory
        self._index = vector_index
        self.sync_interval = timedelta(seconds=sync_interval_seconds)
        self.purge_orphans = purge_orphans
        self._clock = clock
        self._crud = crud
        self._caches: dict[str, RegistryCache] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock(self, namespace: str) -> asyncio.Lock:
        return self._locks.setdefault(namespace, asyncio.Lock())

    async def _cache(self, namespace: str) -> RegistryCache:
        """Return the namespace cache, loading it from the store on first use. Caller holds the lock."""
        cache = self._caches.get(namespace)
        if cache is None:
            async with self._session_factory() as session:
                rows = await self._crud.get_by_namespace(session, namespace)
            cache = RegistryCache(
                records={row.document_id: DocumentRecord.model_validate(row) for row in rows}
            )
            self._caches[namespace] = cache
            logger.debug(
                f"{__name__}:_cache - Loaded namespace",
                extra={"namespace": namespace, "count": len(cache.records)},
            )
        return cache

    def invalidate(self, namespace: str | None = None) -> None:
        """Drop the cached view of one namespace (or all); the next access reloads it."""
        if namespace is None:
            self._caches.clear()
        else:
            self._caches.pop(namespace, None)

    async def register(self, record: DocumentRecord) -> DocumentRecord:
        """
        Insert or update a record by document_id.

        An existing record keeps its uploaded_at; status, counts and the other
        fields are replaced, which lets an interrupted ingest resume.

        Returns:
            DocumentRecord: The stored record

        Raises:
            ValidationError: When the id already belongs to another namespace
        """
        namespace = record.owner_namespace
        async with self._lock(namespace):
            cache = await self._cache(namespace)
            async with self._session_factory() as session:
                existing = await self._crud.get_by_id(session, record.document_id)
                if existing is not None and existing.owner_namespace != namespace:
                    raise ValidationError(
                        "Document id is already registered in another namespace",
                        field="document_id",
                        details={"document_id": record.document_id},
                    )
                try:
                    row = await self._crud.upsert(
                        session,
                        record.document_id,
                        **record.model_dump(exclude={"document_id"}),
                    )
                    await session.commit()
                except IntegrityError as e:
                    # Lost an insert race with another namespace.
                    await session.rollback()
                    logger.warning(
                        f"{__name__}:register - Document id claimed concurrently",
                        extra={"namespace": namespace, "document_id": record.document_id},
                    )
                    raise ValidationError(
                        "Document id is already registered in another namespace",
                        field="document_id",
                        details={"document_id": record.document_id},
                    ) from e
                stored = DocumentRecord.model_validate(row)

            cache.records[stored.document_id] = stored
            logger.info(
                f"{__name__}:register - Registered document",
                extra={
                    "namespace": namespace,
                    "document_id": stored.document_id,
                    "status": stored.status.value,
                    "total_chunks": stored.total_chunks,
                },
            )
            return stored

    async def list(
        self,
        namespace: str,
        status: DocumentStatus | None = None,
    ) -> list[DocumentRecord]:
        """Return the namespace's records, newest upload first, optionally filtered by status."""
        async with self._lock(namespace):
            cache = await self._cache(namespace)
            records = list(cache.records.values())
        if status is not None:
            records = [r for r in records if r.status == status]
        records.sort(key=lambda r: r.document_id)
        records.sort(key=lambda r: r.uploaded_at, reverse=True)
        return records

    async def get(self, namespace: str, document_id: str) -> DocumentRecord:
        """
        Return one record.

        Raises:
            DocumentNotFoundError: When unknown or owned by another namespace
        """
        async with self._lock(namespace):
            cache = await self._cache(namespace)
            record = cache.records.get(document_id)
        if record is None:
            raise DocumentNotFoundError(document_id, details={"namespace": namespace})
        return record

    async def stats(self, namespace: str) -> DocumentStats:
        """Aggregate totals over list(namespace)."""
        return DocumentStats.from_records(await self.list(namespace))

    async def find_stale(self, namespace: str, embedding_model: str) -> list[DocumentRecord]:
        """Completed records whose vectors came from a different embedding model."""
        return [
            record
            for record in await self.list(namespace, status=DocumentStatus.COMPLETED)
            if record.embedding_model and record.embedding_model != embedding_model
        ]

    async def delete(self, document_id: str, namespace: str) -> DeleteResult:
        """
        Delete a record, then its vectors.

        The registry deletion is authoritative: a vector index failure is
        logged and reported through vectors_deleted=False, never raised.

        Raises:
            DocumentNotFoundError: When unknown or owned by another namespace
        """
        async with self._lock(namespace):
            cache = await self._cache(namespace)
            if document_id not in cache.records:
                raise DocumentNotFoundError(document_id, details={"namespace": namespace})

            async with self._session_factory() as session:
                await self._crud.delete_by_id(session, document_id)
                await session.commit()
            cache.records.pop(document_id, None)
            logger.info(
                f"{__name__}:delete - Registry record deleted",
                extra={"namespace": namespace, "document_id": document_id},
            )

            result = DeleteResult(namespace=namespace, document_ids=[document_id])
            try:
                await self._index.delete_by_document(namespace, document_id)
            except VectorIndexError as e:
                logger.warning(
                    f"{__name__}:delete - Vector deletion failed, vectors orphaned: {e}",
                    extra={"namespace": namespace, "document_id": document_id},
                )
                result.vectors_deleted = False
                result.error = e.message
            return result

    async def delete_all(self, namespace: str) -> DeleteResult:
        """Delete every record of the namespace, then all its vectors. Same failure policy as delete."""
        async with self._lock(namespace):
            cache = await self._cache(namespace)
            async with self._session_factory() as session:
                deleted_ids = await self._crud.delete_by_namespace(session, namespace)
                await session.commit()
            cache.records.clear()
            logger.info(
                f"{__name__}:delete_all - Registry cleared",
                extra={"namespace": namespace, "count": len(deleted_ids)},
            )

            result = DeleteResult(namespace=namespace, document_ids=deleted_ids)
            try:
                await self._index.delete_all(namespace)
            except VectorIndexError as e:
                logger.warning(
                    f"{__name__}:delete_all - Vector deletion failed, vectors orphaned: {e}",
                    extra={"namespace": namespace, "document_ids": deleted_ids},
                )
                result.vectors_deleted = False
                result.error = e.message
            return result

    async def resync(self, namespace: str, force: bool = False) -> ResyncReport:
        """
        Reconcile the namespace's records with the vector index.

        - Completed records with no vectors are removed.
        - Completed records with a different vector count are corrected.
        - Processing and failed records are left alone.
        - Document ids with vectors but no record are orphans; they are purged
          when purge_orphans is set. Records are never re-added from the index.

        Idempotent. A non-forced call within the staleness window does no I/O.

        Raises:
            VectorIndexError: When the index cannot be enumerated
            RegistryInconsistencyError: When orphan purging fails
        """
        async with self._lock(namespace):
            cache = await self._cache(namespace)
            now = self._clock()
            if (
                not force
                and cache.last_synced_at is not None
                and now - cache.last_synced_at < self.sync_interval
            ):
                logger.debug(f"{__name__}:resync - Skipped, within staleness window")
                return ResyncReport(
                    namespace=namespace, skipped=True, synced_at=cache.last_synced_at
                )

            logger.info(f"{__name__}:resync - START", extra={"namespace": namespace, "force": force})
            counts = await self._index.count_by_document(namespace)

            removed: list[str] = []
            updated: list[str] = []
            async with self._session_factory() as session:
                for record in list(cache.records.values()):
                    if record.status != DocumentStatus.COMPLETED:
                        continue
                    actual = counts.get(record.document_id, 0)
                    if actual == 0:
                        await self._crud.delete_by_id(session, record.document_id)
                        removed.append(record.document_id)
                    elif actual != record.total_chunks:
                        await self._crud.update_by_id(
                            session, record.document_id, total_chunks=actual
                        )
                        updated.append(record.document_id)
                await session.commit()

            for document_id in removed:
                cache.records.pop(document_id, None)
            for document_id in updated:
                cache.records[document_id] = cache.records[document_id].model_copy(
                    update={"total_chunks": counts[document_id]}
                )

            orphans = sorted(set(counts) - set(cache.records))
            purged = False
            if orphans and self.purge_orphans:
                try:
                    for document_id in orphans:
                        await self._index.delete_by_document(namespace, document_id)
                except VectorIndexError as e:
                    logger.error(f"{__name__}:resync - Orphan purge failed: {e}")
                    raise RegistryInconsistencyError(
                        "Orphaned vectors could not be purged",
                        namespace=namespace,
                        details={"orphans": orphans, "error": e.message},
                    ) from e
                purged = True
            elif orphans:
                logger.warning(
                    f"{__name__}:resync - Orphaned vectors left in place",
                    extra={"namespace": namespace, "orphans": orphans},
                )

            cache.last_synced_at = now
            logger.info(
                f"{__name__}:resync - Completed",
                extra={
                    "namespace": namespace,
                    "removed": len(removed),
                    "updated": len(updated),
                    "orphans": len(orphans),
                },
            )
            return ResyncReport(
                namespace=namespace,
                removed=removed,
                updated=updated,
                orphans=orphans,
                purged_orphans=purged,
                synced_at=now,
            )
