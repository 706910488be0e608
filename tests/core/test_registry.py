"""
Test suite for DocumentRegistry.

Tests cover registration, listing, deletion with vector cleanup,
statistics and the resync protocol against the vector index.

System role: Verification of registry/index consistency
"""

import asyncio
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding

from docchat.boundary.vdb.memory_index import InMemoryVectorIndex
from docchat.boundary.vdb.vector_schemas import VectorMetadata, VectorRecord
from docchat.core.exceptions import (
    DocumentNotFoundError,
    RegistryInconsistencyError,
    ValidationError,
    VectorIndexError,
)
from docchat.core.registry import DocumentRegistry
from docchat.models.document import DocumentRecord, DocumentStatus

NS = "tenant-a"


class FailingDeleteIndex(InMemoryVectorIndex):
    """Local index whose deletions always fail."""

    def __init__(self) -> None:
        super().__init__(DeterministicFakeEmbedding(size=2))

    async def delete_by_document(self, namespace: str, document_id: str) -> None:
        raise VectorIndexError("delete unavailable", operation="delete")

    async def delete_all(self, namespace: str) -> None:
        raise VectorIndexError("delete unavailable", operation="delete")


class GatedDeleteIndex(InMemoryVectorIndex):
    """Local index whose document deletion blocks until released; records call order."""

    def __init__(self) -> None:
        super().__init__(DeterministicFakeEmbedding(size=2))
        self.calls: list[str] = []
        self.delete_started = asyncio.Event()
        self.release = asyncio.Event()

    async def delete_by_document(self, namespace: str, document_id: str) -> None:
        self.calls.append(f"delete:{document_id}")
        self.delete_started.set()
        await self.release.wait()
        await super().delete_by_document(namespace, document_id)
        self.calls.append(f"deleted:{document_id}")

    async def count_by_document(self, namespace: str) -> dict[str, int]:
        self.calls.append("count")
        return await super().count_by_document(namespace)


def make_record(
    document_id: str,
    namespace: str = NS,
    total_chunks: int = 2,
    pages: int = 1,
    status: DocumentStatus = DocumentStatus.COMPLETED,
    uploaded_at: datetime | None = None,
    embedding_model: str | None = "fake-embedding",
) -> DocumentRecord:
    return DocumentRecord(
        document_id=document_id,
        owner_namespace=namespace,
        file_name=f"{document_id}.pdf",
        total_chunks=total_chunks,
        pages=pages,
        status=status,
        uploaded_at=uploaded_at or datetime(2025, 1, 1, tzinfo=timezone.utc),
        embedding_model=embedding_model,
    )


async def store_vectors(
    index: InMemoryVectorIndex, document_id: str, count: int, namespace: str = NS
) -> None:
    await index.upsert(
        namespace,
        [
            VectorRecord(
                id=f"{document_id}_chunk_{i}",
                values=[1.0, float(i)],
                metadata=VectorMetadata(
                    document_id=document_id,
                    chunk_index=i,
                    page=1,
                    text=f"chunk {i}",
                    namespace=namespace,
                ),
            )
            for i in range(count)
        ],
    )


def ids(records: Sequence[DocumentRecord]) -> list[str]:
    return [r.document_id for r in records]


class TestRegister:
    """Test suite for register, get and list."""

    @pytest.mark.asyncio
    async def test_register_then_get(self, registry: DocumentRegistry) -> None:
        await registry.register(make_record("doc-1"))

        record = await registry.get(NS, "doc-1")

        assert record.file_name == "doc-1.pdf"
        assert record.status == DocumentStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_reregister_should_replace_fields_and_keep_upload_time(
        self, registry: DocumentRegistry
    ) -> None:
        first = datetime(2025, 1, 1, tzinfo=timezone.utc)
        await registry.register(
            make_record("doc-1", total_chunks=0, status=DocumentStatus.PROCESSING, uploaded_at=first)
        )

        await registry.register(
            make_record("doc-1", total_chunks=7, uploaded_at=first + timedelta(days=3))
        )

        records = await registry.list(NS)
        assert ids(records) == ["doc-1"]
        assert records[0].total_chunks == 7
        assert records[0].status == DocumentStatus.COMPLETED
        assert records[0].uploaded_at == first

    @pytest.mark.asyncio
    async def test_register_id_owned_by_other_namespace_should_fail(
        self, registry: DocumentRegistry
    ) -> None:
        await registry.register(make_record("doc-1", namespace="other"))

        with pytest.raises(ValidationError):
            await registry.register(make_record("doc-1"))

    @pytest.mark.asyncio
    async def test_concurrent_claims_from_two_namespaces_should_fail_with_validation(
        self, registry: DocumentRegistry
    ) -> None:
        results = await asyncio.gather(
            registry.register(make_record("doc-x", namespace="a")),
            registry.register(make_record("doc-x", namespace="b")),
            return_exceptions=True,
        )

        assert sorted(type(r).__name__ for r in results) == ["DocumentRecord", "ValidationError"]
        error = next(r for r in results if isinstance(r, ValidationError))
        assert error.details["field"] == "document_id"

    @pytest.mark.asyncio
    async def test_list_should_order_newest_first(self, registry: DocumentRegistry) -> None:
        base = datetime(2025, 1, 1, tzinfo=timezone.utc)
        await registry.register(make_record("old", uploaded_at=base))
        await registry.register(make_record("new", uploaded_at=base + timedelta(hours=2)))
        await registry.register(make_record("mid", uploaded_at=base + timedelta(hours=1)))

        assert ids(await registry.list(NS)) == ["new", "mid", "old"]

    @pytest.mark.asyncio
    async def test_list_should_filter_by_status(self, registry: DocumentRegistry) -> None:
        await registry.register(make_record("done"))
        await registry.register(make_record("busy", status=DocumentStatus.PROCESSING))

        completed = await registry.list(NS, status=DocumentStatus.COMPLETED)

        assert ids(completed) == ["done"]

    @pytest.mark.asyncio
    async def test_namespaces_should_be_isolated(self, registry: DocumentRegistry) -> None:
        await registry.register(make_record("a-doc", namespace="a"))
        await registry.register(make_record("b-doc", namespace="b"))

        assert ids(await registry.list("a")) == ["a-doc"]
        assert ids(await registry.list("b")) == ["b-doc"]
        with pytest.raises(DocumentNotFoundError):
            await registry.get("a", "b-doc")

    @pytest.mark.asyncio
    async def test_concurrent_registers_should_all_be_stored(
        self, registry: DocumentRegistry
    ) -> None:
        await asyncio.gather(*(registry.register(make_record(f"doc-{i}")) for i in range(10)))

        assert len(await registry.list(NS)) == 10

    @pytest.mark.asyncio
    async def test_invalidate_should_reload_from_store(self, registry: DocumentRegistry) -> None:
        await registry.register(make_record("doc-1"))

        registry.invalidate(NS)

        assert ids(await registry.list(NS)) == ["doc-1"]


class TestStats:
    """Test suite for aggregate statistics."""

    @pytest.mark.asyncio
    async def test_empty_namespace_should_report_zeros(self, registry: DocumentRegistry) -> None:
        stats = await registry.stats(NS)

        assert stats.total_documents == 0
        assert stats.total_chunks == 0
        assert stats.average_chunks_per_document == 0.0

    @pytest.mark.asyncio
    async def test_average_should_round_to_one_decimal(self, registry: DocumentRegistry) -> None:
        await registry.register(make_record("a", total_chunks=1, pages=2))
        await registry.register(make_record("b", total_chunks=1, pages=3))
        await registry.register(make_record("c", total_chunks=2, pages=1))

        stats = await registry.stats(NS)

        assert stats.total_documents == 3
        assert stats.total_chunks == 4
        assert stats.total_pages == 6
        assert stats.average_chunks_per_document == 1.3

    @pytest.mark.asyncio
    async def test_find_stale_should_flag_other_embedding_models(
        self, registry: DocumentRegistry
    ) -> None:
        await registry.register(make_record("current"))
        await registry.register(make_record("legacy", embedding_model="old-model"))

        stale = await registry.find_stale(NS, "fake-embedding")

        assert ids(stale) == ["legacy"]


class TestDelete:
    """Test suite for delete and delete_all."""

    @pytest.mark.asyncio
    async def test_delete_should_remove_record_and_vectors(
        self, registry: DocumentRegistry, vector_index: InMemoryVectorIndex
    ) -> None:
        await registry.register(make_record("doc-1"))
        await registry.register(make_record("doc-2"))
        await store_vectors(vector_index, "doc-1", 2)
        await store_vectors(vector_index, "doc-2", 2)

        result = await registry.delete("doc-1", NS)

        assert result.document_ids == ["doc-1"]
        assert result.vectors_deleted is True
        assert ids(await registry.list(NS)) == ["doc-2"]
        assert await vector_index.count_by_document(NS) == {"doc-2": 2}

    @pytest.mark.asyncio
    async def test_delete_unknown_should_raise_not_found(self, registry: DocumentRegistry) -> None:
        with pytest.raises(DocumentNotFoundError):
            await registry.delete("missing", NS)

    @pytest.mark.asyncio
    async def test_delete_from_other_namespace_should_raise_not_found(
        self, registry: DocumentRegistry
    ) -> None:
        await registry.register(make_record("doc-1", namespace="owner"))

        with pytest.raises(DocumentNotFoundError):
            await registry.delete("doc-1", NS)
        assert ids(await registry.list("owner")) == ["doc-1"]

    @pytest.mark.asyncio
    async def test_index_failure_should_still_remove_record(
        self, session_factory, clock
    ) -> None:
        registry = DocumentRegistry(session_factory, FailingDeleteIndex(), clock=clock)
        await registry.register(make_record("doc-1"))

        result = await registry.delete("doc-1", NS)

        assert result.vectors_deleted is False
        assert result.error == "delete unavailable"
        assert await registry.list(NS) == []

    @pytest.mark.asyncio
    async def test_delete_all_should_clear_namespace(
        self, registry: DocumentRegistry, vector_index: InMemoryVectorIndex
    ) -> None:
        await registry.register(make_record("doc-1"))
        await registry.register(make_record("doc-2"))
        await registry.register(make_record("keep", namespace="other"))
        await store_vectors(vector_index, "doc-1", 1)
        await store_vectors(vector_index, "keep", 1, namespace="other")

        result = await registry.delete_all(NS)

        assert sorted(result.document_ids) == ["doc-1", "doc-2"]
        assert await registry.list(NS) == []
        assert await vector_index.count_by_document(NS) == {}
        assert ids(await registry.list("other")) == ["keep"]
        assert await vector_index.count_by_document("other") == {"keep": 1}

    @pytest.mark.asyncio
    async def test_delete_all_with_index_failure_should_report_partial(
        self, session_factory, clock
    ) -> None:
        registry = DocumentRegistry(session_factory, FailingDeleteIndex(), clock=clock)
        await registry.register(make_record("doc-1"))

        result = await registry.delete_all(NS)

        assert result.vectors_deleted is False
        assert await registry.list(NS) == []


class TestResync:
    """Test suite for the resync protocol."""

    @pytest.mark.asyncio
    async def test_record_without_vectors_should_be_removed(
        self, registry: DocumentRegistry, vector_index: InMemoryVectorIndex
    ) -> None:
        await registry.register(make_record("kept", total_chunks=2))
        await registry.register(make_record("gone", total_chunks=2))
        await store_vectors(vector_index, "kept", 2)

        report = await registry.resync(NS, force=True)

        assert report.removed == ["gone"]
        assert report.updated == []
        assert ids(await registry.list(NS)) == ["kept"]

    @pytest.mark.asyncio
    async def test_chunk_count_mismatch_should_be_corrected(
        self, registry: DocumentRegistry, vector_index: InMemoryVectorIndex
    ) -> None:
        await registry.register(make_record("doc-1", total_chunks=5))
        await store_vectors(vector_index, "doc-1", 3)

        report = await registry.resync(NS, force=True)

        assert report.updated == ["doc-1"]
        assert (await registry.get(NS, "doc-1")).total_chunks == 3
        registry.invalidate(NS)
        assert (await registry.get(NS, "doc-1")).total_chunks == 3

    @pytest.mark.asyncio
    async def test_processing_and_failed_records_should_be_untouched(
        self, registry: DocumentRegistry
    ) -> None:
        await registry.register(make_record("busy", status=DocumentStatus.PROCESSING))
        await registry.register(make_record("broken", status=DocumentStatus.FAILED))

        report = await registry.resync(NS, force=True)

        assert report.removed == []
        assert sorted(ids(await registry.list(NS))) == ["broken", "busy"]

    @pytest.mark.asyncio
    async def test_orphans_should_be_purged_not_registered(
        self, registry: DocumentRegistry, vector_index: InMemoryVectorIndex
    ) -> None:
        await registry.register(make_record("doc-1", total_chunks=1))
        await store_vectors(vector_index, "doc-1", 1)
        await store_vectors(vector_index, "orphan", 2)

        report = await registry.resync(NS, force=True)

        assert report.orphans == ["orphan"]
        assert report.purged_orphans is True
        assert ids(await registry.list(NS)) == ["doc-1"]
        assert await vector_index.count_by_document(NS) == {"doc-1": 1}

    @pytest.mark.asyncio
    async def test_orphans_should_stay_when_purging_disabled(
        self, session_factory, vector_index: InMemoryVectorIndex, clock
    ) -> None:
        registry = DocumentRegistry(session_factory, vector_index, purge_orphans=False, clock=clock)
        await store_vectors(vector_index, "orphan", 2)

        report = await registry.resync(NS, force=True)

        assert report.orphans == ["orphan"]
        assert report.purged_orphans is False
        assert await vector_index.count_by_document(NS) == {"orphan": 2}

    @pytest.mark.asyncio
    async def test_failed_purge_should_raise_inconsistency(self, session_factory, clock) -> None:
        index = FailingDeleteIndex()
        registry = DocumentRegistry(session_factory, index, clock=clock)
        await store_vectors(index, "orphan", 1)

        with pytest.raises(RegistryInconsistencyError):
            await registry.resync(NS, force=True)

    @pytest.mark.asyncio
    async def test_resync_within_window_should_be_skipped(
        self, registry: DocumentRegistry, vector_index: InMemoryVectorIndex, clock
    ) -> None:
        await registry.register(make_record("doc-1", total_chunks=1))
        await store_vectors(vector_index, "doc-1", 1)
        first = await registry.resync(NS)
        await vector_index.delete_all(NS)
        clock.advance(60)

        second = await registry.resync(NS)

        assert first.skipped is False
        assert second.skipped is True
        assert ids(await registry.list(NS)) == ["doc-1"]

    @pytest.mark.asyncio
    async def test_resync_after_window_or_forced_should_run(
        self, registry: DocumentRegistry, vector_index: InMemoryVectorIndex, clock
    ) -> None:
        await registry.register(make_record("doc-1", total_chunks=1))
        await registry.register(make_record("doc-2", total_chunks=1))
        await store_vectors(vector_index, "doc-1", 1)
        await store_vectors(vector_index, "doc-2", 1)
        await registry.resync(NS)

        await vector_index.delete_by_document(NS, "doc-1")
        forced = await registry.resync(NS, force=True)
        await vector_index.delete_by_document(NS, "doc-2")
        clock.advance(301)
        expired = await registry.resync(NS)

        assert forced.removed == ["doc-1"]
        assert expired.removed == ["doc-2"]

    @pytest.mark.asyncio
    async def test_resync_should_be_idempotent(
        self, registry: DocumentRegistry, vector_index: InMemoryVectorIndex
    ) -> None:
        await registry.register(make_record("doc-1", total_chunks=4))
        await registry.register(make_record("gone"))
        await store_vectors(vector_index, "doc-1", 2)

        await registry.resync(NS, force=True)
        snapshot = await registry.list(NS)
        second = await registry.resync(NS, force=True)

        assert second.removed == [] and second.updated == [] and second.orphans == []
        assert await registry.list(NS) == snapshot

    @pytest.mark.asyncio
    async def test_resync_should_wait_for_inflight_delete(self, session_factory, clock) -> None:
        # Arrange
        index = GatedDeleteIndex()
        registry = DocumentRegistry(session_factory, index, clock=clock)
        await registry.register(make_record("doc-1", total_chunks=2))
        await store_vectors(index, "doc-1", 2)

        # Act
        delete_task = asyncio.create_task(registry.delete("doc-1", NS))
        await index.delete_started.wait()
        resync_task = asyncio.create_task(registry.resync(NS, force=True))
        for _ in range(10):
            await asyncio.sleep(0)
        calls_while_blocked = list(index.calls)
        index.release.set()
        result, report = await asyncio.gather(delete_task, resync_task)

        # Assert
        assert calls_while_blocked == ["delete:doc-1"]
        assert index.calls == ["delete:doc-1", "deleted:doc-1", "count"]
        assert result.vectors_deleted is True
        assert report.orphans == []
        assert report.removed == []
        assert await index.count_by_document(NS) == {}
