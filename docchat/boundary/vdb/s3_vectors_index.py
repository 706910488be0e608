"""
Amazon S3 Vectors index for production retrieval.

Talks to the `s3vectors` boto3 client directly. boto3 is synchronous, so every
call runs in the threadpool to keep the event loop free.

Metadata keys (matching the S3 Vectors index definition):
- Filterable: namespace, document_id, chunk_index, page, source
- Non-filterable: text

Namespace isolation is a metadata filter on query and a metadata check on
listing; S3 Vectors has no native namespace concept.

Dependencies: boto3, botocore, fastapi.concurrency
System role: Production vector index (S3 Vectors)
"""

import logging
from collections import Counter
from collections.abc import Iterator, Sequence
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from docchat.boundary.vdb.vector_index import VectorIndex
from docchat.boundary.vdb.vector_schemas import VectorMatch, VectorRecord
from docchat.core.exceptions import VectorIndexError

logger = logging.getLogger(__name__)

# S3 Vectors API limits.
MAX_PUT_BATCH = 500
MAX_TOP_K = 100


def _batched(items: Sequence[Any], size: int) -> Iterator[Sequence[Any]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


class S3VectorsIndex(VectorIndex):
    """
    S3 Vectors backed index.

    Scores are reported as 1 - cosine distance, clamped to [0, 1].
    """

    def __init__(
        self,
        vectors_bucket: str,
        index_name: str,
        region: str = "us-east-1",
        list_page_size: int = 500,
        delete_batch_size: int = 500,
        client: Any = None,
    ) -> None:
        """
        Initialize S3 Vectors index.

        Args:
            vectors_bucket: S3 Vectors bucket name
            index_name: Index name within the bucket
            region: AWS region for S3 Vectors
            list_page_size: Page size for list_vectors enumeration
            delete_batch_size: Maximum keys per delete_vectors call
            client: Pre-built boto3 client (tests inject a stub)
        """
        self._bucket = vectors_bucket
        self._index_name = index_name
        self._list_page_size = list_page_size
        self._delete_batch_size = min(delete_batch_size, MAX_PUT_BATCH)
        self._client = client or boto3.client("s3vectors", region_name=region)
        logger.info(
            f"{__name__}:__init__ - S3 Vectors index bucket={vectors_bucket}, index={index_name}"
        )

    async def _call(self, operation: str, method: str, **kwargs: Any) -> dict[str, Any]:
        try:
            return await run_in_threadpool(
                getattr(self._client, method),
                vectorBucketName=self._bucket,
                indexName=self._index_name,
                **kwargs,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"{__name__}:{operation} - {type(e).__name__}: {e}")
            raise VectorIndexError(
                message=f"S3 Vectors {operation} failed",
                operation=operation,
                details={"error": str(e), "index": self._index_name},
            ) from e

    async def upsert(self, namespace: str, records: Sequence[VectorRecord]) -> None:
        for batch in _batched(list(records), MAX_PUT_BATCH):
            vectors = []
            for record in batch:
                metadata = record.metadata.model_dump()
                metadata["namespace"] = namespace
                vectors.append(
                    {
                        "key": record.id,
                        "data": {"float32": [float(v) for v in record.values]},
                        "metadata": metadata,
                    }
                )
            await self._call("upsert", "put_vectors", vectors=vectors)
        logger.info(
            f"{__name__}:upsert - Stored vectors",
            extra={"namespace": namespace, "count": len(records)},
        )

    async def query(self, namespace: str, vector: Sequence[float], top_k: int) -> list[VectorMatch]:
        if top_k <= 0:
            return []
        response = await self._call(
            "query",
            "query_vectors",
            topK=min(top_k, MAX_TOP_K),
            queryVector={"float32": [float(v) for v in vector]},
            filter={"namespace": {"$eq": namespace}},
            returnMetadata=True,
            returnDistance=True,
        )
        matches = []
        for item in response.get("vectors", []):
            distance = item.get("distance")
            score = None if distance is None else max(0.0, min(1.0, 1.0 - float(distance)))
            matches.append(
                VectorMatch(id=item["key"], score=score, metadata=item.get("metadata") or {})
            )
        matches.sort(key=lambda m: -(m.score or 0.0))
        return matches

    async def _list_namespace(self, namespace: str) -> list[tuple[str, dict[str, Any]]]:
        """Enumerate (key, metadata) for every vector in the namespace."""
        found: list[tuple[str, dict[str, Any]]] = []
        next_token: str | None = None
        while True:
            kwargs: dict[str, Any] = {"maxResults": self._list_page_size, "returnMetadata": True}
            if next_token:
                kwargs["nextToken"] = next_token
            response = await self._call("list", "list_vectors", **kwargs)
            for item in response.get("vectors", []):
                metadata = item.get("metadata") or {}
                if metadata.get("namespace") == namespace:
                    found.append((item["key"], metadata))
            next_token = response.get("nextToken")
            if not next_token:
                return found

    async def delete_by_ids(self, namespace: str, ids: Sequence[str]) -> None:
        for batch in _batched(list(ids), self._delete_batch_size):
            await self._call("delete", "delete_vectors", keys=list(batch))

    async def delete_by_document(self, namespace: str, document_id: str) -> None:
        keys = [
            key
            for key, metadata in await self._list_namespace(namespace)
            if metadata.get("document_id") == document_id
        ]
        logger.info(
            f"{__name__}:delete_by_document - Deleting vectors",
            extra={"namespace": namespace, "document_id": document_id, "count": len(keys)},
        )
        await self.delete_by_ids(namespace, keys)

    async def delete_all(self, namespace: str) -> None:
        keys = [key for key, _ in await self._list_namespace(namespace)]
        logger.info(
            f"{__name__}:delete_all - Deleting vectors",
            extra={"namespace": namespace, "count": len(keys)},
        )
        await self.delete_by_ids(namespace, keys)

    async def count_by_document(self, namespace: str) -> dict[str, int]:
        listed = await self._list_namespace(namespace)
        return dict(
            Counter(
                metadata["document_id"]
                for _, metadata in listed
                if metadata.get("document_id")
            )
        )
