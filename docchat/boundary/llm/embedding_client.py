"""
Embedding client over Google Generative AI embeddings.

Turns text into fixed-length vectors. The same model is used for ingest and
query; its id is recorded on every registry record so vectors produced by a
different model can be detected as stale.

Dependencies: langchain_google_genai, langchain_core
System role: Embedding boundary for ingest and retrieval
"""

import logging

from langchain_core.embeddings import Embeddings
from langchain_google_genai import GoogleGenerativeAIEmbeddings

from docchat.core.exceptions import EmbeddingServiceError

logger = logging.getLogger(__name__)


class EmbeddingClient:
    """
    Batched, order-preserving embedding wrapper.

    Errors from the underlying service are wrapped in EmbeddingServiceError
    and never retried here.
    """

    def __init__(
        self,
        embeddings: Embeddings,
        model_id: str,
        dimension: int | None = None,
    ) -> None:
        """
        Initialize with a LangChain embeddings implementation.

        Args:
            embeddings: LangChain Embeddings instance (connection reused across calls)
            model_id: Identifier of the embedding model, recorded on registry records
            dimension: Expected vector length; None skips the check
        """
        self._embeddings = embeddings
        self.model_id = model_id
        self.dimension = dimension

    @property
    def embeddings(self) -> Embeddings:
        """Underlying LangChain embeddings model."""
        return self._embeddings

    @classmethod
    def from_settings(
        cls,
        model: str,
        dimension: int | None = None,
        google_api_key: str | None = None,
    ) -> "EmbeddingClient":
        """Build a client backed by GoogleGenerativeAIEmbeddings."""
        kwargs = {"model": model}
        if google_api_key:
            kwargs["google_api_key"] = google_api_key
        logger.info(f"{__name__}:from_settings - Initializing embeddings model={model}")
        return cls(GoogleGenerativeAIEmbeddings(**kwargs), model_id=model, dimension=dimension)

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        """
        Embed texts in one batch.

        Args:
            texts: Texts to embed

        Returns:
            list[list[float]]: One vector per input, same order

        Raises:
            EmbeddingServiceError: When the service fails or returns a malformed batch
        """
        if not texts:
            return []

        logger.info(
            f"{__name__}:embed_many - Embedding batch",
            extra={"count": len(texts), "model": self.model_id},
        )
        try:
            vectors = await self._embeddings.aembed_documents(list(texts))
        except Exception as e:
            logger.error(f"{__name__}:embed_many - {type(e).__name__}: {e}")
            raise EmbeddingServiceError(
                f"Failed to generate embeddings: {e}",
                details={"model": self.model_id, "count": len(texts)},
            ) from e

        if len(vectors) != len(texts):
            raise EmbeddingServiceError(
                "Embedding service returned a different number of vectors than inputs",
                details={"expected": len(texts), "received": len(vectors)},
            )
        for vector in vectors:
            self._check_dimension(vector)
        return [list(vector) for vector in vectors]

    async def embed_one(self, text: str) -> list[float]:
        """
        Embed a single query string.

        Raises:
            EmbeddingServiceError: When the service fails
        """
        try:
            vector = await self._embeddings.aembed_query(text)
        except Exception as e:
            logger.error(f"{__name__}:embed_one - {type(e).__name__}: {e}")
            raise EmbeddingServiceError(
                f"Failed to embed query: {e}",
                details={"model": self.model_id},
            ) from e
        self._check_dimension(vector)
        return list(vector)

    def _check_dimension(self, vector: list[float]) -> None:
        if self.dimension is not None and len(vector) != self.dimension:
            raise EmbeddingServiceError(
                "Embedding dimension mismatch",
                details={
                    "model": self.model_id,
                    "expected": self.dimension,
                    "received": len(vector),
                },
            )
