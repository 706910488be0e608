"""
Dependency injection container.

Builds the service graph once per process: one engine, one vector index and
one client per external service, shared by every request.

Dependencies: docchat.configs, docchat.application, docchat.boundary, docchat.core
System role: DI container for service injection
"""

import logging

from docchat.application.services import ChatService, DocumentService
from docchat.boundary.db.connection import (
    create_tables,
    get_async_engine,
    get_async_session_factory,
)
from docchat.boundary.llm.embedding_client import EmbeddingClient
from docchat.boundary.llm.language_model_client import LanguageModelClient
from docchat.boundary.vdb.vector_index_factory import get_vector_index
from docchat.configs import Settings, get_settings
from docchat.core.chunker import Chunker
from docchat.core.context_assembler import ContextAssembler
from docchat.core.generation import GenerationOrchestrator
from docchat.core.registry import DocumentRegistry
from docchat.core.retriever import Retriever

logger = logging.getLogger(__name__)


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings
        self.clear()

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def engine(self):
        """Get cached async engine."""
        if self._engine is None:
            self._engine = get_async_engine(self.settings.database)
        return self._engine

    @property
    def vector_index(self):
        """Get cached vector index."""
        if self._vector_index is None:
            self._vector_index = get_vector_index(
                self.settings.vector_store, embeddings=self.embedding_client.embeddings
            )
        return self._vector_index

    @property
    def embedding_client(self) -> EmbeddingClient:
        """Get cached embedding client."""
        if self._embedding_client is None:
            vs = self.settings.vector_store
            self._embedding_client = EmbeddingClient.from_settings(
                model=vs.embedding_model,
                dimension=vs.embedding_dimension,
                google_api_key=self.settings.rag.google_api_key,
            )
        return self._embedding_client

    @property
    def llm_client(self) -> LanguageModelClient:
        """Get cached language model client."""
        if self._llm_client is None:
            rag = self.settings.rag
            self._llm_client = LanguageModelClient.from_settings(
                model=rag.llm_model,
                temperature=rag.temperature,
                max_output_tokens=rag.max_output_tokens,
                timeout_seconds=rag.llm_timeout_seconds,
                google_api_key=rag.google_api_key,
            )
        return self._llm_client

    @property
    def registry(self) -> DocumentRegistry:
        """Get cached document registry."""
        if self._registry is None:
            reg = self.settings.registry
            self._registry = DocumentRegistry(
                session_factory=get_async_session_factory(self.engine),
                vector_index=self.vector_index,
                sync_interval_seconds=reg.sync_interval_seconds,
                purge_orphans=reg.purge_orphans,
            )
        return self._registry

    @property
    def document_service(self) -> DocumentService:
        """Get cached document service."""
        if self._document_service is None:
            rag = self.settings.rag
            self._document_service = DocumentService(
                registry=self.registry,
                chunker=Chunker(chunk_size=rag.chunk_size, chunk_overlap=rag.chunk_overlap),
                embedding_client=self.embedding_client,
                vector_index=self.vector_index,
                default_namespace=rag.default_namespace,
            )
        return self._document_service

    @property
    def chat_service(self) -> ChatService:
        """Get cached chat service."""
        if self._chat_service is None:
            rag = self.settings.rag
            self._chat_service = ChatService(
                retriever=Retriever(self.embedding_client, self.vector_index, top_k=rag.top_k),
                assembler=ContextAssembler(),
                orchestrator=GenerationOrchestrator(self.llm_client, history_window=rag.history_window),
                registry=self.registry,
                default_namespace=rag.default_namespace,
            )
        return self._chat_service

    async def startup(self) -> None:
        """Create tables when configured."""
        if self.settings.database.create_tables:
            await create_tables(self.engine)

    async def shutdown(self) -> None:
        """Dispose the engine and clear all cached instances."""
        if self._engine is not None:
            await self._engine.dispose()
        self.clear()

    def clear(self) -> None:
        """Clear all cached instances."""
        self._engine = None
        self._vector_index = None
        self._embedding_client = None
        self._llm_client = None
        self._registry = None
        self._document_service = None
        self._chat_service = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def get_document_service() -> DocumentService:
    """FastAPI dependency for the document service."""
    return get_service_cache().document_service


def get_chat_service() -> ChatService:
    """FastAPI dependency for the chat service."""
    return get_service_cache().chat_service
