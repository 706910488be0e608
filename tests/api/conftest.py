"""
Fixtures for HTTP API tests.

Routers are mounted on a bare FastAPI app with the error handlers installed;
services are AsyncMocks injected through dependency_overrides.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from docchat.api.deps import get_chat_service, get_document_service
from docchat.api.errors import register_exception_handlers
from docchat.api.routers import chat_router, documents_router, health_router
from docchat.application.services.chat_service import ChatService
from docchat.application.services.document_service import DocumentService


@pytest.fixture
def document_service_mock() -> AsyncMock:
    service = AsyncMock(spec=DocumentService)
    service.default_namespace = "default"
    return service


@pytest.fixture
def chat_service_mock() -> AsyncMock:
    return AsyncMock(spec=ChatService)


@pytest.fixture
def app(document_service_mock: AsyncMock, chat_service_mock: AsyncMock) -> FastAPI:
    """Create FastAPI test application with all routers."""
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(documents_router, prefix="/api/v1")
    app.include_router(chat_router, prefix="/api/v1")
    app.dependency_overrides[get_document_service] = lambda: document_service_mock
    app.dependency_overrides[get_chat_service] = lambda: chat_service_mock
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Provide TestClient for the FastAPI app."""
    return TestClient(app)
