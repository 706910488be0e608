"""
FastAPI application with assembled routers.

Dependencies: fastapi, uvicorn, docchat.api.routers
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import docchat
from docchat.api.deps.dependencies import get_service_cache
from docchat.api.errors import register_exception_handlers
from docchat.api.routers import chat_router, documents_router, health_router
from docchat.configs import get_settings
from docchat.observability.logger import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    configure_logging(get_settings().log_level)
    logger = logging.getLogger(__name__)

    cache = get_service_cache()
    await cache.startup()
    logger.info(f"{__name__}:lifespan - Service cache ready")

    yield

    await cache.shutdown()
    logger.info(f"{__name__}:lifespan - Service cache cleared")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    app = FastAPI(
        title="DocChat RAG API",
        description="Chat with uploaded PDF documents using retrieval-augmented generation",
        version=docchat.__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(documents_router, prefix="/api/v1")
    app.include_router(chat_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "docchat.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
