"""
Health check API endpoints.

Routes: GET /health

Dependencies: fastapi
System role: Health check HTTP API
"""

from fastapi import APIRouter
from pydantic import BaseModel

import docchat


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str
    version: str


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", message="Server Healthy", version=docchat.__version__)
