"""
Application services.

Dependencies: docchat.core, docchat.boundary
System role: Operation groups exposed to the HTTP layer
"""

from docchat.application.services.chat_service import ChatService
from docchat.application.services.document_service import DocumentService

__all__ = ["ChatService", "DocumentService"]
