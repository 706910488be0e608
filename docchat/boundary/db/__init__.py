"""
Relational persistence for document registry records.

Dependencies: sqlalchemy
System role: Metadata store behind the document registry
"""

from docchat.boundary.db.base import Base
from docchat.boundary.db.connection import (
    create_tables,
    get_async_engine,
    get_async_session_factory,
)
from docchat.boundary.db.document_model import DocumentModel

__all__ = [
    "Base",
    "DocumentModel",
    "create_tables",
    "get_async_engine",
    "get_async_session_factory",
]
