"""CRUD operations for registry persistence."""

from docchat.boundary.db.CRUD.base_crud import BaseCRUD
from docchat.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud

__all__ = ["BaseCRUD", "DocumentCRUD", "document_crud"]
