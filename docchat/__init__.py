"""
DocChat: retrieval-augmented question answering over uploaded PDF documents.

Packages:
- configs: pydantic-settings configuration
- core: chunking, registry, retrieval, context assembly, generation
- boundary: adapters for Gemini, vector index, relational store, PDF parsing
- application: ingest and chat services exposed to callers
- api: thin FastAPI adapter
"""

__version__ = "0.1.0"
