"""
Core RAG logic: chunking, registry, retrieval, context assembly, generation.

Modules are imported directly (e.g. docchat.core.registry) to keep the
boundary and core layers free of import cycles.
"""
