"""Application layer: services and user-facing error mapping."""
