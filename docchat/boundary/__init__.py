"""Boundary layer: adapters to external services and storage."""
