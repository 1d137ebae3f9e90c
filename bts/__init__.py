"""Sync generated GraphQL and OpenAPI artifacts from upstream repositories."""

__version__ = "0.1.0"
