"""Adapters for external integrations."""

from .directory_adapter import DirectoryAdapter

__all__ = ["DirectoryAdapter"]
