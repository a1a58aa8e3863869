"""Persistent finding store."""

from .manager import FindingStore

__all__ = ["FindingStore"]
