"""HTTP API route handlers."""

from . import ai, docs, system

__all__ = ["ai", "docs", "system"]
