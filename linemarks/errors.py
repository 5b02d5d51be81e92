from __future__ import annotations


class MarkDataError(ValueError):
    """Raised when a mark attribute is assigned a value it cannot hold."""
