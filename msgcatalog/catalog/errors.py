"""
Exceptions raised while building a message catalog.

Lookups never raise; only construction does.
"""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for catalog construction failures."""


class DecodeError(CatalogError):
    """The byte stream is not a well-formed catalog."""

    def __init__(self, source_format: str, message: str):
        self.source_format = source_format
        self.message = message
        super().__init__(f"Invalid {source_format} catalog: {message}")


class RuleSyntaxError(CatalogError):
    """A plural-rule expression could not be compiled."""

    def __init__(self, expression: str, message: str, position: int | None = None):
        self.expression = expression
        self.message = message
        self.position = position
        where = f" at position {position}" if position is not None else ""
        super().__init__(f"Invalid plural rule {expression!r}{where}: {message}")
