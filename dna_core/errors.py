# -*- coding: utf-8 -*-
"""Error types raised by the dump readers.

Only file-level problems are raised to callers. Literal-level problems are
recovered where they happen, and unresolved references are plain data.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "DumpError",
    "TableNotFoundError",
    "MalformedLiteralError",
    "NestingTooDeepError",
]


class DumpError(Exception):
    """Base class for dump parsing failures."""


class TableNotFoundError(DumpError, LookupError):
    """A required top-level table marker is missing from a dump."""

    def __init__(self, table_name: str, path: Optional[str] = None):
        self.table_name = table_name
        self.path = path
        where = f" in {path}" if path else ""
        super().__init__(f'Table "{table_name}" not found{where}.')


class MalformedLiteralError(DumpError, ValueError):
    """A literal could not be parsed at the given cursor position."""

    def __init__(self, message: str, position: int = -1):
        self.position = position
        suffix = f" (at offset {position})" if position >= 0 else ""
        super().__init__(f"{message}{suffix}")


class NestingTooDeepError(MalformedLiteralError):
    """Table nesting exceeded the parser's depth limit."""
