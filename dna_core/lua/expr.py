# -*- coding: utf-8 -*-
"""Recursive-descent parser for nested table-literal expressions."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Union

from dna_core.errors import NestingTooDeepError
from dna_core.lua.scan import _skip_line_comment, decode_lua_string
from dna_core.lua.values import parse_number

__all__ = [
    "ParsedValue",
    "LuaTableParser",
    "parse_table_literal",
    "to_lua_literal",
    "MAX_DEPTH",
]

ParsedValue = Union[str, int, float, bool, None, List[Any], Dict[str, Any]]

MAX_DEPTH = 64

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")
_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_.]*")
_DIGITS_RE = re.compile(r"^\d+$")

# Sentinel for "nothing parsed here"; None is a legitimate value (nil).
_MISSING = object()


class LuaTableParser:
    """
    Cursor-based parser over one expression.

    Table shape rules
    - keys exactly 1..n (bare entries or explicit `[k] =`) -> list
    - anything else -> dict: named keys first in table order, then integer
      keys stringified in ascending order
    - an explicit `[n] =` moves the implicit cursor past n; bare entries skip
      indices that are already claimed
    """

    def __init__(self, source: str, *, max_depth: int = MAX_DEPTH):
        self.source = source or ""
        self.pos = 0
        self.max_depth = max_depth
        self._depth = 0

    def parse(self) -> Optional[ParsedValue]:
        self.skip()
        value = self.parse_value()
        if value is _MISSING:
            return None
        self.skip()
        return value

    # --------------------------
    # Cursor helpers
    # --------------------------

    def peek(self, offset: int = 0) -> str:
        i = self.pos + offset
        return self.source[i] if i < len(self.source) else ""

    def skip(self) -> None:
        src = self.source
        n = len(src)
        while self.pos < n:
            ch = src[self.pos]
            if ch.isspace():
                self.pos += 1
                continue
            if src.startswith("--", self.pos):
                self.pos = _skip_line_comment(src, self.pos)
                continue
            break

    # --------------------------
    # Grammar
    # --------------------------

    def parse_value(self) -> Any:
        self.skip()
        ch = self.peek()
        if not ch:
            return _MISSING
        if ch == "{":
            return self.parse_table()
        if ch == '"':
            return self.parse_string()
        if ch.isdigit() or (ch == "-" and self.peek(1).isdigit()):
            return self.parse_number()

        token = self.parse_identifier()
        if token is None:
            return _MISSING
        if token == "true":
            return True
        if token == "false":
            return False
        if token == "nil":
            return None
        return token

    def parse_string(self) -> str:
        self.pos += 1
        start = self.pos
        src = self.source
        n = len(src)
        while self.pos < n:
            ch = src[self.pos]
            if ch == "\\":
                self.pos += 2
                continue
            if ch == '"':
                raw = src[start : self.pos]
                self.pos += 1
                return decode_lua_string(raw)
            self.pos += 1
        # unterminated: take the rest
        return decode_lua_string(src[start:])

    def parse_number(self) -> Any:
        m = _NUMBER_RE.match(self.source, self.pos)
        if not m:
            return _MISSING
        self.pos = m.end()
        return parse_number(m.group(0))

    def parse_identifier(self) -> Optional[str]:
        m = _IDENT_RE.match(self.source, self.pos)
        if not m:
            return None
        self.pos = m.end()
        return m.group(0)

    def parse_table(self) -> ParsedValue:
        self._depth += 1
        if self._depth > self.max_depth:
            raise NestingTooDeepError("table nesting too deep", self.pos)
        try:
            return self._parse_table_body()
        finally:
            self._depth -= 1

    def _parse_table_body(self) -> ParsedValue:
        self.pos += 1  # "{"
        numeric: Dict[int, Any] = {}
        named: Dict[str, Any] = {}
        implicit = 1

        while self.pos < len(self.source):
            self.skip()
            ch = self.peek()
            if not ch:
                break
            if ch == "}":
                self.pos += 1
                break
            if ch == ",":
                self.pos += 1
                continue

            parsed_field = False

            if ch == "[":
                self.pos += 1
                key = self.parse_value()
                self.skip()
                if self.peek() == "]":
                    self.pos += 1
                    self.skip()
                    if self.peek() == "=":
                        self.pos += 1
                        value = self.parse_value()
                        if value is not _MISSING and key is not _MISSING:
                            if isinstance(key, str) and _DIGITS_RE.match(key):
                                key = int(key)
                            if isinstance(key, int) and not isinstance(key, bool) and key >= 1:
                                numeric[key] = value
                                implicit = max(implicit, key + 1)
                            else:
                                named[_key_text(key)] = value
                        parsed_field = True
            else:
                start = self.pos
                name = self.parse_identifier()
                if name is not None:
                    self.skip()
                    if self.peek() == "=":
                        self.pos += 1
                        value = self.parse_value()
                        if value is not _MISSING:
                            named[name] = value
                        parsed_field = True
                    else:
                        self.pos = start

            if not parsed_field:
                value = self.parse_value()
                if value is not _MISSING:
                    while implicit in numeric:
                        implicit += 1
                    numeric[implicit] = value
                    implicit += 1
                else:
                    self.pos += 1

            self.skip()
            if self.peek() == ",":
                self.pos += 1

        keys = sorted(numeric)
        if not named:
            if not keys:
                return []
            if all(k == idx + 1 for idx, k in enumerate(keys)):
                return [numeric[k] for k in keys]

        out: Dict[str, Any] = dict(named)
        for k in keys:
            out[str(k)] = numeric[k]
        return out


def _key_text(key: Any) -> str:
    if key is None:
        return "nil"
    if isinstance(key, bool):
        return "true" if key else "false"
    return str(key)


def parse_table_literal(text: str, *, max_depth: int = MAX_DEPTH) -> Optional[ParsedValue]:
    """
    Parse one expression (usually a `{ ... }` table) into plain Python values.
    Returns None when nothing parses; trailing content is ignored.
    """
    try:
        return LuaTableParser(text, max_depth=max_depth).parse()
    except NestingTooDeepError:
        return None


def _quote(s: str) -> str:
    return '"' + s.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n") + '"'


def to_lua_literal(value: Any) -> str:
    """Render a parsed value back as a literal that parse_table_literal accepts."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, list):
        return "{" + ", ".join(to_lua_literal(v) for v in value) + "}"
    if isinstance(value, dict):
        parts = []
        for k, v in value.items():
            if _DIGITS_RE.match(k) and int(k) >= 1:
                parts.append(f"[{k}] = {to_lua_literal(v)}")
            elif re.match(r"^[A-Za-z_][A-Za-z0-9_]*$", k):
                parts.append(f"{k} = {to_lua_literal(v)}")
            else:
                parts.append(f"[{_quote(k)}] = {to_lua_literal(v)}")
        return "{" + ", ".join(parts) + "}"
    return _quote(str(value))
