# -*- coding: utf-8 -*-
"""`key = value, ...` bodies of flat entry tables."""

from __future__ import annotations

import re
from typing import Dict

from dna_core.lua.values import Scalar, parse_scalar

__all__ = ["parse_assignments"]


_KEY_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def _skip_to_next_line(text: str, i: int) -> int:
    nl = text.find("\n", i)
    return len(text) if nl == -1 else nl


def _scan_value_end(text: str, i: int) -> int:
    """Return the index of the depth-0 comma ending the value at i (or len(text))."""
    n = len(text)
    depth = 0
    in_string = False
    escaped = False
    while i < n:
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth = max(0, depth - 1)
        elif ch == "," and depth == 0:
            return i
        i += 1
    return n


def parse_assignments(body: str) -> Dict[str, Scalar]:
    """
    Parse the inside of one entry table into a field map.

    Values are classified with parse_scalar; nested tables other than flat
    numeric lists are kept as raw text. A malformed field skips the rest of
    its line instead of aborting the entry.
    """
    fields: Dict[str, Scalar] = {}
    text = body or ""
    n = len(text)
    i = 0

    while i < n:
        while i < n and (text[i].isspace() or text[i] == ","):
            i += 1
        if i >= n:
            break

        m = _KEY_RE.match(text, i)
        if not m:
            i = _skip_to_next_line(text, i + 1)
            continue
        key = m.group(0)
        i = m.end()

        while i < n and text[i].isspace():
            i += 1
        if i >= n or text[i] != "=":
            i = _skip_to_next_line(text, i)
            continue
        i += 1
        while i < n and text[i].isspace():
            i += 1

        end = _scan_value_end(text, i)
        fields[key] = parse_scalar(text[i:end])
        i = end + 1

    return fields
