# -*- coding: utf-8 -*-
"""Scalar literal classification for flat dump fields."""

from __future__ import annotations

import re
from typing import List, Optional, Union

from dna_core.lua.scan import decode_lua_string

__all__ = [
    "Number",
    "Scalar",
    "parse_number",
    "parse_numeric_list",
    "parse_scalar",
    "_NUM_RE",
]

Number = Union[int, float]
Scalar = Union[str, int, float, bool, None, List[Number]]

_NUM_RE = re.compile(r"^-?\d+(?:\.\d+)?$")


def parse_number(text: str) -> Number:
    """Parse a literal already matched by _NUM_RE; integral values stay int."""
    if "." in text:
        f = float(text)
        return int(f) if f.is_integer() else f
    return int(text)


def parse_numeric_list(raw: str) -> Optional[List[Number]]:
    """`{1, 2.5, -3}` -> [1, 2.5, -3]; None when the literal is not a flat numeric table."""
    s = (raw or "").strip()
    if not (s.startswith("{") and s.endswith("}")):
        return None
    inner = s[1:-1].strip()
    if not inner:
        return []
    if "=" in inner:
        return None

    out: List[Number] = []
    for part in inner.split(","):
        part = part.strip()
        if not part:
            continue
        if not _NUM_RE.match(part):
            return None
        out.append(parse_number(part))
    return out


def parse_scalar(raw: str) -> Scalar:
    """
    Classify one trimmed field literal:
    - "..."        -> decoded str
    - true/false   -> bool
    - nil          -> None
    - number       -> int/float
    - {n, n, ...}  -> list of numbers
    - anything else (nested tables, symbols) -> the raw text, kept opaque
    """
    value = (raw or "").strip()

    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return decode_lua_string(value[1:-1])
    if value == "true":
        return True
    if value == "false":
        return False
    if value == "nil":
        return None
    if _NUM_RE.match(value):
        return parse_number(value)

    lst = parse_numeric_list(value)
    if lst is not None:
        return lst
    return value
