# -*- coding: utf-8 -*-
"""Low-level scanning helpers for decompiled data dumps."""

from __future__ import annotations

from typing import List, Sequence, Tuple

__all__ = [
    "_skip_line_comment",
    "count_braces_outside_strings",
    "collect_block",
    "decode_lua_string",
]


_NAMED_ESCAPES = {
    "n": 10,
    "r": 13,
    "t": 9,
    "a": 7,
    "b": 8,
    "f": 12,
    "v": 11,
    "\\": 92,
    '"': 34,
    "'": 39,
}

_HEX = "0123456789abcdefABCDEF"


def _skip_line_comment(text: str, i: int) -> int:
    """i points at '--'. Skip to the start of the next line. Return next index."""
    if not text.startswith("--", i):
        return i
    nl = text.find("\n", i + 2)
    return len(text) if nl == -1 else nl + 1


def decode_lua_string(raw: str) -> str:
    """
    Decode the body of a quoted string literal (without the quotes).

    The dumps store UTF-8 text as escaped bytes (`\\228\\189\\160`), so escapes
    are turned into raw bytes first and the byte string is decoded as UTF-8.
    Characters outside escapes contribute their low byte.
    """
    if not raw:
        return ""
    out = bytearray()
    n = len(raw)
    i = 0
    while i < n:
        ch = raw[i]
        if ch != "\\":
            out.append(ord(ch) & 0xFF)
            i += 1
            continue

        i += 1
        if i >= n:
            break
        esc = raw[i]

        if "0" <= esc <= "9":
            j = i
            while j < n and j < i + 3 and "0" <= raw[j] <= "9":
                j += 1
            out.append(int(raw[i:j]) & 0xFF)
            i = j
            continue

        if esc == "x" and i + 2 < n:
            hx = raw[i + 1 : i + 3]
            if all(c in _HEX for c in hx):
                out.append(int(hx, 16))
                i += 3
                continue

        out.append(_NAMED_ESCAPES.get(esc, ord(esc)) & 0xFF)
        i += 1

    return out.decode("utf-8", errors="replace")


def count_braces_outside_strings(line: str) -> int:
    """Net `{` minus `}` on a line, ignoring braces inside double-quoted strings."""
    delta = 0
    in_string = False
    escaped = False
    for ch in line or "":
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            delta += 1
        elif ch == "}":
            delta -= 1
    return delta


def collect_block(lines: Sequence[str], start: int) -> Tuple[List[str], int]:
    """
    Collect lines[start:] until the running brace depth returns to zero.
    Returns (block_lines, index_of_last_line). Unterminated blocks run to EOF.
    """
    block: List[str] = [lines[start]]
    depth = count_braces_outside_strings(lines[start])
    i = start
    while depth > 0 and i + 1 < len(lines):
        i += 1
        block.append(lines[i])
        depth += count_braces_outside_strings(lines[i])
    return block, i
