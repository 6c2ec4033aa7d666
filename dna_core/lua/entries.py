# -*- coding: utf-8 -*-
"""Row extraction for index-keyed entry tables.

Two dump shapes carry the same `[n] = { ... }` rows:

    return ReadOnly("Weapon", {
      [10101] = {
        WeaponId = 10101,
        ...
      },
    })

    Items = {
      [1] = { Name = "Key_A", Cost = 10 },
    }
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from dna_core.errors import TableNotFoundError
from dna_core.lua.assign import parse_assignments
from dna_core.lua.expr import parse_table_literal, to_lua_literal
from dna_core.lua.scan import collect_block, count_braces_outside_strings
from dna_core.lua.values import Scalar

__all__ = [
    "EntryRecord",
    "extract_entries",
    "extract_readonly_entries",
    "extract_table_entries",
    "extract_int_map",
]


_INLINE_RE = re.compile(r"^\s*\[(-?\d+)\]\s*=\s*\{(.*)\}\s*,?\s*$")
_OPEN_RE = re.compile(r"^\s*\[(-?\d+)\]\s*=\s*\{\s*$")
_READONLY_END_RE = re.compile(r"^\s*\}\)\s*,?\s*$")
_INT_PAIR_RE = re.compile(r"\[(-?\d+)\]\s*=\s*(-?\d+)\s*,?")


@dataclass
class EntryRecord:
    """One row of a flat entry table."""

    key: int
    fields: Dict[str, Scalar] = field(default_factory=dict)
    raw_text: str = ""


def _scan_rows(lines: Sequence[str], start: int, stop: Optional[int] = None) -> List[EntryRecord]:
    end = len(lines) if stop is None else min(stop, len(lines))
    out: List[EntryRecord] = []
    i = start
    while i < end:
        line = lines[i]
        m = _INLINE_RE.match(line)
        if m:
            out.append(EntryRecord(int(m.group(1)), parse_assignments(m.group(2).strip()), line))
            i += 1
            continue

        m = _OPEN_RE.match(line)
        if m:
            block, last = collect_block(lines, i)
            inner = "\n".join(block[1:-1])
            out.append(EntryRecord(int(m.group(1)), parse_assignments(inner), "\n".join(block)))
            i = last + 1
            continue

        i += 1
    return out


def extract_entries(block_text: str) -> List[EntryRecord]:
    """Extract every `[n] = {...}` row found in block_text."""
    return _scan_rows((block_text or "").splitlines(), 0)


def extract_readonly_entries(source: str, table_name: str, *, path: Optional[str] = None) -> List[EntryRecord]:
    """Rows of `return ReadOnly("<table_name>", { ... })`."""
    lines = (source or "").splitlines()
    marker = f'ReadOnly("{table_name}", {{'
    start = next((idx for idx, line in enumerate(lines) if marker in line), None)
    if start is None:
        raise TableNotFoundError(table_name, path)

    stop = len(lines)
    for idx in range(start + 1, len(lines)):
        if _READONLY_END_RE.match(lines[idx]):
            stop = idx
            break
    return _scan_rows(lines, start + 1, stop)


def extract_table_entries(source: str, table_name: str, *, path: Optional[str] = None) -> List[EntryRecord]:
    """
    Rows of a bare top-level table `Name = { ... }` (also `T.Name` / `local Name`).

    A table written on a single line is handed to the table-literal parser
    and its integer-keyed children are flattened back into rows.
    """
    lines = (source or "").splitlines()
    opener = re.compile(rf"^\s*(?:local\s+|T\.)?{re.escape(table_name)}\s*=\s*\{{")
    start = next((idx for idx, line in enumerate(lines) if opener.match(line)), None)
    if start is None:
        raise TableNotFoundError(table_name, path)

    if count_braces_outside_strings(lines[start]) <= 0:
        return _rows_from_inline_table(lines[start])

    _, last = collect_block(lines, start)
    # rows may start on the opener line itself: `Items = { [1] = {...},`
    first = lines[start]
    body = [first[first.find("{") + 1 :]] + list(lines[start + 1 : last])
    return _scan_rows(body, 0)


def _rows_from_inline_table(line: str) -> List[EntryRecord]:
    expr = line[line.find("{") :]
    tree = parse_table_literal(expr)
    if isinstance(tree, list):
        items = [(idx + 1, v) for idx, v in enumerate(tree)]
    elif isinstance(tree, dict):
        items = [(int(k), v) for k, v in tree.items() if re.match(r"^-?\d+$", k)]
    else:
        return []

    out: List[EntryRecord] = []
    for key, row in items:
        if not isinstance(row, dict):
            continue
        fields: Dict[str, Scalar] = {}
        for name, val in row.items():
            if isinstance(val, (dict, list)) and not _is_number_list(val):
                fields[name] = to_lua_literal(val)
            else:
                fields[name] = val
        out.append(EntryRecord(key, fields, to_lua_literal(row)))
    return out


def _is_number_list(val: object) -> bool:
    return isinstance(val, list) and all(
        isinstance(x, (int, float)) and not isinstance(x, bool) for x in val
    )


def extract_int_map(source: str) -> Dict[int, int]:
    """`[modId] = archiveId` style lookup tables."""
    return {int(a): int(b) for a, b in _INT_PAIR_RE.findall(source or "")}
