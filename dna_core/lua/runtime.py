# -*- coding: utf-8 -*-
"""Runtime tables (`T.Name = {...}`) and symbolic reference resolution."""

from __future__ import annotations

import re
from typing import Any, Dict, Optional, Set

from dna_core.lua.expr import ParsedValue, parse_table_literal
from dna_core.lua.scan import count_braces_outside_strings

__all__ = [
    "parse_runtime_tables",
    "resolve_references",
    "resolve_field",
    "reference_name",
]


_IDENT = r"[A-Za-z_][A-Za-z0-9_]*"


def _ref_pattern(prefix: str) -> "re.Pattern[str]":
    return re.compile(rf"^{re.escape(prefix)}({_IDENT})$")


def parse_runtime_tables(source: str, prefix: str = "T.") -> Dict[str, ParsedValue]:
    """
    Collect every top-level `<prefix>Name = <expr>` assignment into a symbol table.

    Multi-line expressions are gathered until their braces balance. An empty
    prefix collects bare `Name = <expr>` assignments instead.
    """
    lines = (source or "").splitlines()
    assign_re = re.compile(rf"^\s*{re.escape(prefix)}({_IDENT})\s*=\s*(.+?)\s*$")
    out: Dict[str, ParsedValue] = {}

    i = 0
    while i < len(lines):
        m = assign_re.match(lines[i])
        if not m:
            i += 1
            continue

        name, expr = m.group(1), m.group(2)
        depth = count_braces_outside_strings(expr)
        while depth > 0 and i + 1 < len(lines):
            i += 1
            expr += "\n" + lines[i]
            depth += count_braces_outside_strings(lines[i])

        parsed = parse_table_literal(expr)
        if parsed is not None or expr.strip() == "nil":
            out[name] = parsed
        i += 1

    return out


def reference_name(value: Any, prefix: str = "T.") -> Optional[str]:
    """Return the referenced table name if value is a symbolic reference."""
    if not isinstance(value, str):
        return None
    m = _ref_pattern(prefix).match(value)
    return m.group(1) if m else None


def resolve_references(
    value: ParsedValue,
    tables: Dict[str, ParsedValue],
    active: Optional[Set[str]] = None,
    *,
    prefix: str = "T.",
) -> ParsedValue:
    """
    Replace symbolic references with the referenced values, recursively.

    A reference to a missing table, or to a table already being resolved
    higher up the stack, is returned unchanged; cycles therefore stop one
    level early instead of looping.
    """
    stack: Set[str] = set() if active is None else active
    pat = _ref_pattern(prefix)

    def _walk(v: ParsedValue) -> ParsedValue:
        if isinstance(v, str):
            m = pat.match(v)
            if not m:
                return v
            name = m.group(1)
            if name not in tables or name in stack:
                return v
            stack.add(name)
            try:
                return _walk(tables[name])
            finally:
                stack.discard(name)
        if isinstance(v, list):
            return [_walk(x) for x in v]
        if isinstance(v, dict):
            return {k: _walk(x) for k, x in v.items()}
        return v

    return _walk(value)


def resolve_field(value: Any, tables: Dict[str, ParsedValue], *, prefix: str = "T.") -> Optional[ParsedValue]:
    """
    Expand one flat-entry field into a resolved value tree.

    Opaque strings (nested tables, symbols) are re-parsed with the table
    parser first; unparsable text is kept as the string itself.
    """
    if value is None:
        return None
    if isinstance(value, str):
        parsed = parse_table_literal(value)
        runtime: ParsedValue = value if parsed is None else parsed
    else:
        runtime = value
    return resolve_references(runtime, tables, prefix=prefix)
