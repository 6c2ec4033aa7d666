# -*- coding: utf-8 -*-
"""Parsing primitives for decompiled data dumps."""

from dna_core.lua.assign import parse_assignments
from dna_core.lua.entries import (
    EntryRecord,
    extract_entries,
    extract_int_map,
    extract_readonly_entries,
    extract_table_entries,
)
from dna_core.lua.expr import MAX_DEPTH, LuaTableParser, ParsedValue, parse_table_literal, to_lua_literal
from dna_core.lua.runtime import parse_runtime_tables, reference_name, resolve_field, resolve_references
from dna_core.lua.scan import collect_block, count_braces_outside_strings, decode_lua_string
from dna_core.lua.values import Number, Scalar, parse_number, parse_numeric_list, parse_scalar

__all__ = [
    "EntryRecord",
    "LuaTableParser",
    "MAX_DEPTH",
    "Number",
    "ParsedValue",
    "Scalar",
    "collect_block",
    "count_braces_outside_strings",
    "decode_lua_string",
    "extract_entries",
    "extract_int_map",
    "extract_readonly_entries",
    "extract_table_entries",
    "parse_assignments",
    "parse_number",
    "parse_numeric_list",
    "parse_runtime_tables",
    "parse_scalar",
    "parse_table_literal",
    "reference_name",
    "resolve_field",
    "resolve_references",
    "to_lua_literal",
]
