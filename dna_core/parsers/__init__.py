# -*- coding: utf-8 -*-
"""Domain parsers for decompiled dumps."""

from dna_core.parsers.growth import (
    AttributeTemplate,
    ResolvedAttribute,
    ScalingTable,
    build_scaling_table,
    extract_attribute_templates,
    grow_table_from_tree,
    resolve_level,
    templates_from_fields,
)
from dna_core.parsers.textmap import LanguageFile, TextTable, discover_language_files, load_text_map, load_text_maps

__all__ = [
    "AttributeTemplate",
    "LanguageFile",
    "ResolvedAttribute",
    "ScalingTable",
    "TextTable",
    "build_scaling_table",
    "discover_language_files",
    "extract_attribute_templates",
    "grow_table_from_tree",
    "load_text_map",
    "load_text_maps",
    "resolve_level",
    "templates_from_fields",
]
