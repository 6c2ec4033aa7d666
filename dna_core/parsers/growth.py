# -*- coding: utf-8 -*-
"""Growth curves: per-level values for `#<index>` placeholder attributes."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from dna_core.lua.values import _NUM_RE, Number, parse_number

__all__ = [
    "AttributeTemplate",
    "ResolvedAttribute",
    "ScalingTable",
    "resolve_level",
    "build_scaling_table",
    "templates_from_fields",
    "extract_attribute_templates",
    "grow_table_from_tree",
]

RawValue = Union[str, int, float, None]

_PLACEHOLDER_RE = re.compile(r"^#(\d+)$")
_INT_KEY_RE = re.compile(r"^-?\d+$")


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def resolve_level(raw_value: Any, level_values: Mapping[int, Number]) -> Optional[Number]:
    """
    Resolve one template value for a level.

    - numbers pass through
    - "#<n>" looks up index n in level_values (None when absent; missing
      data stays missing instead of becoming 0)
    - numeric strings are parsed
    - anything else -> None
    """
    if _is_number(raw_value):
        return raw_value
    if not isinstance(raw_value, str):
        return None
    s = raw_value.strip()
    m = _PLACEHOLDER_RE.match(s)
    if m:
        v = level_values.get(int(m.group(1)))
        return v if _is_number(v) else None
    if _NUM_RE.match(s):
        return parse_number(s)
    return None


@dataclass(frozen=True)
class AttributeTemplate:
    """One add-attribute row; raw values are literals or `#<index>` tokens."""

    name: Optional[str]
    raw_rate: RawValue = None
    raw_value: RawValue = None
    allow_mod_multiplier: Optional[str] = None

    @property
    def rate(self) -> Optional[Number]:
        return resolve_level(self.raw_rate, {})

    @property
    def value(self) -> Optional[Number]:
        return resolve_level(self.raw_value, {})


@dataclass(frozen=True)
class ResolvedAttribute:
    name: Optional[str]
    allow_mod_multiplier: Optional[str]
    rate: Optional[Number]
    value: Optional[Number]
    raw_rate: RawValue
    raw_value: RawValue


@dataclass
class ScalingTable:
    default_level: int
    max_level: int
    available_levels: List[int]
    values_by_level: Dict[int, Dict[int, Number]] = field(default_factory=dict)
    attributes_by_level: Dict[int, List[ResolvedAttribute]] = field(default_factory=dict)

    def attribute(self, level: int, name: str) -> Optional[ResolvedAttribute]:
        for attr in self.attributes_by_level.get(level, []):
            if attr.name == name:
                return attr
        return None

    def value_at(self, level: int, name: str) -> Optional[Number]:
        attr = self.attribute(level, name)
        return attr.value if attr else None


def _as_level(v: Any) -> Optional[int]:
    if _is_number(v):
        return int(v)
    if isinstance(v, str) and _INT_KEY_RE.match(v.strip()):
        return int(v.strip())
    return None


def build_scaling_table(
    max_level: Any,
    grow_by_level: Optional[Mapping[int, Mapping[int, Number]]],
    templates: Sequence[AttributeTemplate],
) -> ScalingTable:
    """
    Resolve every template at every available level.

    Level and index keys may be ints or digit strings (as in a parsed tree);
    list rows count from 1. max_level keeps the caller's field value.
    """
    grow: Dict[int, Dict[int, Number]] = {}
    for lv, per_index in (grow_by_level or {}).items():
        level = _as_level(lv)
        if level is None:
            continue
        row = grow.setdefault(level, {})
        for idx, v in _int_items(per_index):
            row[idx] = v

    top = _as_level(max_level)
    levels = set(range(0, top + 1)) if top is not None and top >= 0 else set()
    levels.update(grow.keys())
    available = sorted(levels) or [0]

    values_by_level: Dict[int, Dict[int, Number]] = {}
    attributes_by_level: Dict[int, List[ResolvedAttribute]] = {}
    for level in available:
        vals = dict(sorted(grow.get(level, {}).items()))
        values_by_level[level] = vals
        attributes_by_level[level] = [
            ResolvedAttribute(
                name=t.name,
                allow_mod_multiplier=t.allow_mod_multiplier,
                rate=resolve_level(t.raw_rate, vals),
                value=resolve_level(t.raw_value, vals),
                raw_rate=t.raw_rate,
                raw_value=t.raw_value,
            )
            for t in templates
        ]

    return ScalingTable(
        default_level=available[0],
        max_level=top if top is not None else available[-1],
        available_levels=available,
        values_by_level=values_by_level,
        attributes_by_level=attributes_by_level,
    )


def templates_from_fields(
    fields: Mapping[str, Any],
    names: Optional[Iterable[str]] = None,
) -> List[AttributeTemplate]:
    """Treat numeric and placeholder fields of a flat entry as value templates."""
    wanted = set(names) if names is not None else None
    out: List[AttributeTemplate] = []
    for key, val in fields.items():
        if wanted is not None and key not in wanted:
            continue
        if _is_number(val) or (isinstance(val, str) and _PLACEHOLDER_RE.match(val.strip())):
            out.append(AttributeTemplate(name=key, raw_value=val))
    return out


def _raw(v: Any) -> RawValue:
    if _is_number(v) or isinstance(v, str):
        return v
    return None


def extract_attribute_templates(tree: Any) -> List[AttributeTemplate]:
    """Collect `{ AttrName = ..., Rate = ..., Value = ... }` rows from a resolved tree."""
    out: List[AttributeTemplate] = []

    def visit(node: Any) -> None:
        if isinstance(node, list):
            for x in node:
                visit(x)
            return
        if not isinstance(node, dict):
            return
        if "AttrName" in node and ("Rate" in node or "Value" in node):
            name = node.get("AttrName")
            amm = node.get("AllowModMultiplier")
            out.append(
                AttributeTemplate(
                    name=name if isinstance(name, str) else None,
                    raw_rate=_raw(node.get("Rate")),
                    raw_value=_raw(node.get("Value")),
                    allow_mod_multiplier=None if amm is None else str(amm),
                )
            )
            return
        for x in node.values():
            visit(x)

    visit(tree)
    return out


def _int_items(node: Any) -> List[Tuple[int, Any]]:
    if isinstance(node, list):
        return [(i + 1, v) for i, v in enumerate(node)]
    if isinstance(node, dict):
        return [(int(k), v) for k, v in node.items() if _INT_KEY_RE.match(str(k))]
    return []


def grow_table_from_tree(tree: Any) -> Dict[int, Dict[int, Dict[int, Number]]]:
    """`{ [item] = { [level] = { [index] = n } } }` -> nested int-keyed dicts."""
    out: Dict[int, Dict[int, Dict[int, Number]]] = {}
    for item_id, by_level in _int_items(tree):
        levels: Dict[int, Dict[int, Number]] = {}
        for level, by_index in _int_items(by_level):
            vals = {idx: v for idx, v in _int_items(by_index) if _is_number(v)}
            levels[level] = vals
        out[item_id] = levels
    return out
