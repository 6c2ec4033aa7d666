# -*- coding: utf-8 -*-
"""Crafting recipes (drafts): product and ingredients linked through the catalogs."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from dna_core.indexers.asset_index import AssetResolution, resolve_icon
from dna_core.indexers.linker import PLACEHOLDER_ICON, CatalogLinker, ResolvedReference
from dna_core.lua.entries import EntryRecord
from dna_core.lua.expr import ParsedValue
from dna_core.lua.runtime import resolve_field
from dna_core.lua.values import Number, Scalar

__all__ = [
    "DraftBuild",
    "DraftRecipe",
    "Requirement",
    "build_draft_recipes",
    "parse_access_keys",
    "parse_coin_cost_map",
    "parse_requirements",
]

_UINT_KEY_RE = re.compile(r"^\d+$")
_INT_KEY_RE = re.compile(r"^-?\d+$")

# structured fields kept out of the flat copy
_STRUCTURED_FIELDS = frozenset({"Resource", "FoundryCost", "AccessKey", "Icon"})


@dataclass(frozen=True)
class Requirement:
    kind: str
    id: int
    quantity: Number = 1


@dataclass
class DraftRecipe:
    draft_id: int
    product_type: str
    product_id: int
    product_quantity: Number
    icon: AssetResolution
    product: ResolvedReference
    ingredients: List[ResolvedReference] = field(default_factory=list)
    crafting: Dict[str, Any] = field(default_factory=dict)
    fields: Dict[str, Scalar] = field(default_factory=dict)
    icon_public_path: Optional[str] = None

    @property
    def id(self) -> str:
        return f"draft-{self.draft_id}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "draftId": self.draft_id,
            "productType": self.product_type,
            "productId": self.product_id,
            "productQuantity": self.product_quantity,
            "icon": {
                "gamePath": self.icon.symbolic_path,
                "sourceRel": self.icon.chosen,
                "publicPath": self.icon_public_path,
                "placeholderPath": None if self.icon_public_path else PLACEHOLDER_ICON,
            },
            "product": self.product.to_dict(),
            "ingredients": [i.to_dict() for i in self.ingredients],
            "crafting": dict(self.crafting),
            "fields": dict(self.fields),
        }


@dataclass
class DraftBuild:
    recipes: List[DraftRecipe] = field(default_factory=list)
    unresolved_products: int = 0
    unresolved_ingredients: int = 0
    unresolved_icons: int = 0

    def product_type_counts(self) -> Dict[str, int]:
        out: Dict[str, int] = {}
        for r in self.recipes:
            out[r.product_type] = out.get(r.product_type, 0) + 1
        return out

    def ingredient_type_counts(self) -> Dict[str, int]:
        out: Dict[str, int] = {}
        for r in self.recipes:
            for ing in r.ingredients:
                out[ing.kind] = out.get(ing.kind, 0) + 1
        return out


def _num(v: Any) -> Optional[Number]:
    return v if isinstance(v, (int, float)) and not isinstance(v, bool) else None


def _bool(v: Any) -> Optional[bool]:
    return v if isinstance(v, bool) else None


def parse_requirements(tree: Optional[ParsedValue]) -> List[Requirement]:
    """Collect `{ Type = ..., Id = ..., Num = ... }` rows; Num defaults to 1."""
    out: List[Requirement] = []

    def visit(node: Any) -> None:
        if isinstance(node, list):
            for x in node:
                visit(x)
            return
        if not isinstance(node, dict):
            return
        kind = node.get("Type")
        rid = _num(node.get("Id"))
        if isinstance(kind, str) and rid is not None:
            qty = _num(node.get("Num"))
            out.append(Requirement(kind=kind, id=int(rid), quantity=1 if qty is None else qty))
            return
        for k in sorted((k for k in node if _UINT_KEY_RE.match(k)), key=int):
            visit(node[k])

    visit(tree)
    return out


def parse_coin_cost_map(tree: Optional[ParsedValue]) -> Dict[str, Number]:
    """`{ [coin_type] = amount }` -> {"coin_type": amount}; other shapes give {}."""
    if isinstance(tree, list):
        items = [(str(i + 1), v) for i, v in enumerate(tree)]
    elif isinstance(tree, dict):
        items = list(tree.items())
    else:
        return {}
    out: Dict[str, Number] = {}
    for k, v in items:
        n = _num(v)
        if _INT_KEY_RE.match(k) and n is not None:
            out[k] = n
    return out


def parse_access_keys(tree: Optional[ParsedValue]) -> List[str]:
    if not tree:
        return []
    if isinstance(tree, str):
        return [tree]
    if isinstance(tree, list):
        return [x for x in tree if isinstance(x, str)]
    if isinstance(tree, dict):
        keys = sorted((k for k in tree if _UINT_KEY_RE.match(k)), key=int)
        return [tree[k] for k in keys if isinstance(tree[k], str)]
    return []


def build_draft_recipes(
    entries: List[EntryRecord],
    tables: Mapping[str, ParsedValue],
    linker: CatalogLinker,
    asset_index: Optional[Dict[str, List[str]]] = None,
) -> DraftBuild:
    """Link every draft entry; unresolved references are counted, not raised."""
    index = asset_index if asset_index is not None else linker.asset_index
    build = DraftBuild()

    for entry in entries:
        f = entry.fields
        draft_id = _num(f.get("DraftId"))
        draft_id = entry.key if draft_id is None else int(draft_id)
        product_type = f.get("ProductType") if isinstance(f.get("ProductType"), str) else "Unknown"
        product_id = _num(f.get("ProductId"))
        product_id = -1 if product_id is None else int(product_id)
        product_qty = _num(f.get("ProductNum"))
        product_qty = 1 if product_qty is None else product_qty

        icon = resolve_icon(f.get("Icon") if isinstance(f.get("Icon"), str) else None, index, linker.affinity)
        if icon.symbolic_path and icon.chosen is None:
            build.unresolved_icons += 1
        public = linker.public_path(icon.chosen) if icon.chosen and linker.public_path else None

        requirements = parse_requirements(resolve_field(f.get("Resource"), tables))
        ingredients = [linker.resolve_reference(r.kind, r.id, r.quantity) for r in requirements]
        product = linker.resolve_reference(product_type, product_id, product_qty)

        if product.is_unknown:
            build.unresolved_products += 1
        build.unresolved_ingredients += sum(1 for i in ingredients if i.is_unknown)

        build.recipes.append(
            DraftRecipe(
                draft_id=draft_id,
                product_type=product_type,
                product_id=product_id,
                product_quantity=product_qty,
                icon=icon,
                icon_public_path=public,
                product=product,
                ingredients=ingredients,
                crafting={
                    "durationSec": _num(f.get("Time")),
                    "batch": bool(_bool(f.get("Batch"))),
                    "rarity": _num(f.get("Rarity")),
                    "foundryCostByCoinType": parse_coin_cost_map(resolve_field(f.get("FoundryCost"), tables)),
                    "resourceToCoinType": _num(f.get("ResourceToCoinType")),
                    "resourceValue": _num(f.get("ResourceValue")),
                    "accessKeys": parse_access_keys(resolve_field(f.get("AccessKey"), tables)),
                    "releaseVersion": _num(f.get("ReleaseVersion")),
                    "openVersion": _num(f.get("OpenVersion")),
                    "showInBag": _num(f.get("ShowInBag")),
                    "showInDraftArchive": bool(_bool(f.get("ShowInDraftArchive"))),
                },
                fields={k: v for k, v in f.items() if k not in _STRUCTURED_FIELDS and v is not None},
            )
        )

    build.recipes.sort(key=lambda r: r.draft_id)
    return build
