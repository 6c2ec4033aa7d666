# -*- coding: utf-8 -*-
"""
Typed cross-references: (kind, id) pairs found in recipes resolved against
the item catalogs, localized and icon-linked.

An unresolved reference is data, not an error: it comes back with
source_category "unknown" and a "<kind> #<id>" label in every language.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from dna_core.indexers.asset_index import DIRECTORY_AFFINITY, AssetResolution, resolve_icon
from dna_core.indexers.catalogs import Catalog, CatalogEntry
from dna_core.lua.values import Number
from dna_core.parsers.textmap import TextTable

__all__ = ["RefKind", "ResolvedReference", "CatalogLinker", "PLACEHOLDER_ICON"]

PLACEHOLDER_ICON = "/marker-default.svg"

# source asset path -> public path (or None when it cannot be published)
PublicPathRewriter = Callable[[str], Optional[str]]


class RefKind(Enum):
    MOD = "Mod"
    RESOURCE = "Resource"
    WEAPON = "Weapon"
    CHAR_ACCESSORY = "CharAccessory"

    @classmethod
    def parse(cls, raw: Union[str, "RefKind", None]) -> Optional["RefKind"]:
        """Map a dump type tag to a kind; None when the tag is unknown."""
        if isinstance(raw, RefKind):
            return raw
        if not isinstance(raw, str):
            return None
        return _KIND_ALIASES.get(raw.strip().lower())


_KIND_ALIASES: Dict[str, RefKind] = {
    "mod": RefKind.MOD,
    "item-mod": RefKind.MOD,
    "resource": RefKind.RESOURCE,
    "weapon": RefKind.WEAPON,
    "accessory": RefKind.CHAR_ACCESSORY,
    "characcessory": RefKind.CHAR_ACCESSORY,
    "char-accessory": RefKind.CHAR_ACCESSORY,
}


@dataclass(frozen=True)
class ResolvedReference:
    kind: str
    id: int
    quantity: Number
    source_category: str
    names: Dict[str, Optional[str]] = field(default_factory=dict)
    descriptions: Dict[str, Optional[str]] = field(default_factory=dict)
    icon: Optional[AssetResolution] = None
    icon_public_path: Optional[str] = None
    placeholder: Optional[str] = PLACEHOLDER_ICON
    rarity: Optional[Number] = None
    href: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_unknown(self) -> bool:
        return self.source_category == "unknown"

    def to_dict(self) -> Dict[str, Any]:
        icon = self.icon.to_dict() if self.icon else {"gamePath": None}
        return {
            "type": self.kind,
            "id": self.id,
            "quantity": self.quantity,
            "sourceCategory": self.source_category,
            "href": self.href,
            "rarity": self.rarity,
            "names": dict(self.names),
            "descriptions": dict(self.descriptions),
            "icon": {
                "gamePath": icon.get("gamePath"),
                "sourceRel": icon.get("sourceRel"),
                "publicPath": self.icon_public_path,
                "placeholderPath": self.placeholder,
            },
            "metadata": dict(self.metadata),
        }


# display name used when a catalog entry has no localized name
_PRIMARY_LABELS: Dict[RefKind, str] = {
    RefKind.MOD: "MOD #{}",
    RefKind.RESOURCE: "Resource #{}",
    RefKind.WEAPON: "Weapon #{}",
    RefKind.CHAR_ACCESSORY: "CharAccessory #{}",
}
_FALLBACK_LABELS: Dict[RefKind, str] = {
    RefKind.MOD: "ModResource #{}",
    RefKind.RESOURCE: "Resource #{}",
    RefKind.WEAPON: "Weapon #{}",
    RefKind.CHAR_ACCESSORY: "CharAccessory #{}",
}


def _href(category: str, item_id: int) -> Optional[str]:
    if category == "weapons":
        return f"/items/weapons/weapons-{item_id}"
    if category in ("mods", "resources"):
        return f"/items/{category}/{item_id}"
    return None


class CatalogLinker:
    """Resolve typed references against independently built catalogs."""

    def __init__(
        self,
        catalogs: Mapping[str, Catalog],
        text_table: Optional[TextTable] = None,
        languages: Optional[Sequence[str]] = None,
        asset_index: Optional[Dict[str, List[str]]] = None,
        affinity: Sequence[str] = DIRECTORY_AFFINITY,
        public_path: Optional[PublicPathRewriter] = None,
    ):
        self.catalogs = catalogs
        self.text = text_table or TextTable()
        self.languages: List[str] = list(languages) if languages else (self.text.languages or ["EN"])
        self.asset_index = asset_index or {}
        self.affinity = tuple(affinity)
        self.public_path = public_path
        self._cache: Dict[Tuple[str, int], ResolvedReference] = {}
        # primary catalog first, then same-kind fallbacks
        self._routes: Dict[RefKind, Tuple[str, ...]] = {
            RefKind.MOD: ("mods", "resources"),
            RefKind.RESOURCE: ("resources",),
            RefKind.WEAPON: ("weapons",),
            RefKind.CHAR_ACCESSORY: ("char-accessories", "resources"),
        }

    def _catalog(self, name: str) -> Catalog:
        return self.catalogs.get(name) or {}

    # --- localization ---

    def _text(self, key: Optional[str], lang: str) -> Optional[str]:
        if not key:
            return None
        val = self.text.get(lang, key)
        if val is None:
            val = self.text.get(self.text.fallback, key)
        return val

    def _localize(self, entry: CatalogEntry, label: str) -> Tuple[Dict[str, Optional[str]], Dict[str, Optional[str]]]:
        names: Dict[str, Optional[str]] = {}
        descriptions: Dict[str, Optional[str]] = {}
        for lang in self.languages:
            names[lang] = self._text(entry.name_key, lang) or label
            descriptions[lang] = self._text(entry.description_key, lang)
        return names, descriptions

    # --- icons ---

    def _icon(self, game_path: Optional[str]) -> Tuple[AssetResolution, Optional[str]]:
        res = resolve_icon(game_path, self.asset_index, self.affinity)
        public = None
        if res.chosen and self.public_path is not None:
            public = self.public_path(res.chosen)
        return res, public

    # --- per-kind resolvers ---

    def _from_entry(self, kind: RefKind, entry: CatalogEntry, label: str) -> ResolvedReference:
        names, descriptions = self._localize(entry, label)
        icon, public = self._icon(entry.icon_path)
        return ResolvedReference(
            kind=kind.value,
            id=entry.id,
            quantity=1,
            source_category=entry.category,
            names=names,
            descriptions=descriptions,
            icon=icon,
            icon_public_path=public,
            placeholder=None if public else PLACEHOLDER_ICON,
            rarity=entry.rarity,
            href=_href(entry.category, entry.id),
            metadata=dict(entry.metadata),
        )

    def _resolve_weapon(self, entry: CatalogEntry) -> ResolvedReference:
        ref = self._from_entry(RefKind.WEAPON, entry, f"Weapon #{entry.id}")
        meta = dict(ref.metadata)
        meta["classLabelEn"] = self.text.get("EN", meta.get("classTextKey") or "")
        meta["subtypeLabelEn"] = self.text.get("EN", meta.get("subtypeTextKey") or "")
        return dataclasses.replace(ref, metadata=meta)

    def _resolve_mod(self, entry: CatalogEntry) -> ResolvedReference:
        ref = self._from_entry(RefKind.MOD, entry, _PRIMARY_LABELS[RefKind.MOD].format(entry.id))
        key = ref.metadata.get("archiveNameKey")
        if not key:
            return ref
        meta = dict(ref.metadata)
        meta["archiveNames"] = {lang: self._text(key, lang) for lang in self.languages}
        return dataclasses.replace(ref, metadata=meta)

    def _resolve_fallback(self, kind: RefKind, entry: CatalogEntry) -> ResolvedReference:
        ref = self._from_entry(kind, entry, _FALLBACK_LABELS[kind].format(entry.id))
        meta = dict(ref.metadata)
        meta["resolvedFrom"] = entry.category
        return dataclasses.replace(ref, metadata=meta)

    def unknown_reference(self, kind: str, item_id: int, quantity: Number = 1) -> ResolvedReference:
        label = f"{kind} #{item_id}"
        return ResolvedReference(
            kind=kind,
            id=item_id,
            quantity=quantity,
            source_category="unknown",
            names={lang: label for lang in self.languages},
            descriptions={lang: None for lang in self.languages},
        )

    def _lookup(self, kind: RefKind, item_id: int) -> Optional[ResolvedReference]:
        route = self._routes[kind]
        for i, name in enumerate(route):
            entry = self._catalog(name).get(item_id)
            if entry is None:
                continue
            if i > 0:
                return self._resolve_fallback(kind, entry)
            if kind is RefKind.WEAPON:
                return self._resolve_weapon(entry)
            if kind is RefKind.MOD:
                return self._resolve_mod(entry)
            return self._from_entry(kind, entry, _PRIMARY_LABELS[kind].format(item_id))
        return None

    def resolve_reference(self, kind: Union[str, RefKind], item_id: Any, quantity: Number = 1) -> ResolvedReference:
        """Resolve one (kind, id) pair; never raises for unknown kinds or ids."""
        raw_kind = kind.value if isinstance(kind, RefKind) else str(kind)
        try:
            rid = int(item_id)
        except (TypeError, ValueError, OverflowError):
            return self.unknown_reference(raw_kind, item_id, quantity)

        parsed = RefKind.parse(kind)
        if parsed is None:
            return self.unknown_reference(raw_kind, rid, quantity)

        cache_key = (parsed.value, rid)
        ref = self._cache.get(cache_key)
        if ref is None:
            ref = self._lookup(parsed, rid)
            if ref is None:
                ref = self.unknown_reference(raw_kind, rid, 1)
            self._cache[cache_key] = ref
        if ref.is_unknown and ref.kind != raw_kind:
            return self.unknown_reference(raw_kind, rid, quantity)
        return ref if ref.quantity == quantity else dataclasses.replace(ref, quantity=quantity)
