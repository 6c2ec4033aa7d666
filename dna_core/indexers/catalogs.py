# -*- coding: utf-8 -*-
"""Item catalogs built from flat entry tables (mods, resources, weapons, accessories)."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from dna_core.lua.entries import EntryRecord
from dna_core.lua.expr import ParsedValue
from dna_core.lua.runtime import resolve_field
from dna_core.lua.values import Number, Scalar

__all__ = [
    "Catalog",
    "CatalogEntry",
    "GuideArchive",
    "WEAPON_SUBTYPE_ALIASES",
    "build_accessory_catalog",
    "build_mod_catalog",
    "build_resource_catalog",
    "build_weapon_catalog",
    "collect_numbers",
    "infer_weapon_class",
    "normalize_weapon_subtype",
    "parse_guide_archives",
]

WEAPON_SUBTYPE_ALIASES: Mapping[str, str] = MappingProxyType({
    "Broadsword": "Claymore",
    "Scythe": "Polearm",
})

_WEAPON_CLASS_TEXT_KEYS = {
    "Melee": "UI_Armory_Meleeweapon",
    "Ranged": "UI_Armory_Longrange",
}
_WEAPON_CLASS_ICONS = {
    "Melee": "/Game/UI/Texture/Dynamic/Atlas/Armory/T_Armory_WeaponTypeClose_Combat.T_Armory_WeaponTypeClose_Combat",
    "Ranged": "/Game/UI/Texture/Dynamic/Atlas/Armory/T_Armory_WeaponTypeLongRange.T_Armory_WeaponTypeLongRange",
}
_SUBTYPE_ICON_FMT = "/Game/UI/Texture/Dynamic/Atlas/Armory/T_Armory_WeaponType_{0}.T_Armory_WeaponType_{0}"

_INT_KEY_RE = re.compile(r"^\d+$")


@dataclass(frozen=True)
class CatalogEntry:
    """One catalog row, reduced to what cross-references need."""

    id: int
    category: str
    name_key: Optional[str] = None
    description_key: Optional[str] = None
    icon_path: Optional[str] = None
    rarity: Optional[Number] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    fields: Dict[str, Scalar] = field(default_factory=dict)
    extra_text_keys: Tuple[str, ...] = ()

    def text_keys(self) -> List[str]:
        out = [k for k in (self.name_key, self.description_key) if k]
        out.extend(k for k in self.extra_text_keys if k and k not in out)
        return out


Catalog = Dict[int, CatalogEntry]


def _str(v: Any) -> Optional[str]:
    return v if isinstance(v, str) else None


def _num(v: Any) -> Optional[Number]:
    return v if isinstance(v, (int, float)) and not isinstance(v, bool) else None


def _entry_id(entry: EntryRecord, id_field: str) -> int:
    v = _num(entry.fields.get(id_field))
    return int(v) if v is not None else entry.key


def _flat(fields: Mapping[str, Scalar]) -> Dict[str, Scalar]:
    return {k: v for k, v in fields.items() if v is not None}


def collect_numbers(value: Optional[ParsedValue]) -> List[Number]:
    """Every number in a resolved tree (integer-keyed children in key order), deduplicated."""
    out: List[Number] = []

    def visit(node: Any) -> None:
        if node is None:
            return
        if _num(node) is not None:
            if node not in out:
                out.append(node)
            return
        if isinstance(node, list):
            for x in node:
                visit(x)
            return
        if isinstance(node, dict):
            for k in sorted((k for k in node if _INT_KEY_RE.match(k)), key=int):
                visit(node[k])

    visit(value)
    return out


@dataclass(frozen=True)
class GuideArchive:
    """A ModGuideBookArchive row: a named group of mods."""

    archive_id: int
    name_key: Optional[str] = None
    mod_ids: Tuple[int, ...] = ()


def _int_list(value: Scalar) -> List[int]:
    if isinstance(value, list):
        return [int(v) for v in value if _num(v) is not None]
    if isinstance(value, str):
        return [int(m) for m in re.findall(r"\d+", value)]
    n = _num(value)
    return [int(n)] if n is not None else []


def parse_guide_archives(entries: Iterable[EntryRecord]) -> Dict[int, GuideArchive]:
    return {
        e.key: GuideArchive(e.key, _str(e.fields.get("Name")), tuple(_int_list(e.fields.get("ModList"))))
        for e in entries
    }


def build_mod_catalog(
    entries: Iterable[EntryRecord],
    archive_by_mod: Optional[Mapping[int, int]] = None,
    guide_archives: Optional[Mapping[int, GuideArchive]] = None,
) -> Catalog:
    """
    Mods keyed by entry index. The archive id comes from ModId2ArchiveId,
    else from the guide archive whose ModList names the mod.
    """
    archives = archive_by_mod or {}
    guides = guide_archives or {}
    guide_by_mod: Dict[int, int] = {}
    for g in guides.values():
        for mid in g.mod_ids:
            guide_by_mod.setdefault(mid, g.archive_id)

    out: Catalog = {}
    for entry in entries:
        f = entry.fields
        mod_id = entry.key
        archive_id = archives.get(mod_id)
        if archive_id is None:
            archive_id = guide_by_mod.get(mod_id)
        guide = guides.get(archive_id) if archive_id is not None else None
        archive_name_key = guide.name_key if guide is not None else None
        extra = tuple(
            k for k in (_str(f.get("TypeName")), _str(f.get("FunctionDes")), archive_name_key) if k
        )
        out[mod_id] = CatalogEntry(
            id=mod_id,
            category="mods",
            name_key=_str(f.get("Name")),
            description_key=_str(f.get("ModDescribe")) or _str(f.get("Desc")),
            icon_path=_str(f.get("Icon")),
            rarity=_num(f.get("Rarity")),
            metadata={
                "archiveId": archive_id,
                "archiveNameKey": archive_name_key,
                "polarity": _num(f.get("Polarity")),
                "maxLevel": _num(f.get("MaxLevel")),
                "cost": _num(f.get("Cost")),
                "demonWedgeKey": _str(f.get("TypeName")),
                "functionKey": _str(f.get("FunctionDes")),
                "releaseVersion": _num(f.get("ReleaseVersion")),
                "openVersion": _num(f.get("OpenVersion")),
            },
            fields=_flat(f),
            extra_text_keys=extra,
        )
    return out


def build_resource_catalog(entries: Iterable[EntryRecord]) -> Catalog:
    out: Catalog = {}
    for entry in entries:
        f = entry.fields
        rid = _entry_id(entry, "ResourceId")
        out[rid] = CatalogEntry(
            id=rid,
            category="resources",
            name_key=_str(f.get("Name")) or _str(f.get("ResourceName")),
            description_key=_str(f.get("Des")) or _str(f.get("Desc")),
            icon_path=_str(f.get("Icon")),
            rarity=_num(f.get("Rarity")),
            metadata={"resourceSType": _str(f.get("ResourceSType"))},
            fields=_flat(f),
        )
    return out


def normalize_weapon_subtype(raw: Optional[str], aliases: Mapping[str, str] = WEAPON_SUBTYPE_ALIASES) -> Optional[str]:
    if not raw or not raw.strip():
        return None
    s = raw.strip()
    return aliases.get(s, s)


def infer_weapon_class(weapon_id: int) -> str:
    """Weapon ids are grouped by ten-thousands: 1xxxx melee, 2xxxx ranged."""
    family = abs(int(weapon_id)) // 10000
    if family == 1:
        return "Melee"
    if family == 2:
        return "Ranged"
    return "Unknown"


def build_weapon_catalog(
    entries: Iterable[EntryRecord],
    tables: Optional[Mapping[str, ParsedValue]] = None,
    subtype_aliases: Mapping[str, str] = WEAPON_SUBTYPE_ALIASES,
) -> Catalog:
    runtime = dict(tables or {})
    out: Catalog = {}
    for entry in entries:
        f = entry.fields
        wid = _entry_id(entry, "WeaponId")
        raw_subtype = _str(f.get("GUIPathVariableType"))
        subtype = normalize_weapon_subtype(raw_subtype, subtype_aliases)
        klass = infer_weapon_class(wid)
        class_key = _WEAPON_CLASS_TEXT_KEYS.get(klass)
        subtype_key = f"WeaponType_{subtype}" if subtype else None
        skin_types = collect_numbers(resolve_field(f.get("SkinApplicationType"), runtime))

        out[wid] = CatalogEntry(
            id=wid,
            category="weapons",
            name_key=_str(f.get("WeaponName")),
            description_key=_str(f.get("WeaponDescribe")),
            icon_path=_str(f.get("Icon")),
            rarity=_num(f.get("WeaponRarity")),
            metadata={
                "classType": klass,
                "classTextKey": class_key,
                "classIconGamePath": _WEAPON_CLASS_ICONS.get(klass),
                "subtype": raw_subtype,
                "subtypeNormalized": subtype,
                "subtypeTextKey": subtype_key,
                "subtypeIconGamePath": _SUBTYPE_ICON_FMT.format(subtype) if subtype else None,
                "guiPathVariableName": _str(f.get("GUIPathVariableName")),
                "bigIconGamePath": _str(f.get("BigIcon")),
                "gachaIconGamePath": _str(f.get("GachaIcon")),
                "weaponMaxLevel": _num(f.get("WeaponMaxLevel")),
                "weaponToCoinType": _num(f.get("WeaponToCoinType")),
                "weaponValue": _num(f.get("WeaponValue")),
                "collectRewardExp": _num(f.get("CollectRewardExp")),
                "decomposeReward": _num(f.get("DecomposeReward")),
                "sortPriority": _num(f.get("SortPriority")),
                "skinApplicationTypes": skin_types,
                "releaseVersion": _num(f.get("ReleaseVersion")),
                "openVersion": _num(f.get("OpenVersion")),
            },
            fields=_flat(f),
            extra_text_keys=tuple(k for k in (class_key, subtype_key) if k),
        )
    return out


def build_accessory_catalog(entries: Iterable[EntryRecord]) -> Catalog:
    out: Catalog = {}
    for entry in entries:
        f = entry.fields
        aid = _entry_id(entry, "AccessoryId")
        out[aid] = CatalogEntry(
            id=aid,
            category="char-accessories",
            name_key=_str(f.get("Name")),
            description_key=_str(f.get("Des")),
            icon_path=_str(f.get("Icon")),
            rarity=_num(f.get("Rarity")),
            metadata={
                "accessoryType": _str(f.get("AccessoryType")),
                "releaseVersion": _num(f.get("ReleaseVersion")),
                "openVersion": _num(f.get("OpenVersion")),
            },
            fields=_flat(f),
        )
    return out
