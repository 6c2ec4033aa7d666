#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""DumpEngine (dna_core)

This module is intentionally UI-agnostic.

Responsibilities
- Read every decompiled dump up front (Draft / Weapon / CharAccessory / Mod,
  optional Resource, ModId2ArchiveId and ModGuideBookArchive) so parsing
  runs on in-memory text.
- Build one runtime symbol table per dump, the item catalogs, the TextMap tables and
  the icon asset index.
- Link recipes through CatalogLinker.

Design notes
- Engine must be usable by CLI and tests alike.
- No Rich here. Use `silent=True` to suppress logs.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from dna_core.config import get_config
from dna_core.indexers.asset_index import DIRECTORY_AFFINITY, build_asset_index
from dna_core.indexers.catalogs import (
    WEAPON_SUBTYPE_ALIASES,
    Catalog,
    build_accessory_catalog,
    build_mod_catalog,
    build_resource_catalog,
    build_weapon_catalog,
    parse_guide_archives,
)
from dna_core.indexers.drafts import DraftBuild, build_draft_recipes
from dna_core.indexers.linker import CatalogLinker, PublicPathRewriter
from dna_core.lua.entries import EntryRecord, extract_int_map, extract_readonly_entries
from dna_core.lua.expr import ParsedValue
from dna_core.lua.runtime import parse_runtime_tables
from dna_core.parsers.textmap import DEFAULT_FALLBACK_LANGUAGE, LanguageFile, TextTable, discover_language_files, load_text_maps

logger = logging.getLogger(__name__)

REQUIRED_DUMPS = {
    "Draft": "Draft_decompiled.lua",
    "Weapon": "Weapon_decompiled.lua",
    "CharAccessory": "CharAccessory_decompiled.lua",
    "Mod": "Mod_decompiled.lua",
}
OPTIONAL_DUMPS = {
    "Resource": "Resource_decompiled.lua",
    "ModId2ArchiveId": "ModId2ArchiveId_decompiled.lua",
    "ModGuideBookArchive": "ModGuideBookArchive_decompiled.lua",
}


def _expanduser(p: Optional[str]) -> Optional[str]:
    return os.path.expanduser(p) if p else None


class DumpEngine:
    """Main entry used by devtools and tests.

    Parameters
    - data_dir: folder holding the *_decompiled.lua dumps (overrides config).
    - asset_dirs: exported texture folders (overrides config).
    - asset_root: asset paths are stored relative to this folder.
    - languages: language codes to localize; defaults to every TextMap found.
    - workers: threads used to load TextMap files.
    - public_path: optional rewriter from a chosen asset path to a public path.
    - silent: suppress all logs.
    """

    def __init__(
        self,
        data_dir: Optional[str] = None,
        *,
        asset_dirs: Optional[Sequence[str]] = None,
        asset_root: Optional[str] = None,
        languages: Optional[Sequence[str]] = None,
        fallback_language: Optional[str] = None,
        workers: Optional[int] = None,
        subtype_aliases=WEAPON_SUBTYPE_ALIASES,
        affinity: Sequence[str] = DIRECTORY_AFFINITY,
        public_path: Optional[PublicPathRewriter] = None,
        silent: bool = False,
        encoding: str = "utf-8",
    ):
        self.silent = bool(silent)
        self.encoding = encoding
        cfg = get_config()

        if data_dir is None and cfg is not None:
            resolved = cfg.resolve_path("PATHS", "DATA_DIR")
            data_dir = str(resolved) if resolved else None
        if not data_dir:
            raise FileNotFoundError("No data directory given and none configured in conf/settings.ini.")
        self.data_dir = Path(_expanduser(str(data_dir)))

        if asset_dirs is None and cfg is not None:
            asset_dirs = [str(cfg.project_root / p) if not os.path.isabs(p) else p for p in cfg.get_list("PATHS", "ASSET_DIRS")]
        self.asset_dirs: List[str] = [_expanduser(str(d)) for d in (asset_dirs or [])]
        self.asset_root = _expanduser(asset_root)

        if fallback_language is None:
            fallback_language = cfg.get("LOCALE", "FALLBACK") if cfg is not None else None
        self.fallback_language = (fallback_language or DEFAULT_FALLBACK_LANGUAGE).upper()
        if workers is None:
            raw = cfg.get("LOCALE", "WORKERS") if cfg is not None else None
            workers = int(raw) if raw and raw.isdigit() else 1
        self.workers = max(1, int(workers))
        self.requested_languages = [c.upper() for c in languages] if languages else None

        self.subtype_aliases = subtype_aliases
        self.affinity = tuple(affinity)
        self.public_path = public_path

        self.sources: Dict[str, str] = {}
        self.language_files: List[LanguageFile] = []
        self.asset_index: Dict[str, List[str]] = {}

        self.tables: Dict[str, Dict[str, ParsedValue]] = {}
        self.entries: Dict[str, List[EntryRecord]] = {}
        self.catalogs: Dict[str, Catalog] = {}
        self.text: TextTable = TextTable(fallback=self.fallback_language)
        self.linker: Optional[CatalogLinker] = None
        self.drafts: Optional[DraftBuild] = None

    def _log(self, msg: str) -> None:
        if not self.silent:
            logger.info(msg)

    # --------------------------------------------------------
    # IO
    # --------------------------------------------------------

    def _read(self, name: str) -> str:
        p = self.data_dir / name
        with open(p, "r", encoding=self.encoding, errors="replace") as f:
            return f.read()

    def read_sources(self) -> None:
        """Read dumps, list TextMap files and index assets; nothing is parsed yet."""
        if not self.data_dir.is_dir():
            raise FileNotFoundError(f"Data directory not found: {self.data_dir}")

        for table, fname in REQUIRED_DUMPS.items():
            p = self.data_dir / fname
            if not p.is_file():
                raise FileNotFoundError(f"Required dump missing: {p}")
            self.sources[table] = self._read(fname)
        for table, fname in OPTIONAL_DUMPS.items():
            if (self.data_dir / fname).is_file():
                self.sources[table] = self._read(fname)
            else:
                self._log(f"Optional dump not found, skipped: {fname}")

        self.language_files = discover_language_files(self.data_dir)
        if self.requested_languages:
            wanted = set(self.requested_languages) | {self.fallback_language}
            self.language_files = [lf for lf in self.language_files if lf.code in wanted]
        self._log(f"TextMap files: {', '.join(lf.code for lf in self.language_files) or '-'}")

        self.asset_index = build_asset_index(self.asset_dirs, root=self.asset_root)
        self._log(f"Asset index: {len(self.asset_index)} basenames from {len(self.asset_dirs)} dir(s)")

    # --------------------------------------------------------
    # Parsing
    # --------------------------------------------------------

    def _path_of(self, table: str) -> str:
        return str(self.data_dir / REQUIRED_DUMPS.get(table, OPTIONAL_DUMPS.get(table, table)))

    def build_catalogs(self) -> None:
        # one symbol table per dump: generated names such as T.RT_1 repeat across files
        for table in ("Draft", "Weapon"):
            self.tables[table] = parse_runtime_tables(self.sources[table])
            self._log(f"{table} runtime tables: {len(self.tables[table])}")

        for table in ("Draft", "Weapon", "CharAccessory", "Mod", "Resource", "ModGuideBookArchive"):
            if table not in self.sources:
                self.entries[table] = []
                continue
            self.entries[table] = extract_readonly_entries(self.sources[table], table, path=self._path_of(table))
            self._log(f"{table}: {len(self.entries[table])} entries")

        archives = extract_int_map(self.sources.get("ModId2ArchiveId", ""))
        guides = parse_guide_archives(self.entries["ModGuideBookArchive"])
        self.catalogs = {
            "mods": build_mod_catalog(self.entries["Mod"], archives, guides),
            "resources": build_resource_catalog(self.entries["Resource"]),
            "weapons": build_weapon_catalog(self.entries["Weapon"], self.tables["Weapon"], self.subtype_aliases),
            "char-accessories": build_accessory_catalog(self.entries["CharAccessory"]),
        }

    def wanted_text_keys(self) -> List[str]:
        keys: List[str] = []
        seen = set()
        for catalog in self.catalogs.values():
            for entry in catalog.values():
                for k in entry.text_keys():
                    if k not in seen:
                        seen.add(k)
                        keys.append(k)
        return keys

    def load_text(self) -> None:
        wanted = self.wanted_text_keys()
        self.text = load_text_maps(
            self.language_files,
            wanted,
            workers=self.workers,
            fallback=self.fallback_language,
        )
        self._log(f"Text keys requested: {len(wanted)}, languages: {len(self.text.languages)}")

    def link(self) -> DraftBuild:
        languages = self.requested_languages or self.text.languages or [self.fallback_language]
        self.linker = CatalogLinker(
            self.catalogs,
            text_table=self.text,
            languages=languages,
            asset_index=self.asset_index,
            affinity=self.affinity,
            public_path=self.public_path,
        )
        self.drafts = build_draft_recipes(self.entries["Draft"], self.tables["Draft"], self.linker, self.asset_index)
        self._log(
            f"Unresolved products: {self.drafts.unresolved_products}, "
            f"unresolved ingredients: {self.drafts.unresolved_ingredients}"
        )
        return self.drafts

    def run(self) -> DraftBuild:
        """read_sources -> build_catalogs -> load_text -> link."""
        self.read_sources()
        self.build_catalogs()
        self.load_text()
        return self.link()
