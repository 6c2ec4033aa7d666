# -*- coding: utf-8 -*-
"""TextMap localization dumps.

Each per-language dump repeats blocks like

    UI_Armory_Longrange = {
      ContentEN = "Ranged Weapons",
    },

and a block may also sit on one line with several `Content<LANG>` fields.
Only requested keys are kept; every file is read once, line by line.
"""

from __future__ import annotations

import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set, Union

from dna_core.lua.scan import decode_lua_string

__all__ = [
    "LanguageFile",
    "TextTable",
    "discover_language_files",
    "load_text_map",
    "load_text_maps",
    "DEFAULT_FALLBACK_LANGUAGE",
]

DEFAULT_FALLBACK_LANGUAGE = "EN"

_FILE_RE = re.compile(r"^TextMap_Content([A-Z]+)_decompiled\.lua$")
_BLOCK_START_RE = re.compile(r"^\s*([A-Za-z0-9_]+)\s*=\s*\{(.*)$")
_BLOCK_END_RE = re.compile(r"^\s*\},?\s*$")
_CONTENT_RE = re.compile(r'Content([A-Z]+)\s*=\s*"((?:\\.|[^"\\])*)"')


@dataclass(frozen=True)
class LanguageFile:
    code: str
    path: Path


def discover_language_files(datas_dir: Union[str, Path]) -> List[LanguageFile]:
    """Find `TextMap_Content<CODE>_decompiled.lua` files, sorted by code."""
    root = Path(datas_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"TextMap directory not found: {root}")
    out: List[LanguageFile] = []
    for p in root.iterdir():
        if not p.is_file():
            continue
        m = _FILE_RE.match(p.name)
        if m:
            out.append(LanguageFile(code=m.group(1), path=p))
    return sorted(out, key=lambda lf: lf.code)


def _collect_contents(text: str, keep: Dict[str, str], languages: Optional[Set[str]]) -> None:
    for m in _CONTENT_RE.finditer(text):
        code = m.group(1)
        if languages is not None and code not in languages:
            continue
        keep[code] = decode_lua_string(m.group(2))


def load_text_map(
    path: Union[str, Path],
    wanted_keys: Iterable[str],
    languages: Optional[Iterable[str]] = None,
) -> Dict[str, Dict[str, str]]:
    """Return key -> {LANG: text} for the requested keys found in one file."""
    wanted = set(wanted_keys)
    langs = {str(c).upper() for c in languages} if languages is not None else None
    out: Dict[str, Dict[str, str]] = {}

    current: Optional[str] = None
    keep = False
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for line in f:
            m = _BLOCK_START_RE.match(line)
            if m:
                current = m.group(1)
                keep = current in wanted
                rest = m.group(2)
                if keep:
                    _collect_contents(rest, out.setdefault(current, {}), langs)
                if rest.rstrip().rstrip(",").endswith("}"):
                    current, keep = None, False
                continue
            if current is None:
                continue
            if keep:
                _collect_contents(line, out.setdefault(current, {}), langs)
            if _BLOCK_END_RE.match(line):
                current, keep = None, False

    return {k: v for k, v in out.items() if v}


@dataclass
class TextTable:
    """Merged per-language text: lang -> key -> text. Read-only once built."""

    by_language: Dict[str, Dict[str, str]] = field(default_factory=dict)
    fallback: str = DEFAULT_FALLBACK_LANGUAGE

    @property
    def languages(self) -> List[str]:
        return sorted(self.by_language.keys())

    def get(self, lang: str, key: str) -> Optional[str]:
        return self.by_language.get(lang, {}).get(key)

    def translations(self, key: str) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for lang in self.languages:
            val = self.get(lang, key)
            if val is not None:
                out[lang] = val
        return out

    def translate(self, key: Optional[str], lang: str) -> Optional[str]:
        """Language text, then fallback-language text, then the key itself."""
        if not key:
            return None
        val = self.get(lang, key)
        if val is None:
            val = self.get(self.fallback, key)
        return key if val is None else val

    def lookup(self, key: str, preferred: Sequence[str] = ("FR", DEFAULT_FALLBACK_LANGUAGE)) -> str:
        """First available translation in preference order; the key is the last resort."""
        for lang in preferred:
            val = self.get(lang, key)
            if val is not None:
                return val
        return key

    def by_languages(self, key: Optional[str], languages: Sequence[str]) -> Dict[str, Optional[str]]:
        return {lang: self.translate(key, lang) for lang in languages}


def _load_one(lf: LanguageFile, wanted: Set[str]) -> Dict[str, Dict[str, str]]:
    per_key = load_text_map(lf.path, wanted, languages=[lf.code])
    own: Dict[str, str] = {}
    for key, by_lang in per_key.items():
        if lf.code in by_lang:
            own[key] = by_lang[lf.code]
    return {lf.code: own}


def load_text_maps(
    files: Sequence[LanguageFile],
    wanted_keys: Iterable[str],
    *,
    workers: int = 1,
    fallback: str = DEFAULT_FALLBACK_LANGUAGE,
) -> TextTable:
    """Load every language file and merge them into one TextTable."""
    wanted = set(wanted_keys)
    results: List[Dict[str, Dict[str, str]]]
    if workers > 1 and len(files) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(lambda lf: _load_one(lf, wanted), files))
    else:
        results = [_load_one(lf, wanted) for lf in files]

    merged: Dict[str, Dict[str, str]] = {}
    for part in results:
        for code, mp in part.items():
            merged.setdefault(code, {}).update(mp)
    return TextTable(by_language=merged, fallback=fallback)
