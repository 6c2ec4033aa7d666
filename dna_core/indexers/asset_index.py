# -*- coding: utf-8 -*-
"""Icon asset lookup: engine asset paths -> exported image files on disk."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

__all__ = [
    "AssetResolution",
    "IMAGE_EXTENSIONS",
    "DIRECTORY_AFFINITY",
    "build_asset_index",
    "icon_candidates",
    "normalize_game_asset_path",
    "pick_best_asset",
    "resolve_icon",
    "score_asset_match",
]

IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".webp", ".bmp", ".gif", ".tga", ".dds"})

# directory segments rewarded when both the engine path and the file path contain them
DIRECTORY_AFFINITY: Tuple[str, ...] = (
    "/prop/draft/",
    "/image/head/weapon/",
    "/prop/fashion/",
    "/atlas/prop/item/",
)

_QUOTED_RE = re.compile(r"""^[A-Za-z0-9_]+['"](.+?)['"]$""")
_VARIANT_SUFFIX_RE = re.compile(r"_0\d+$", re.IGNORECASE)

_EXACT_BONUS = 100.0
_MAX_PENALTY = 0.999


@dataclass(frozen=True)
class AssetResolution:
    symbolic_path: Optional[str]
    candidates: List[str] = field(default_factory=list)
    matches: List[str] = field(default_factory=list)
    chosen: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "gamePath": self.symbolic_path,
            "candidates": list(self.candidates),
            "allMatches": list(self.matches),
            "sourceRel": self.chosen,
        }


def normalize_game_asset_path(value: Optional[str]) -> Optional[str]:
    """`Texture2D'/Game/UI/X.X'` -> `/Game/UI/X.X`; blank -> None."""
    if not value:
        return None
    s = value.strip()
    if not s:
        return None
    m = _QUOTED_RE.match(s)
    return m.group(1) if m else s


def icon_candidates(symbolic_path: Optional[str]) -> List[str]:
    """Basenames worth looking up for an engine path, in priority order."""
    normalized = normalize_game_asset_path(symbolic_path)
    if not normalized:
        return []
    segment = normalized.split("/")[-1].replace("'", "")
    out: List[str] = []

    def _push(v: str) -> None:
        if v and v not in out:
            out.append(v)

    def _add(part: str) -> None:
        _push(part)
        if part.startswith("T_"):
            _push(part[2:])
        else:
            _push("T_" + part)
        stripped = _VARIANT_SUFFIX_RE.sub("", part)
        if stripped != part:
            _push(stripped)
            if stripped.startswith("T_"):
                _push(stripped[2:])

    for part in segment.split("."):
        if part:
            _add(part)
    return out


def _to_posix(p: str) -> str:
    return p.replace("\\", "/")


def build_asset_index(
    asset_dirs: Iterable[Union[str, Path]],
    root: Optional[Union[str, Path]] = None,
    extensions: Iterable[str] = IMAGE_EXTENSIONS,
) -> Dict[str, List[str]]:
    """
    Walk asset directories once; map lower-cased basename (no extension) to
    every image path with that name. Paths are relative to root when given.
    """
    exts = {e.lower() for e in extensions}
    base = Path(root).resolve() if root is not None else None
    index: Dict[str, List[str]] = {}
    for d in asset_dirs:
        dp = Path(d)
        if not dp.is_dir():
            continue
        for dirpath, dirnames, filenames in os.walk(dp):
            dirnames.sort()
            for name in sorted(filenames):
                stem, ext = os.path.splitext(name)
                if ext.lower() not in exts:
                    continue
                full = Path(dirpath) / name
                if base is not None:
                    try:
                        rel = os.path.relpath(full.resolve(), base)
                    except ValueError:
                        rel = str(full)
                else:
                    rel = str(full)
                index.setdefault(stem.lower(), []).append(_to_posix(rel))
    return index


def _game_basename(symbolic_path: str) -> str:
    normalized = normalize_game_asset_path(symbolic_path) or ""
    return normalized.split("/")[-1].split(".")[0].lower()


def score_asset_match(
    path: str,
    symbolic_path: Optional[str],
    affinity: Sequence[str] = DIRECTORY_AFFINITY,
) -> float:
    """
    Higher is better.

    +100 exact basename match, +20 per shared affinity directory, +2 per
    path token (>= 3 chars) from the last 6 engine segments found in the
    file path, minus 0.001 per character of the file path (capped below 1).
    """
    penalty = len(path) * 0.001
    if not symbolic_path:
        return -min(penalty, _MAX_PENALTY)
    source = _to_posix(path).lower()
    game = symbolic_path.lower()

    bonus = 0.0
    for seg in affinity:
        seg = seg.lower()
        if seg in game and seg in source:
            bonus += 20

    tokens = [t.strip() for t in game.split("/")]
    tokens = [t for t in tokens if len(t) >= 3][-6:]
    for tok in tokens:
        if tok in source:
            bonus += 2

    # an exact basename must outrank everything else
    score = min(bonus, _EXACT_BONUS - 2)
    game_base = _game_basename(symbolic_path)
    source_base = PurePosixPath(source).stem
    if game_base and source_base == game_base:
        score += _EXACT_BONUS
    return score - min(penalty, _MAX_PENALTY)


def pick_best_asset(
    matches: Sequence[str],
    symbolic_path: Optional[str],
    affinity: Sequence[str] = DIRECTORY_AFFINITY,
) -> Optional[str]:
    """Highest score wins; the first-seen match wins ties."""
    best: Optional[str] = None
    best_score = float("-inf")
    for m in matches:
        s = score_asset_match(m, symbolic_path, affinity)
        if s > best_score:
            best, best_score = m, s
    return best


def resolve_icon(
    symbolic_path: Optional[str],
    index: Dict[str, List[str]],
    affinity: Sequence[str] = DIRECTORY_AFFINITY,
) -> AssetResolution:
    normalized = normalize_game_asset_path(symbolic_path)
    if not normalized:
        return AssetResolution(symbolic_path=None)

    candidates = icon_candidates(normalized)
    matches: List[str] = []
    for cand in candidates:
        for p in index.get(cand.lower(), []):
            if p not in matches:
                matches.append(p)
    return AssetResolution(
        symbolic_path=normalized,
        candidates=candidates,
        matches=matches,
        chosen=pick_best_asset(matches, normalized, affinity),
    )
