# -*- coding: utf-8 -*-
"""Catalogs, icon lookup and reference linking."""

from dna_core.indexers.asset_index import AssetResolution, build_asset_index, resolve_icon
from dna_core.indexers.catalogs import CatalogEntry
from dna_core.indexers.drafts import DraftBuild, DraftRecipe, build_draft_recipes
from dna_core.indexers.linker import CatalogLinker, RefKind, ResolvedReference

__all__ = [
    "AssetResolution",
    "CatalogEntry",
    "CatalogLinker",
    "DraftBuild",
    "DraftRecipe",
    "RefKind",
    "ResolvedReference",
    "build_asset_index",
    "build_draft_recipes",
    "resolve_icon",
]
