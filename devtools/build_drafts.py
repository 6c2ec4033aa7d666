#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Build crafting recipes (drafts) from the decompiled dumps and report unresolved references."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from rich.console import Console
from rich.table import Table

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from dna_core.engine import DumpEngine  # noqa: E402
from dna_core.errors import DumpError  # noqa: E402
from dna_core.indexers.drafts import DraftBuild  # noqa: E402

console = Console()


def _split_csv(raw: Optional[str]) -> Optional[List[str]]:
    if not raw:
        return None
    out = [p.strip() for p in raw.split(",") if p.strip()]
    return out or None


def _counts_table(title: str, counts: Dict[str, int]) -> Table:
    table = Table(title=title, box=None, show_header=True, header_style="bold cyan")
    table.add_column("Type", style="bold")
    table.add_column("Count", justify="right")
    for k, v in sorted(counts.items()):
        table.add_row(k, str(v))
    return table


def _report(build: DraftBuild, engine: DumpEngine) -> None:
    summary = Table(title="Draft build", box=None, show_header=False)
    summary.add_column("Key", style="bold")
    summary.add_column("Value", justify="right")
    summary.add_row("Recipes", str(len(build.recipes)))
    for name, catalog in engine.catalogs.items():
        summary.add_row(f"Catalog: {name}", str(len(catalog)))
    summary.add_row("Languages", ", ".join(engine.text.languages) or "-")
    summary.add_row("Asset basenames", str(len(engine.asset_index)))
    console.print(summary)

    console.print(_counts_table("Product types", build.product_type_counts()))
    console.print(_counts_table("Ingredient types", build.ingredient_type_counts()))

    style = "yellow" if (build.unresolved_products or build.unresolved_ingredients or build.unresolved_icons) else "green"
    console.print(
        f"[{style}]Unresolved products: {build.unresolved_products}, "
        f"unresolved ingredients: {build.unresolved_ingredients}, "
        f"unresolved icons: {build.unresolved_icons}[/{style}]"
    )


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Build draft recipes from decompiled dumps")
    p.add_argument("--data-dir", default=None, help="Folder with *_decompiled.lua dumps (overrides PATHS.DATA_DIR)")
    p.add_argument("--asset-dir", action="append", default=None, help="Exported texture folder; repeatable")
    p.add_argument("--asset-root", default=None, help="Store asset paths relative to this folder")
    p.add_argument("--languages", default=None, help="Comma separated language codes (default: all TextMap files)")
    p.add_argument("--workers", type=int, default=None, help="Threads used to load TextMap files")
    p.add_argument("--out", default=None, help="Optional JSON output path")
    p.add_argument("--verbose", action="store_true", help="Log engine progress")
    args = p.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        engine = DumpEngine(
            args.data_dir,
            asset_dirs=args.asset_dir,
            asset_root=args.asset_root,
            languages=_split_csv(args.languages),
            workers=args.workers,
            silent=not args.verbose,
        )
        build = engine.run()
    except (FileNotFoundError, DumpError) as e:
        console.print(f"[red]{e}[/red]")
        return 1

    _report(build, engine)

    if args.out:
        out_path = Path(args.out).resolve()
        out_path.parent.mkdir(parents=True, exist_ok=True)
        doc = [r.to_dict() for r in build.recipes]
        out_path.write_text(json.dumps(doc, ensure_ascii=False, indent=2), encoding="utf-8")
        console.print(f"[green]Recipes written: {out_path}[/green]")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
