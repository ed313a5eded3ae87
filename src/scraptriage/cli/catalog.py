from __future__ import annotations

import argparse
import json
from typing import Optional, Sequence

from rich.console import Console

from ..config import load_settings
from ..core.catalog import resolve_catalog
from .render import render_catalog
from .ui_utils import add_verbosity_arg, configure_logging


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = load_settings()
    parser = argparse.ArgumentParser(
        prog="scraptriage catalog",
        description="List the items the triage rules know about.",
    )
    parser.add_argument(
        "--catalog",
        default=settings.catalog_path,
        help="Catalog JSON file (defaults to the bundled catalog).",
    )
    parser.add_argument("--category", help="Only show one category (e.g. ammo).")
    parser.add_argument("--json", action="store_true", help="Print entries as JSON.")
    add_verbosity_arg(parser)
    args = parser.parse_args(list(argv) if argv is not None else None)
    configure_logging(args.verbose)

    console = Console()
    try:
        catalog = resolve_catalog(args.catalog)
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        return 1

    if args.json:
        wanted = args.category.strip().lower() if args.category else None
        payload = [
            {
                "name": entry.name,
                "category": entry.category,
                "defaultKeepMin": entry.default_keep_min,
            }
            for entry in catalog.values()
            if not wanted or entry.category == wanted
        ]
        print(json.dumps(payload, indent=2))
        return 0

    shown = render_catalog(catalog, console, category=args.category)
    if args.category and not shown:
        known = ", ".join(catalog.categories()) or "none"
        console.print(f"[yellow]No items in category {args.category!r}.[/yellow] Known: {known}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
