from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from rich.console import Console

from ..config import load_settings
from ..core.catalog import resolve_catalog
from ..pipeline import TriagePipeline
from .render import emit_result
from .ui_utils import add_matching_args, configure_logging, settings_from_args


def _build_parser(settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scraptriage text",
        description="Triage inventory text that was already OCR'd or typed in.",
    )
    parser.add_argument(
        "source",
        nargs="?",
        default="-",
        help="Text file to read, or '-' for stdin (default).",
    )
    add_matching_args(parser, settings)
    return parser


def _read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    with open(source, "r", encoding="utf-8") as fh:
        return fh.read()


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = load_settings()
    parser = _build_parser(settings)
    args = parser.parse_args(list(argv) if argv is not None else None)
    configure_logging(args.verbose)
    settings = settings_from_args(settings, args)

    console = Console()
    try:
        catalog = resolve_catalog(settings.catalog_path)
        text = _read_source(args.source)
    except (ValueError, OSError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        return 1

    result = TriagePipeline(catalog, settings).analyze_text(text)
    emit_result(result, args.json, console)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
