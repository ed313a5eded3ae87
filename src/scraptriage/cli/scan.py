from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console

from ..config import config_dir, load_settings
from ..core.catalog import resolve_catalog
from ..ocr import enable_ocr_debug, initialize_ocr, load_screenshot
from ..pipeline import TriagePipeline
from .render import emit_result
from .ui_utils import add_matching_args, byte_arg, configure_logging, settings_from_args

log = logging.getLogger(__name__)


def _build_parser(settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scraptriage scan",
        description="Find item slots in an inventory screenshot, read them, and triage the stacks.",
    )
    parser.add_argument("image", type=Path, help="Screenshot file (PNG/JPG).")
    parser.add_argument(
        "--threshold",
        type=byte_arg,
        default=settings.brightness_threshold,
        help="Brightness cut (0-255) used to find slots.",
    )
    parser.add_argument(
        "--ocr-threshold",
        type=byte_arg,
        default=settings.ocr_threshold,
        help="Brightness cut (0-255) applied to each slot before OCR.",
    )
    parser.add_argument(
        "--invert",
        dest="ocr_invert",
        action="store_true",
        default=settings.ocr_invert,
        help="Invert slot crops before OCR (dark text on light background).",
    )
    parser.add_argument(
        "--no-full-frame",
        dest="full_frame_fallback",
        action="store_false",
        default=settings.full_frame_fallback,
        help="Do not OCR the whole screenshot when no slot is found.",
    )
    parser.add_argument(
        "--tesseract",
        dest="tesseract_cmd",
        default=settings.tesseract_cmd,
        help="Path to the tesseract executable.",
    )
    parser.add_argument(
        "--debug-ocr",
        action="store_true",
        default=settings.debug_ocr,
        help="Save raw and preprocessed slot crops for inspection.",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Hide the per-slot progress bar.",
    )
    add_matching_args(parser, settings)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = load_settings()
    parser = _build_parser(settings)
    args = parser.parse_args(list(argv) if argv is not None else None)
    configure_logging(args.verbose)

    settings = replace(
        settings_from_args(settings, args),
        brightness_threshold=args.threshold,
        ocr_threshold=args.ocr_threshold,
        ocr_invert=args.ocr_invert,
        full_frame_fallback=args.full_frame_fallback,
        tesseract_cmd=args.tesseract_cmd,
        debug_ocr=args.debug_ocr,
    )

    console = Console()
    try:
        catalog = resolve_catalog(settings.catalog_path)
        image = load_screenshot(args.image)
        initialize_ocr(settings.tesseract_cmd)
        if settings.debug_ocr:
            enable_ocr_debug(config_dir() / "ocr_debug")
        pipeline = TriagePipeline(catalog, settings)
        result = pipeline.analyze_image(
            image,
            show_progress=not (args.no_progress or args.json),
        )
    except (ValueError, RuntimeError, OSError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        return 1

    emit_result(result, args.json, console)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
