from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from ..config import TriageSettings
from ..core.matcher import DuplicatePolicy

_ACTION_STYLES = {
    "KEEP": "green",
    "MAYBE": "yellow",
    "RECYCLE": "cyan",
}


def action_style(label: str) -> str:
    return _ACTION_STYLES.get(label.upper(), "white")


def configure_logging(verbosity: int = 0, console: Optional[Console] = None) -> None:
    """WARNING by default, INFO with -v, DEBUG with -vv."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console or Console(stderr=True), show_path=False)],
        force=True,
    )


def unit_float_arg(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be a number") from exc
    if not 0.0 <= parsed <= 1.0:
        raise argparse.ArgumentTypeError("must be between 0 and 1")
    return parsed


def byte_arg(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be an integer") from exc
    if not 0 <= parsed <= 255:
        raise argparse.ArgumentTypeError("must be between 0 and 255")
    return parsed


def add_verbosity_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress (-v) or matcher/segmenter details (-vv).",
    )


def add_matching_args(parser: argparse.ArgumentParser, settings: TriageSettings) -> None:
    """Flags shared by every command that matches text against the catalog."""
    parser.add_argument(
        "--catalog",
        default=settings.catalog_path,
        help="Catalog JSON file (defaults to the bundled catalog).",
    )
    parser.add_argument(
        "--match-threshold",
        type=unit_float_arg,
        default=settings.match_threshold,
        help="Minimum similarity for a line to count as a catalog item.",
    )

    dup_group = parser.add_mutually_exclusive_group()
    dup_group.add_argument(
        "--sum-duplicates",
        dest="duplicate_policy",
        action="store_const",
        const=DuplicatePolicy.SUM.value,
        help="Merge lines naming the same item into one stack.",
    )
    dup_group.add_argument(
        "--separate-duplicates",
        dest="duplicate_policy",
        action="store_const",
        const=DuplicatePolicy.SEPARATE.value,
        help="Report every matching line on its own (ignores saved configuration).",
    )
    parser.set_defaults(duplicate_policy=settings.duplicate_policy)

    strict_group = parser.add_mutually_exclusive_group()
    strict_group.add_argument(
        "--strict-fallback",
        dest="strict_fallback",
        action="store_true",
        help="Also read unmatched 'Name x12' lines literally (reported as unknown).",
    )
    strict_group.add_argument(
        "--no-strict-fallback",
        dest="strict_fallback",
        action="store_false",
        help="Only report fuzzy catalog matches (ignores saved configuration).",
    )
    parser.set_defaults(strict_fallback=settings.strict_fallback)

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print machine-readable JSON instead of tables.",
    )
    add_verbosity_arg(parser)


def settings_from_args(settings: TriageSettings, args: argparse.Namespace) -> TriageSettings:
    return replace(
        settings,
        catalog_path=args.catalog,
        match_threshold=args.match_threshold,
        duplicate_policy=args.duplicate_policy,
        strict_fallback=args.strict_fallback,
    )
