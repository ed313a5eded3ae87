from __future__ import annotations

import json
from typing import Counter, Iterable, Optional

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..core.catalog import Catalog
from ..core.types import Action
from ..pipeline import PipelineResult
from .ui_utils import action_style


def render_overview(result: PipelineResult, console: Console) -> None:
    """
    Display high-level scan metrics (slots, lines read, items, time).
    """
    table = Table(
        title="Scan Overview",
        box=box.SIMPLE,
        show_header=False,
        show_lines=False,
        padding=(0, 1),
    )
    table.add_column("Metric", justify="left", style="cyan", no_wrap=True)
    table.add_column("Value", justify="left", style="white")
    if result.regions or result.used_full_frame:
        slots = str(len(result.regions))
        if result.used_full_frame:
            slots = f"{slots} (read full frame)"
        table.add_row("Slots found", slots)
    table.add_row("Lines read", str(len(result.lines)))
    table.add_row("Items resolved", str(len(result.classified)))
    table.add_row("Unmatched lines", str(len(result.unmatched_lines)))
    table.add_row("Processing time", f"{result.processing_seconds:.2f}s")
    console.print(table)


def render_summary(summary: Counter, console: Console) -> None:
    ordered = [action.value for action in Action if action.value in summary]
    if not ordered:
        return

    table = Table(
        title="Summary",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold",
        show_lines=False,
        padding=(0, 1),
    )
    table.add_column("Action", justify="left", no_wrap=True)
    table.add_column("Count", justify="right", style="white", no_wrap=True)
    for key in ordered:
        table.add_row(Text(key, style=action_style(key)), str(summary[key]))
    console.print(table)


def render_results(
    result: PipelineResult,
    console: Optional[Console] = None,
    show_unmatched: bool = True,
) -> None:
    console = console or Console()
    render_overview(result, console)

    if not result.classified:
        console.print()
        console.print("No known items found.")
    else:
        console.print()
        table = Table(
            title="Inventory Triage",
            box=box.SIMPLE_HEAVY,
            show_header=True,
            header_style="bold",
            show_lines=False,
            pad_edge=False,
        )
        table.add_column("#", justify="right", style="cyan", width=3, no_wrap=True)
        table.add_column("Item", justify="left", style="white", overflow="fold")
        table.add_column("Qty", justify="right", style="white", no_wrap=True)
        table.add_column("Category", justify="left", style="dim", no_wrap=True)
        table.add_column("Action", justify="center", no_wrap=True)
        table.add_column("Reason", justify="left", style="dim", overflow="fold")

        for index, item in enumerate(result.classified, start=1):
            label = item.action.value
            table.add_row(
                f"{index:02d}",
                item.name,
                str(item.quantity),
                item.category,
                Text(label, style=action_style(label)),
                item.reason,
            )
        console.print(table)
        render_summary(result.summary(), console)

    if show_unmatched and result.unmatched_lines:
        console.print()
        console.print(Text("Unmatched lines", style="bold yellow"))
        for line in result.unmatched_lines:
            console.print(Text(f"  {line}", style="dim"))


def render_catalog(
    catalog: Catalog,
    console: Optional[Console] = None,
    category: Optional[str] = None,
) -> int:
    """Print the catalog table; returns the number of rows shown."""
    console = console or Console()
    wanted = category.strip().lower() if category else None

    table = Table(
        title=f"Item Catalog ({len(catalog)} entries)",
        box=box.SIMPLE_HEAVY,
        show_header=True,
        header_style="bold",
        pad_edge=False,
    )
    table.add_column("Item", style="white", overflow="fold")
    table.add_column("Category", style="cyan", no_wrap=True)
    table.add_column("Used for", style="dim", overflow="fold")
    table.add_column("Keep min", justify="right", no_wrap=True)

    shown = 0
    for entry in catalog.values():
        if wanted and entry.category != wanted:
            continue
        uses = _uses(entry.used_for_quests, entry.used_for_workshop,
                     entry.used_for_crafting, entry.used_for_special_vendor)
        keep_min = "-" if entry.default_keep_min is None else str(entry.default_keep_min)
        table.add_row(entry.name, entry.category, ", ".join(uses) or "-", keep_min)
        shown += 1

    console.print(table)
    return shown


def _uses(quests: bool, workshop: bool, crafting: bool, vendor: bool) -> Iterable[str]:
    labels = []
    if quests:
        labels.append("quests")
    if workshop:
        labels.append("workshop")
    if crafting:
        labels.append("crafting")
    if vendor:
        labels.append("special vendor")
    return labels


def emit_result(result: PipelineResult, as_json: bool, console: Optional[Console] = None) -> None:
    """Print a result either as JSON on stdout or as rich tables."""
    if as_json:
        print(json.dumps(result.to_dict(), indent=2))
        return
    render_results(result, console)
