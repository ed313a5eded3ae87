from __future__ import annotations

import argparse
from dataclasses import asdict
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from ..config import (
    DEFAULT_SETTINGS,
    SETTING_NAMES,
    TriageSettings,
    config_path,
    load_settings,
    reset_settings,
    save_settings,
    update_setting,
)


def _render_settings(settings: TriageSettings, console: Console) -> None:
    defaults = asdict(DEFAULT_SETTINGS)
    table = Table(
        title=f"Settings ({config_path()})",
        box=box.SIMPLE_HEAVY,
        show_header=True,
        header_style="bold",
        pad_edge=False,
    )
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="white", overflow="fold")
    table.add_column("Default", style="dim", overflow="fold")
    for name, value in asdict(settings).items():
        marker = "" if value == defaults[name] else " *"
        table.add_row(name, f"{value!r}{marker}", repr(defaults[name]))
    console.print(table)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scraptriage config",
        description="Show or change saved triage settings.",
    )
    sub = parser.add_subparsers(dest="action")
    sub.add_parser("show", help="Print the current settings (default).")
    set_parser = sub.add_parser("set", help="Change one setting.")
    set_parser.add_argument("key", help=f"One of: {', '.join(SETTING_NAMES)}")
    set_parser.add_argument("value")
    sub.add_parser("reset", help="Delete the settings file and go back to defaults.")
    sub.add_parser("path", help="Print where settings are stored.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    console = Console()
    action = args.action or "show"

    if action == "path":
        print(config_path())
        return 0

    if action == "reset":
        try:
            reset_settings()
        except OSError as exc:
            console.print(f"[red]Error:[/red] {exc}")
            return 1
        console.print("[green]Settings reset to defaults.[/green]")
        return 0

    settings = load_settings()
    if action == "set":
        try:
            settings = update_setting(settings, args.key, args.value)
            path = save_settings(settings)
        except (ValueError, OSError) as exc:
            console.print(f"[red]Error:[/red] {exc}")
            return 1
        key = args.key.strip().lower().replace("-", "_")
        console.print(f"[green]Saved[/green] {key} = {getattr(settings, key)!r} to {path}")
        return 0

    _render_settings(settings, console)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
