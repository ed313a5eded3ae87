from __future__ import annotations

from typing import Optional

from rich import box
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult, SuspendNotSupported
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Footer, OptionList, Static
from textual.widgets.option_list import Option

from ..cli import catalog as catalog_cli
from ..config import config_path, load_settings
from ..core.catalog import CatalogError, resolve_catalog
from .analyze import AnalyzeScreen
from .settings import TriageConfigScreen


def build_status_panel() -> Panel:
    settings = load_settings()
    try:
        catalog = resolve_catalog(settings.catalog_path)
        catalog_status = f"{len(catalog)} items"
    except CatalogError as exc:
        catalog_status = f"[red]{exc}[/red]"
    source = settings.catalog_path or "bundled"

    status_table = Table.grid(padding=(0, 1))
    status_table.add_column(justify="right", style="bold")
    status_table.add_column()
    status_table.add_row("Catalog", f"{catalog_status} ({source})")
    status_table.add_row("Duplicates", settings.duplicate_policy)
    status_table.add_row("Settings", str(config_path()))
    return Panel(
        status_table,
        title=Text("Scrap Triage", style="bold cyan"),
        border_style="cyan",
        box=box.ROUNDED,
        padding=(1, 2),
    )


class StatusPanel(Static):
    def refresh_status(self) -> None:
        self.update(build_status_panel())

    def on_mount(self) -> None:
        self.refresh_status()


def _menu_option(option_id: str, label: str) -> Option:
    return Option(Text.assemble((option_id, "bold cyan"), " ", label), id=option_id)


class HomeScreen(Screen):
    """Status panel over a single-level menu; every entry opens a screen or a CLI view."""

    def compose(self) -> ComposeResult:
        with Vertical(id="menu-root"):
            yield StatusPanel(id="status")
            yield Static("Main menu", classes="menu-title")
            yield OptionList(
                _menu_option("analyze", "Analyze inventory"),
                _menu_option("catalog", "Browse catalog"),
                _menu_option("settings", "Settings"),
                _menu_option("quit", "Quit"),
                id="menu",
            )
        yield Footer()

    def on_mount(self) -> None:
        self.query_one(OptionList).focus()

    def on_screen_resume(self, _event: events.ScreenResume) -> None:
        self.query_one(StatusPanel).refresh_status()
        self.query_one(OptionList).focus()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        choice = event.option_id
        if choice == "analyze":
            self.app.push_screen(AnalyzeScreen())
        elif choice == "catalog":
            self._browse_catalog()
        elif choice == "settings":
            self.app.push_screen(TriageConfigScreen())
        elif choice == "quit":
            self.app.exit()

    def _browse_catalog(self) -> None:
        # The rich catalog table is printed to the real terminal.
        try:
            with self.app.suspend():
                catalog_cli.main([])
                input("\nPress Enter to return...")
        except SuspendNotSupported:
            catalog_cli.main([])


class TriageApp(App[None]):
    TITLE = "Scrap Triage"
    CSS = """
    #menu-root {
        padding: 1 2;
    }

    .menu-title {
        text-style: bold;
        margin: 1 0;
    }

    #menu {
        height: auto;
        max-height: 12;
    }
    """

    def on_mount(self) -> None:
        self.push_screen(HomeScreen())


def run_tui(app: Optional[TriageApp] = None) -> int:
    app = app or TriageApp()
    app.run()
    return 0
