from __future__ import annotations

from pathlib import Path

from rich.text import Text
from textual import work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, DataTable, Footer, Input, Static, TextArea

from ..cli.ui_utils import action_style
from ..config import load_settings
from ..core.catalog import resolve_catalog
from ..ocr import initialize_ocr, load_screenshot
from ..pipeline import PipelineResult, TriagePipeline
from .common import AppScreen, MessageScreen


class AnalyzeScreen(AppScreen):
    """Scan a screenshot or paste inventory text and see the triage table."""

    DEFAULT_CSS = """
    AnalyzeScreen {
        padding: 1 2;
    }

    .field-row {
        height: auto;
        margin: 0 0 1 0;
    }

    #image-path {
        width: 1fr;
    }

    #pasted-text {
        height: 8;
    }

    #analyze-actions {
        height: auto;
        margin: 1 0;
    }

    #results {
        height: 1fr;
    }

    #summary {
        color: $text-muted;
        margin-top: 1;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static("Analyze Inventory", classes="menu-title")
        with Vertical():
            with Horizontal(classes="field-row"):
                yield Input(id="image-path", placeholder="Screenshot path (PNG/JPG)")
                yield Button("Scan image", id="scan", variant="primary")
            yield Static("Or paste text, one item per line:", classes="hint")
            yield TextArea(id="pasted-text")
            with Horizontal(id="analyze-actions"):
                yield Button("Analyze text", id="analyze", variant="primary")
                yield Button("Clear", id="clear")
                yield Button("Back", id="back")
            yield DataTable(id="results", zebra_stripes=True, cursor_type="row")
            yield Static("", id="summary")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.add_columns("#", "Item", "Qty", "Category", "Action", "Reason")
        self.query_one("#image-path", Input).focus()

    def _pipeline(self) -> TriagePipeline:
        settings = load_settings()
        return TriagePipeline(resolve_catalog(settings.catalog_path), settings)

    def show_result(self, result: PipelineResult) -> None:
        table = self.query_one(DataTable)
        table.clear()
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

        counts = result.summary()
        parts = [f"{label}: {counts[label]}" for label in ("KEEP", "MAYBE", "RECYCLE") if counts[label]]
        if not parts:
            parts = ["No known items found"]
        if result.unmatched_lines:
            parts.append(f"unmatched lines: {len(result.unmatched_lines)}")
        if result.used_full_frame:
            parts.append("read full frame")
        self.query_one("#summary", Static).update(
            f"{'  '.join(parts)}  ({result.processing_seconds:.2f}s)"
        )

    def _analyze_text(self) -> None:
        text = self.query_one("#pasted-text", TextArea).text
        if not text.strip():
            self.app.push_screen(MessageScreen("Paste some inventory text first."))
            return
        try:
            pipeline = self._pipeline()
        except ValueError as exc:
            self.app.push_screen(MessageScreen(str(exc)))
            return
        self.show_result(pipeline.analyze_text(text))

    @work(thread=True, exclusive=True)
    def _scan_image(self, path: Path) -> None:
        try:
            pipeline = self._pipeline()
            image = load_screenshot(path)
            initialize_ocr(pipeline.settings.tesseract_cmd)
            result = pipeline.analyze_image(image)
        except (ValueError, RuntimeError, OSError) as exc:
            self.app.call_from_thread(self.app.push_screen, MessageScreen(str(exc)))
            return
        self.app.call_from_thread(self.show_result, result)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "scan":
            raw = self.query_one("#image-path", Input).value.strip()
            if not raw:
                self.app.push_screen(MessageScreen("Enter a screenshot path first."))
                return
            self.query_one("#summary", Static).update("Scanning...")
            self._scan_image(Path(raw).expanduser())
        elif button_id == "analyze":
            self._analyze_text()
        elif button_id == "clear":
            self.query_one("#pasted-text", TextArea).text = ""
            self.query_one(DataTable).clear()
            self.query_one("#summary", Static).update("")
        elif button_id == "back":
            self.app.pop_screen()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "image-path" and event.value.strip():
            self.query_one("#summary", Static).update("Scanning...")
            self._scan_image(Path(event.value.strip()).expanduser())
