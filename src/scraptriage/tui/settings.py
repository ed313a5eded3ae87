from __future__ import annotations

from dataclasses import replace

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Checkbox, Footer, Input, Static

from ..config import (
    DEFAULT_SETTINGS,
    config_path,
    load_settings,
    reset_settings,
    save_settings,
)
from ..core.matcher import DuplicatePolicy
from .common import AppScreen, MessageScreen


def _parse_byte(raw: str):
    raw = raw.strip()
    if not raw.isdigit() or int(raw) > 255:
        return None
    return int(raw)


class TriageConfigScreen(AppScreen):
    DEFAULT_CSS = """
    TriageConfigScreen {
        padding: 1 2;
    }

    .section-title {
        text-style: bold;
        color: $accent;
        margin: 1 0 0 0;
    }

    .field-row {
        margin: 0 0 1 0;
        height: auto;
    }

    .field-label {
        width: 28;
        color: $text-muted;
    }

    .hint {
        color: $text-muted;
    }

    #config-actions {
        margin-top: 1;
        height: auto;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self.settings = load_settings()

    def compose(self) -> ComposeResult:
        yield Static("Triage Settings", classes="menu-title")

        with Vertical():
            yield Static("Slot detection", classes="section-title")
            with Horizontal(classes="field-row"):
                yield Static("Brightness threshold", classes="field-label")
                yield Input(
                    id="brightness",
                    placeholder=f"Default ({DEFAULT_SETTINGS.brightness_threshold})",
                )
            with Horizontal(classes="field-row"):
                yield Static("Read full frame if no slots", classes="field-label")
                yield Checkbox(id="full-frame")

            yield Static("OCR", classes="section-title")
            with Horizontal(classes="field-row"):
                yield Static("OCR threshold", classes="field-label")
                yield Input(
                    id="ocr-threshold",
                    placeholder=f"Default ({DEFAULT_SETTINGS.ocr_threshold})",
                )
            with Horizontal(classes="field-row"):
                yield Static("Invert crops", classes="field-label")
                yield Checkbox(id="ocr-invert")
            with Horizontal(classes="field-row"):
                yield Static("Tesseract path", classes="field-label")
                yield Input(id="tesseract-cmd", placeholder="On PATH")

            yield Static("Matching", classes="section-title")
            with Horizontal(classes="field-row"):
                yield Static("Match threshold (0-1)", classes="field-label")
                yield Input(
                    id="match-threshold",
                    placeholder=f"Default ({DEFAULT_SETTINGS.match_threshold})",
                )
            with Horizontal(classes="field-row"):
                yield Static("Sum duplicate stacks", classes="field-label")
                yield Checkbox(id="sum-duplicates")
            with Horizontal(classes="field-row"):
                yield Static("Strict fallback parser", classes="field-label")
                yield Checkbox(id="strict-fallback")
            with Horizontal(classes="field-row"):
                yield Static("Catalog file", classes="field-label")
                yield Input(id="catalog-path", placeholder="Bundled catalog")

            yield Static("Diagnostics", classes="section-title")
            with Horizontal(classes="field-row"):
                yield Static("Debug OCR", classes="field-label")
                yield Checkbox(id="debug-ocr")

            yield Static(
                Text(f"Config file: {config_path()}", style="dim"),
                classes="hint",
            )

        with Horizontal(id="config-actions"):
            yield Button("Save", id="save", variant="primary")
            yield Button("Reset to defaults", id="reset", variant="warning")
            yield Button("Back", id="back")
        yield Footer()

    def on_mount(self) -> None:
        self._load_into_fields()

    def _load_into_fields(self) -> None:
        settings = self.settings
        self.query_one("#brightness", Input).value = str(settings.brightness_threshold)
        self.query_one("#full-frame", Checkbox).value = settings.full_frame_fallback
        self.query_one("#ocr-threshold", Input).value = str(settings.ocr_threshold)
        self.query_one("#ocr-invert", Checkbox).value = settings.ocr_invert
        self.query_one("#tesseract-cmd", Input).value = settings.tesseract_cmd or ""
        self.query_one("#match-threshold", Input).value = str(settings.match_threshold)
        self.query_one("#sum-duplicates", Checkbox).value = (
            settings.duplicate_policy == DuplicatePolicy.SUM.value
        )
        self.query_one("#strict-fallback", Checkbox).value = settings.strict_fallback
        self.query_one("#catalog-path", Input).value = settings.catalog_path or ""
        self.query_one("#debug-ocr", Checkbox).value = settings.debug_ocr

    def _save(self) -> None:
        brightness = _parse_byte(self.query_one("#brightness", Input).value)
        if brightness is None:
            self.app.push_screen(MessageScreen("Enter a brightness threshold between 0 and 255."))
            return
        ocr_threshold = _parse_byte(self.query_one("#ocr-threshold", Input).value)
        if ocr_threshold is None:
            self.app.push_screen(MessageScreen("Enter an OCR threshold between 0 and 255."))
            return

        match_raw = self.query_one("#match-threshold", Input).value.strip()
        try:
            match_threshold = float(match_raw)
        except ValueError:
            match_threshold = -1.0
        if not 0.0 <= match_threshold <= 1.0:
            self.app.push_screen(MessageScreen("Enter a match threshold between 0 and 1."))
            return

        sum_duplicates = self.query_one("#sum-duplicates", Checkbox).value
        self.settings = replace(
            self.settings,
            brightness_threshold=brightness,
            full_frame_fallback=self.query_one("#full-frame", Checkbox).value,
            ocr_threshold=ocr_threshold,
            ocr_invert=self.query_one("#ocr-invert", Checkbox).value,
            tesseract_cmd=self.query_one("#tesseract-cmd", Input).value.strip() or None,
            match_threshold=match_threshold,
            duplicate_policy=(
                DuplicatePolicy.SUM.value if sum_duplicates else DuplicatePolicy.SEPARATE.value
            ),
            strict_fallback=self.query_one("#strict-fallback", Checkbox).value,
            catalog_path=self.query_one("#catalog-path", Input).value.strip() or None,
            debug_ocr=self.query_one("#debug-ocr", Checkbox).value,
        )
        try:
            save_settings(self.settings)
        except OSError as exc:
            self.app.push_screen(MessageScreen(f"Could not save settings: {exc}"))
            return
        self.app.push_screen(MessageScreen("Settings saved."))

    def _reset(self) -> None:
        reset_settings()
        self.settings = load_settings()
        self._load_into_fields()
        self.app.push_screen(MessageScreen("Settings reset to defaults."))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "save":
            self._save()
        elif button_id == "reset":
            self._reset()
        elif button_id == "back":
            self.app.pop_screen()
