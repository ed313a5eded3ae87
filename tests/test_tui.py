"""Headless checks for the home menu of the textual app."""

import asyncio

from textual.widgets import OptionList

from scraptriage.tui.analyze import AnalyzeScreen
from scraptriage.tui.app import HomeScreen, TriageApp
from scraptriage.tui.settings import TriageConfigScreen


def _select(option_id):
    """Start the app headless, pick one menu entry, return the resulting app state."""

    async def run():
        app = TriageApp()
        async with app.run_test() as pilot:
            await pilot.pause()
            menu = app.screen.query_one(OptionList)
            ids = [menu.get_option_at_index(i).id for i in range(menu.option_count)]
            menu.highlighted = ids.index(option_id)
            menu.action_select()
            await pilot.pause()
            return ids, type(app.screen)

    return asyncio.run(run())


def test_home_menu_entries(settings_dir):
    ids, screen = _select("analyze")
    assert ids == ["analyze", "catalog", "settings", "quit"]
    assert screen is AnalyzeScreen


def test_settings_entry_opens_settings(settings_dir):
    _, screen = _select("settings")
    assert screen is TriageConfigScreen


def test_home_screen_is_first(settings_dir):
    async def run():
        app = TriageApp()
        async with app.run_test() as pilot:
            await pilot.pause()
            return type(app.screen)

    assert asyncio.run(run()) is HomeScreen
