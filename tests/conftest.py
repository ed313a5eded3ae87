"""Shared fixtures for the scraptriage test suite."""

import json

import numpy as np
import pytest

from scraptriage.core.catalog import Catalog, CatalogEntry


@pytest.fixture
def catalog():
    """Small catalog covering every triage rule.

    "Scrap Metal" deliberately has no keep minimum so the per-rule
    fallbacks are exercised.
    """
    return Catalog(
        [
            CatalogEntry("Assorted Seeds", "material", used_for_quests=True, default_keep_min=50),
            CatalogEntry("Scrap Metal", "material", used_for_crafting=True),
            CatalogEntry("Standard Ammo", "ammo", default_keep_min=500),
            CatalogEntry("Energy Cell", "ammo"),
            CatalogEntry("Canned Food", "consumable", default_keep_min=10),
            CatalogEntry("Gold Watch", "misc", default_keep_min=0),
            CatalogEntry("Silver Locket", "misc"),
        ]
    )


@pytest.fixture
def catalog_file(tmp_path):
    payload = {
        "metadata": {"source": "test"},
        "items": [
            {"name": "Assorted Seeds", "category": "material", "usedForQuests": True,
             "defaultKeepMin": 50},
            {"name": "Standard Ammo", "category": "ammo", "defaultKeepMin": 500},
        ],
    }
    path = tmp_path / "items.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


@pytest.fixture
def settings_dir(tmp_path, monkeypatch):
    """Point the settings file at a throwaway directory."""
    directory = tmp_path / "config"
    monkeypatch.setenv("SCRAPTRIAGE_CONFIG_DIR", str(directory))
    return directory


def blank_rgba(width=300, height=300):
    image = np.zeros((height, width, 4), dtype=np.uint8)
    image[:, :, 3] = 255
    return image


def draw_square(image, x, y, w, h, value=255):
    image[y : y + h, x : x + w, :3] = value
    return image
