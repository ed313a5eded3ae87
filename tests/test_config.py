"""Tests for scraptriage.config."""

import json
from dataclasses import replace

import pytest

from scraptriage.config import (
    DEFAULT_SETTINGS,
    SETTING_NAMES,
    TriageSettings,
    config_dir,
    config_path,
    load_settings,
    reset_settings,
    save_settings,
    settings_from_dict,
    update_setting,
)


class TestPaths:
    def test_env_override(self, settings_dir):
        assert config_dir() == settings_dir
        assert config_path() == settings_dir / "settings.json"

    def test_xdg_on_linux(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SCRAPTRIAGE_CONFIG_DIR", raising=False)
        monkeypatch.setattr("sys.platform", "linux")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert config_dir() == tmp_path / "scraptriage"


class TestSettingsFromDict:
    def test_empty_is_default(self):
        assert settings_from_dict({}) == DEFAULT_SETTINGS

    def test_defaults(self):
        s = DEFAULT_SETTINGS
        assert s.brightness_threshold == 45
        assert s.ocr_threshold == 160
        assert s.match_threshold == 0.55
        assert s.duplicate_policy == "separate"
        assert s.full_frame_fallback is True
        assert s.strict_fallback is False

    def test_values_clamped(self):
        s = settings_from_dict({"brightness_threshold": 999, "match_threshold": -2})
        assert s.brightness_threshold == 255
        assert s.match_threshold == 0.0

    def test_invalid_field_falls_back(self):
        s = settings_from_dict(
            {"ocr_threshold": "bright", "duplicate_policy": "average", "ocr_invert": True}
        )
        assert s.ocr_threshold == DEFAULT_SETTINGS.ocr_threshold
        assert s.duplicate_policy == DEFAULT_SETTINGS.duplicate_policy
        assert s.ocr_invert is True

    def test_unknown_keys_ignored(self):
        assert settings_from_dict({"pages": 4}) == DEFAULT_SETTINGS

    def test_boolean_not_accepted_as_number(self):
        assert settings_from_dict({"min_line_length": True}).min_line_length == 3


class TestPersistence:
    def test_missing_file_gives_defaults(self, settings_dir):
        assert load_settings() == DEFAULT_SETTINGS

    def test_round_trip(self, settings_dir):
        settings = replace(
            DEFAULT_SETTINGS,
            brightness_threshold=60,
            duplicate_policy="sum",
            catalog_path="/tmp/items.json",
            strict_fallback=True,
        )
        path = save_settings(settings)
        assert path == settings_dir / "settings.json"
        assert load_settings() == settings

    def test_saved_file_lists_every_field(self, settings_dir):
        path = save_settings(DEFAULT_SETTINGS)
        data = json.loads(path.read_text(encoding="utf-8"))
        assert tuple(data) == SETTING_NAMES

    def test_corrupt_file_gives_defaults(self, settings_dir):
        settings_dir.mkdir(parents=True)
        (settings_dir / "settings.json").write_text("{oops", encoding="utf-8")
        assert load_settings() == DEFAULT_SETTINGS

    def test_non_object_gives_defaults(self, settings_dir):
        settings_dir.mkdir(parents=True)
        (settings_dir / "settings.json").write_text("[1, 2]", encoding="utf-8")
        assert load_settings() == DEFAULT_SETTINGS

    def test_partly_invalid_file(self, settings_dir):
        settings_dir.mkdir(parents=True)
        (settings_dir / "settings.json").write_text(
            json.dumps({"ocr_threshold": 200, "match_threshold": "high"}), encoding="utf-8"
        )
        settings = load_settings()
        assert settings.ocr_threshold == 200
        assert settings.match_threshold == DEFAULT_SETTINGS.match_threshold

    def test_reset(self, settings_dir):
        save_settings(replace(DEFAULT_SETTINGS, ocr_invert=True))
        reset_settings()
        assert not (settings_dir / "settings.json").exists()
        assert load_settings() == DEFAULT_SETTINGS
        reset_settings()

    def test_explicit_path(self, tmp_path):
        path = tmp_path / "elsewhere" / "s.json"
        save_settings(replace(DEFAULT_SETTINGS, debug_ocr=True), path)
        assert load_settings(path).debug_ocr is True


class TestUpdateSetting:
    @pytest.mark.parametrize(
        "name, raw, attr, expected",
        [
            ("brightness_threshold", "60", "brightness_threshold", 60),
            ("brightness-threshold", "300", "brightness_threshold", 255),
            ("match_threshold", "0.7", "match_threshold", 0.7),
            ("duplicate_policy", "SUM", "duplicate_policy", "sum"),
            ("strict_fallback", "yes", "strict_fallback", True),
            ("full_frame_fallback", "off", "full_frame_fallback", False),
            ("catalog_path", "none", "catalog_path", None),
            ("tesseract_cmd", "/usr/bin/tesseract", "tesseract_cmd", "/usr/bin/tesseract"),
        ],
    )
    def test_updates(self, name, raw, attr, expected):
        updated = update_setting(DEFAULT_SETTINGS, name, raw)
        assert getattr(updated, attr) == expected

    def test_original_untouched(self):
        update_setting(DEFAULT_SETTINGS, "ocr_invert", "true")
        assert DEFAULT_SETTINGS.ocr_invert is False

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown setting"):
            update_setting(DEFAULT_SETTINGS, "pages", "3")

    @pytest.mark.parametrize(
        "name, raw",
        [("ocr_threshold", "bright"), ("ocr_invert", "maybe"), ("duplicate_policy", "avg")],
    )
    def test_invalid_value(self, name, raw):
        with pytest.raises(ValueError, match="Invalid value"):
            update_setting(DEFAULT_SETTINGS, name, raw)

    def test_settings_are_frozen(self):
        with pytest.raises(AttributeError):
            TriageSettings().ocr_threshold = 1
