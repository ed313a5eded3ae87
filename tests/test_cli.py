"""Tests for the command-line entry points."""

import io
import json

import cv2
import numpy as np
import pytest

from scraptriage.__main__ import main
from scraptriage.cli import catalog as catalog_cli
from scraptriage.cli import config as config_cli
from scraptriage.cli import scan as scan_cli
from scraptriage.cli import text as text_cli


@pytest.fixture(autouse=True)
def _isolated(settings_dir, monkeypatch):
    """Every CLI test gets its own settings file and a wide console."""
    monkeypatch.setenv("COLUMNS", "200")
    return settings_dir


def _json_out(capsys):
    return json.loads(capsys.readouterr().out)


# ---------------------------------------------------------------------------
# text
# ---------------------------------------------------------------------------


class TestTextCommand:
    def test_file_json(self, tmp_path, capsys):
        path = tmp_path / "ocr.txt"
        path.write_text("Scrap Metal x250\nStandard Ammo x1500\nnoise line\n", encoding="utf-8")
        assert text_cli.main([str(path), "--json"]) == 0
        payload = _json_out(capsys)
        assert [(i["name"], i["action"]) for i in payload["items"]] == [
            ("Scrap Metal", "MAYBE"),
            ("Standard Ammo", "RECYCLE"),
        ]
        assert payload["unmatched"] == ["noise line"]
        assert payload["summary"] == {"KEEP": 0, "MAYBE": 1, "RECYCLE": 1}

    def test_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("Gold Watch\n"))
        assert text_cli.main(["-", "--json"]) == 0
        assert _json_out(capsys)["items"][0]["name"] == "Gold Watch"

    def test_sum_duplicates_flag(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("Canned Food 4\nCanned Food 9\n"))
        assert text_cli.main(["--sum-duplicates", "--json"]) == 0
        items = _json_out(capsys)["items"]
        assert [(i["name"], i["quantity"]) for i in items] == [("Canned Food", 13)]

    def test_strict_fallback_flag(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("Mystery Box x5\n"))
        assert text_cli.main(["--strict-fallback", "--json"]) == 0
        items = _json_out(capsys)["items"]
        assert items == [
            {
                "name": "Mystery Box",
                "quantity": 5,
                "action": "KEEP",
                "reason": "unknown item, keep conservatively",
                "category": "unknown",
            }
        ]

    def test_strict_fallback_oversized_quantity(self, tmp_path, capsys):
        path = tmp_path / "ocr.txt"
        path.write_text("Foo Bar x" + "9" * 5000 + "\n", encoding="utf-8")
        assert text_cli.main([str(path), "--strict-fallback", "--json"]) == 0
        items = _json_out(capsys)["items"]
        assert [(i["name"], i["quantity"]) for i in items] == [("Foo Bar", 1)]

    def test_custom_catalog(self, catalog_file, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("Gold Watch\nStandard Ammo x3\n"))
        assert text_cli.main(["--catalog", str(catalog_file), "--json"]) == 0
        assert [i["name"] for i in _json_out(capsys)["items"]] == ["Standard Ammo"]

    def test_table_output(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("Scrap Metal x250\n"))
        assert text_cli.main([]) == 0
        out = capsys.readouterr().out
        assert "Inventory Triage" in out
        assert "Scrap Metal" in out
        assert "MAYBE" in out

    def test_nothing_found(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("???\n"))
        assert text_cli.main([]) == 0
        assert "No known items found" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        assert text_cli.main([str(tmp_path / "missing.txt")]) == 1
        assert "Error" in capsys.readouterr().out

    def test_missing_catalog(self, tmp_path, capsys):
        assert text_cli.main(["--catalog", str(tmp_path / "nope.json")]) == 1

    def test_bad_threshold_is_usage_error(self):
        with pytest.raises(SystemExit) as exc:
            text_cli.main(["--match-threshold", "2"])
        assert exc.value.code == 2

    def test_saved_settings_apply(self, monkeypatch, capsys):
        assert config_cli.main(["set", "duplicate_policy", "sum"]) == 0
        capsys.readouterr()
        monkeypatch.setattr("sys.stdin", io.StringIO("Canned Food 4\nCanned Food 9\n"))
        assert text_cli.main(["--json"]) == 0
        assert [i["quantity"] for i in _json_out(capsys)["items"]] == [13]

    def test_flag_overrides_saved_settings(self, monkeypatch, capsys):
        assert config_cli.main(["set", "duplicate_policy", "sum"]) == 0
        capsys.readouterr()
        monkeypatch.setattr("sys.stdin", io.StringIO("Canned Food 4\nCanned Food 9\n"))
        assert text_cli.main(["--separate-duplicates", "--json"]) == 0
        assert [i["quantity"] for i in _json_out(capsys)["items"]] == [4, 9]


# ---------------------------------------------------------------------------
# scan
# ---------------------------------------------------------------------------


class TestScanCommand:
    def test_missing_image(self, tmp_path, capsys):
        assert scan_cli.main([str(tmp_path / "missing.png")]) == 1
        assert "Could not read image" in capsys.readouterr().out

    def test_scan_with_stubbed_ocr(self, tmp_path, monkeypatch, capsys):
        image = np.zeros((300, 300, 3), dtype=np.uint8)
        image[100:140, 100:140] = 255
        path = tmp_path / "inventory.png"
        assert cv2.imwrite(str(path), image)

        monkeypatch.setattr(scan_cli, "initialize_ocr", lambda cmd=None: "5.3.0")
        monkeypatch.setattr(
            "scraptriage.ocr.regions.image_to_string", lambda img: "Energy Cell x250"
        )
        assert scan_cli.main([str(path), "--json"]) == 0
        payload = _json_out(capsys)
        assert payload["regions"] == [[97, 97, 46, 46]]
        assert payload["items"][0]["name"] == "Energy Cell"
        assert payload["items"][0]["action"] == "RECYCLE"

    def test_missing_tesseract(self, tmp_path, monkeypatch, capsys):
        path = tmp_path / "inventory.png"
        assert cv2.imwrite(str(path), np.zeros((50, 50, 3), dtype=np.uint8))

        def _missing(cmd=None):
            raise RuntimeError("Tesseract is not installed or not on PATH")

        monkeypatch.setattr(scan_cli, "initialize_ocr", _missing)
        assert scan_cli.main([str(path)]) == 1
        assert "Tesseract" in capsys.readouterr().out

    def test_bad_threshold_is_usage_error(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            scan_cli.main([str(tmp_path / "x.png"), "--threshold", "300"])
        assert exc.value.code == 2


# ---------------------------------------------------------------------------
# catalog
# ---------------------------------------------------------------------------


class TestCatalogCommand:
    def test_table(self, capsys):
        assert catalog_cli.main([]) == 0
        out = capsys.readouterr().out
        assert "Item Catalog (18 entries)" in out
        assert "Standard Ammo" in out

    def test_category_json(self, capsys):
        assert catalog_cli.main(["--category", "AMMO", "--json"]) == 0
        names = [item["name"] for item in _json_out(capsys)]
        assert names == ["Standard Ammo", "High-Caliber Ammo", "Energy Cell"]

    def test_unknown_category(self, capsys):
        assert catalog_cli.main(["--category", "weapons"]) == 0
        assert "No items in category" in capsys.readouterr().out

    def test_missing_catalog(self, tmp_path):
        assert catalog_cli.main(["--catalog", str(tmp_path / "nope.json")]) == 1


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


class TestConfigCommand:
    def test_path(self, settings_dir, capsys):
        assert config_cli.main(["path"]) == 0
        assert capsys.readouterr().out.strip() == str(settings_dir / "settings.json")

    def test_set_and_show(self, settings_dir, capsys):
        assert config_cli.main(["set", "ocr-threshold", "180"]) == 0
        data = json.loads((settings_dir / "settings.json").read_text(encoding="utf-8"))
        assert data["ocr_threshold"] == 180
        capsys.readouterr()
        assert config_cli.main([]) == 0
        assert "180 *" in capsys.readouterr().out

    def test_set_invalid(self, settings_dir, capsys):
        assert config_cli.main(["set", "ocr_threshold", "bright"]) == 1
        assert not (settings_dir / "settings.json").exists()
        assert config_cli.main(["set", "pages", "3"]) == 1

    def test_reset(self, settings_dir):
        assert config_cli.main(["set", "strict_fallback", "true"]) == 0
        assert config_cli.main(["reset"]) == 0
        assert not (settings_dir / "settings.json").exists()


# ---------------------------------------------------------------------------
# dispatcher
# ---------------------------------------------------------------------------


class TestMain:
    def test_dispatch_to_text(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("Gold Watch\n"))
        assert main(["text", "--json"]) == 0
        assert _json_out(capsys)["items"][0]["name"] == "Gold Watch"

    def test_dispatch_to_config(self, settings_dir, capsys):
        assert main(["CONFIG", "path"]) == 0
        assert str(settings_dir) in capsys.readouterr().out

    def test_unknown_command(self, capsys):
        assert main(["frobnicate"]) == 2
        assert "Unknown command" in capsys.readouterr().err

    def test_help(self, capsys):
        assert main(["--help"]) == 0
        assert "scan IMAGE" in capsys.readouterr().out

    def test_no_args_opens_tui(self, monkeypatch):
        launched = []
        monkeypatch.setattr("scraptriage.__main__._run_tui", lambda: launched.append(1) or 0)
        assert main([]) == 0
        assert launched == [1]
