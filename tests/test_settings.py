"""
Tests cho IngestSettings dataclass va settings manager.

Coverage:
- IngestSettings.from_dict() voi partial fields, extra keys, sai type
- to_dict() / with_overrides()
- Parse preset / prologue tu string
- load_ingest_settings() / save_ingest_settings()
"""

import json
from pathlib import Path

import pytest

from config.ingest_settings import IngestSettings, MAX_FILE_SIZE, REORDER_WINDOW
from config.output_format import (
    Preset,
    PrologueMode,
    get_all_preset_ids,
    parse_preset,
    parse_prologue_mode,
)
from services.settings_manager import load_ingest_settings, save_ingest_settings


class TestIngestSettings:
    """Test IngestSettings dataclass creation va methods."""

    def test_default_values(self):
        settings = IngestSettings()
        assert settings.get_preset() == Preset.DEFAULT
        assert settings.get_prologue_mode() == PrologueMode.LIST
        assert settings.count_tokens is True
        assert settings.max_file_size == MAX_FILE_SIZE
        assert settings.get_reorder_window() == REORDER_WINDOW
        assert settings.get_max_workers() is None
        assert settings.excluded_patterns == []

    def test_from_dict_partial_va_extra_keys(self):
        settings = IngestSettings.from_dict(
            {"preset": "xml", "max_workers": 4, "unknown_key": 1}
        )
        assert settings.preset == "xml"
        assert settings.max_workers == 4
        assert not hasattr(settings, "unknown_key")

    def test_from_dict_sai_type_dung_default(self):
        settings = IngestSettings.from_dict(
            {"max_file_size": "big", "reorder_window": True, "excluded_patterns": "x"}
        )
        assert settings.max_file_size == MAX_FILE_SIZE
        assert settings.reorder_window == REORDER_WINDOW
        assert settings.excluded_patterns == []

    def test_to_dict_roundtrip(self):
        original = IngestSettings(preset="markdown", excluded_patterns=["*.log"])
        assert IngestSettings.from_dict(original.to_dict()) == original

    def test_with_overrides_bo_qua_none(self):
        base = IngestSettings(preset="xml", max_workers=2)
        updated = base.with_overrides(preset=None, max_workers=8, count_tokens=False)
        assert updated.preset == "xml"
        assert updated.max_workers == 8
        assert updated.count_tokens is False
        # Ban goc khong doi
        assert base.max_workers == 2

    def test_zero_disables_window(self):
        assert IngestSettings(reorder_window=0).get_reorder_window() is None

    def test_invalid_preset(self):
        with pytest.raises(ValueError):
            IngestSettings(preset="yaml").get_preset()


class TestOutputFormat:
    def test_parse_preset_case_insensitive(self):
        assert parse_preset(" Markdown ") == Preset.MARKDOWN

    def test_parse_prologue_mode(self):
        assert parse_prologue_mode("tree") == PrologueMode.TREE
        with pytest.raises(ValueError, match="expected one of"):
            parse_prologue_mode("graph")

    def test_all_preset_ids(self):
        assert get_all_preset_ids() == ["default", "markdown", "xml"]


class TestSettingsManager:
    def test_load_khi_khong_co_file(self, tmp_path: Path):
        assert load_ingest_settings(tmp_path / "missing.json") == IngestSettings()

    def test_load_file_hong(self, tmp_path: Path):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        assert load_ingest_settings(path) == IngestSettings()

    def test_load_top_level_khong_phai_object(self, tmp_path: Path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]")
        assert load_ingest_settings(path) == IngestSettings()

    def test_save_roi_load(self, tmp_path: Path):
        path = tmp_path / "nested" / "settings.json"
        settings = IngestSettings(preset="xml", reorder_window=64)

        assert save_ingest_settings(settings, path) is True
        assert load_ingest_settings(path) == settings

    def test_save_giu_extra_keys(self, tmp_path: Path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"custom": "keep me"}))

        save_ingest_settings(IngestSettings(), path)

        data = json.loads(path.read_text())
        assert data["custom"] == "keep me"
        assert data["preset"] == "default"
