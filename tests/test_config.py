"""
Tests for EditorConfig loading, validation and saving.
"""
import json

from textbehind.config import EditorConfig, CONFIG_DIR_ENV, CONFIG_FILENAME, get_config_dir
from textbehind.constants import EXPORT_FORMAT, EXPORT_QUALITY, EXPORT_SCALE


class TestEditorConfig:

    def test_missing_file_gives_defaults(self, tmp_path):
        config = EditorConfig.load(tmp_path / "missing.json")
        assert config == EditorConfig()

    def test_round_trip(self, tmp_path):
        path = tmp_path / "config.json"
        original = EditorConfig(export_scale=1.0, export_format='JPEG', font_files=['a.ttf'])
        assert original.save(path)
        assert EditorConfig.load(path) == original

    def test_broken_json_gives_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding='utf-8')
        assert EditorConfig.load(path) == EditorConfig()

    def test_non_object_gives_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]", encoding='utf-8')
        assert EditorConfig.load(path) == EditorConfig()

    def test_invalid_values_replaced(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            'export_scale': -1,
            'export_format': 'gif',
            'export_quality': 500,
            'canvas_width': 'wide',
            'font_files': 'fonts.ttf',
            'unknown_key': 1,
        }), encoding='utf-8')
        config = EditorConfig.load(path)
        assert config.export_scale == EXPORT_SCALE
        assert config.export_format == EXPORT_FORMAT
        assert config.export_quality == EXPORT_QUALITY
        assert config.canvas_width == EditorConfig().canvas_width
        assert config.font_files == []

    def test_format_normalized_to_upper(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({'export_format': 'webp'}), encoding='utf-8')
        assert EditorConfig.load(path).export_format == 'WEBP'

    def test_env_override_and_default_path(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_DIR_ENV, str(tmp_path / "cfg"))
        assert get_config_dir() == tmp_path / "cfg"
        assert EditorConfig(default_font='Arial').save()
        assert (tmp_path / "cfg" / CONFIG_FILENAME).exists()
        assert EditorConfig.load().default_font == 'Arial'

    def test_save_failure_returns_false(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        assert not EditorConfig().save(blocker / "config.json")
