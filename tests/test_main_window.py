"""
Smoke tests for the main window wiring.
"""
import pytest
from PIL import Image

from textbehind.config import EditorConfig, CONFIG_DIR_ENV
from textbehind.main import MainWindow, load_image


@pytest.fixture
def window(qtbot, tmp_path, monkeypatch):
    monkeypatch.setenv(CONFIG_DIR_ENV, str(tmp_path / "config"))
    win = MainWindow(EditorConfig())
    qtbot.addWidget(win)
    return win


@pytest.fixture
def image_files(tmp_path):
    background = tmp_path / "bg.png"
    cutout = tmp_path / "cut.png"
    Image.new("RGB", (64, 48), (10, 20, 30)).save(background)
    Image.new("RGBA", (64, 48), (0, 0, 0, 0)).save(cutout)
    return background, cutout


def test_load_image_rejects_unreadable(tmp_path, qapp):
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"nope")
    with pytest.raises(ValueError):
        load_image(bad)


def test_actions_disabled_until_images_loaded(window, image_files):
    assert not window.download_action.isEnabled()
    assert not window.add_text_action.isEnabled()

    assert window.load_images(*image_files)
    assert window.download_action.isEnabled()
    assert window.delete_action.isEnabled()
    assert not window.undo_action.isEnabled()


def test_add_text_enables_undo(window, image_files):
    window.load_images(*image_files)
    window.add_text_action.trigger()
    assert len(window.controller.scene.layers) == 2
    assert window.undo_action.isEnabled()
    window.undo_action.trigger()
    assert len(window.controller.scene.layers) == 1


def test_mismatched_images_reported(window, image_files, tmp_path):
    background, _ = image_files
    other = tmp_path / "other.png"
    Image.new("RGBA", (10, 10)).save(other)
    assert not window.load_images(background, other)
    assert not window.controller.scene.is_ready()


def test_font_combo_sets_selected_layer_font(window, image_files):
    window.load_images(*image_files)
    assert window.font_combo.isEnabled()
    assert window.font_combo.currentText() == window.controller.scene.selected_layer.font_family
    window.font_combo.setCurrentText("Georgia")
    assert window.controller.scene.selected_layer.font_family == "Georgia"


def test_drag_disables_editing_actions(window, image_files):
    window.load_images(*image_files)
    window.add_text_action.trigger()
    assert window.undo_action.isEnabled()

    window.controller.begin_gesture()
    assert not window.undo_action.isEnabled()
    assert not window.add_text_action.isEnabled()
    assert not window.delete_action.isEnabled()
    assert not window.font_combo.isEnabled()

    window.controller.end_gesture()
    assert window.undo_action.isEnabled()
    assert window.delete_action.isEnabled()


def test_undo_tooltip_names_the_edit(window, image_files):
    window.load_images(*image_files)
    window.add_text_action.trigger()
    assert window.undo_action.toolTip() == "Undo Add text"
    window.undo_action.trigger()
    assert window.redo_action.toolTip() == "Redo Add text"


def test_font_combo_flags_missing_family(window, image_files):
    window.load_images(*image_files)
    window.controller.set_font_family("No Such Family 7f3a")
    assert window.font_combo.currentText() == "No Such Family 7f3a"
    assert "not installed" in window.font_combo.toolTip()
