"""
Tests for the export renderer and the export worker thread.
"""
import io

import numpy as np
import pytest
from PIL import Image

from textbehind.constants import EXPORT_SCALE
from textbehind.errors import ExportError
from textbehind.models.scene import Scene
from textbehind.models.text_layer import TextLayer
from textbehind.services.compositor import SceneCompositor
from textbehind.services.export_renderer import (
    ExportRenderer, ExportWorker, encode_image, format_for_path, qimage_to_array, write_atomic,
)

from conftest import FakeMeasurer, IMAGE_WIDTH, IMAGE_HEIGHT, BACKGROUND_COLOR, has_fonts, solid_image

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'


@pytest.fixture
def renderer():
    return ExportRenderer(SceneCompositor(FakeMeasurer()))


class TestHelpers:

    @pytest.mark.parametrize("path, expected", [
        ("out.png", "PNG"), ("out.JPG", "JPEG"), ("out.jpeg", "JPEG"),
        ("out.webp", "WEBP"), ("out.bmp", "PNG"), ("out", "PNG"),
    ])
    def test_format_for_path(self, path, expected):
        assert format_for_path(path) == expected

    def test_qimage_to_array(self, qapp):
        pixels = qimage_to_array(solid_image(7, 3, '#102030'))
        assert pixels.shape == (3, 7, 4)
        assert pixels.dtype == np.uint8
        assert tuple(pixels[1, 5]) == (0x10, 0x20, 0x30, 255)

    def test_encode_null_image_fails(self, qapp):
        from PyQt5.QtGui import QImage
        with pytest.raises(ExportError):
            encode_image(QImage())

    def test_encode_unknown_format_fails(self, qapp):
        with pytest.raises(ExportError):
            encode_image(solid_image(2, 2, '#fff'), 'TIFF')

    def test_write_atomic_leaves_no_partial(self, tmp_path):
        target = tmp_path / "nested" / "out.bin"
        write_atomic(target, b"data")
        assert target.read_bytes() == b"data"
        assert list(target.parent.iterdir()) == [target]

    def test_write_atomic_failure(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(ExportError):
            write_atomic(blocker / "out.png", b"data")


class TestExportRenderer:

    def test_export_size_uses_native_resolution(self, ready_scene):
        assert ExportRenderer.export_size(ready_scene, 1.0) == (IMAGE_WIDTH, IMAGE_HEIGHT)
        assert ExportRenderer.export_size(ready_scene, EXPORT_SCALE) == (
            IMAGE_WIDTH * EXPORT_SCALE, IMAGE_HEIGHT * EXPORT_SCALE)

    def test_png_bytes(self, renderer, ready_scene):
        data = renderer.export_image(ready_scene, 0.5)
        assert data.startswith(PNG_SIGNATURE)
        with Image.open(io.BytesIO(data)) as image:
            assert image.size == (IMAGE_WIDTH // 2, IMAGE_HEIGHT // 2)

    def test_jpeg_bytes(self, renderer, ready_scene):
        data = renderer.export_image(ready_scene, 1.0, 'JPEG', 90)
        with Image.open(io.BytesIO(data)) as image:
            assert image.format == 'JPEG'
            assert image.mode == 'RGB'

    def test_export_independent_of_canvas_size(self, renderer, ready_scene):
        # Export draws into its own surface sized from the image
        image = renderer.render_to_image(ready_scene, 2.0)
        assert (image.width(), image.height()) == (IMAGE_WIDTH * 2, IMAGE_HEIGHT * 2)

    def test_text_keeps_relative_position_across_resolutions(self, renderer, qapp):
        if not has_fonts():
            pytest.skip("no fonts available to draw text")
        from PyQt5.QtCore import Qt
        from PyQt5.QtGui import QImage

        see_through = QImage(IMAGE_WIDTH, IMAGE_HEIGHT, QImage.Format_ARGB32)
        see_through.fill(Qt.transparent)
        layer = TextLayer(text="HH", color='#00ff00', position_x=25, position_y=75, font_size=100)
        scene = Scene(layers=[layer])
        scene.set_images(solid_image(IMAGE_WIDTH, IMAGE_HEIGHT, BACKGROUND_COLOR), see_through)

        centers = []
        for scale in (1.0, 2.0):
            pixels = qimage_to_array(renderer.render_to_image(scene, scale))
            height, width = pixels.shape[:2]
            assert (width, height) == (IMAGE_WIDTH * scale, IMAGE_HEIGHT * scale)
            green = (pixels[..., 1] > 200) & (pixels[..., 0] < 80) & (pixels[..., 2] < 80)
            ys, xs = np.nonzero(green)
            assert xs.size > 0
            # Nothing lands in the mirrored quadrant
            assert not green[:height // 2, width // 2:].any()
            centers.append((xs.mean() / width * 100, ys.mean() / height * 100))

        (x1, y1), (x2, y2) = centers
        assert x1 == pytest.approx(25, abs=5)
        assert y1 == pytest.approx(75, abs=5)
        assert x2 == pytest.approx(x1, abs=1)
        assert y2 == pytest.approx(y1, abs=1)

    def test_export_has_no_selection_highlight(self, renderer, ready_scene):
        ready_scene.layers[0].color = BACKGROUND_COLOR
        pixels = qimage_to_array(renderer.render_to_image(ready_scene, 1.0))
        assert tuple(pixels[100, 248]) == (0, 0, 255, 255)

    def test_not_ready_scene_fails(self, renderer, qapp):
        with pytest.raises(ExportError):
            renderer.export_image(Scene())

    def test_bad_scale_fails(self, renderer, ready_scene):
        with pytest.raises(ExportError):
            renderer.render_to_image(ready_scene, 0)

    def test_save_export(self, renderer, ready_scene, tmp_path):
        path = renderer.save_export(ready_scene, tmp_path / "result.webp", 0.5)
        with Image.open(path) as image:
            assert image.format == 'WEBP'
            assert image.size == (IMAGE_WIDTH // 2, IMAGE_HEIGHT // 2)

    def test_failed_save_writes_nothing(self, renderer, tmp_path):
        target = tmp_path / "result.png"
        with pytest.raises(ExportError):
            renderer.save_export(Scene(), target)
        assert not target.exists()


class TestExportWorker:

    def test_worker_writes_file(self, renderer, ready_scene, tmp_path, qtbot):
        image = renderer.render_to_image(ready_scene, 0.5)
        worker = ExportWorker(image, tmp_path / "threaded.png")
        with qtbot.waitSignal(worker.completed, timeout=5000) as blocker:
            worker.start()
        worker.wait()
        assert blocker.args == [True, str(tmp_path / "threaded.png")]
        assert (tmp_path / "threaded.png").read_bytes().startswith(PNG_SIGNATURE)

    def test_worker_reports_failure(self, tmp_path, qtbot):
        from PyQt5.QtGui import QImage
        worker = ExportWorker(QImage(), tmp_path / "empty.png")
        with qtbot.waitSignal(worker.completed, timeout=5000) as blocker:
            worker.start()
        worker.wait()
        assert blocker.args[0] is False
        assert not (tmp_path / "empty.png").exists()
