"""
Shared fixtures for text-behind editor tests.

Provides solid-color test images, a deterministic text measurer and a ready
SceneController.
"""
import sys
import os
import pytest

# Ensure editor/src is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'editor', 'src'))

# Widgets and fonts without a display
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QColor, QFontDatabase, QImage, QPainter

from textbehind.errors import MeasurementUnavailable
from textbehind.services.text_metrics import TextMeasurer
from textbehind.utils.layout import rendered_font_size


# ── Images ──────────────────────────────────────────────────────────────

IMAGE_WIDTH = 400
IMAGE_HEIGHT = 200

BACKGROUND_COLOR = '#0000ff'
SUBJECT_COLOR = '#ff0000'


def solid_image(width, height, color):
    """Opaque QImage filled with one color"""
    image = QImage(width, height, QImage.Format_ARGB32)
    image.fill(QColor(color))
    return image


def cutout_image(width, height, color=SUBJECT_COLOR):
    """Cutout whose left half is an opaque 'subject', right half transparent"""
    image = QImage(width, height, QImage.Format_ARGB32)
    image.fill(Qt.transparent)
    painter = QPainter(image)
    painter.fillRect(0, 0, width // 2, height, QColor(color))
    painter.end()
    return image


def has_fonts():
    return bool(QFontDatabase().families())


# ── Measurers ───────────────────────────────────────────────────────────

class FakeMeasurer(TextMeasurer):
    """Deterministic metrics: each character is half the rendered size wide"""

    CHAR_WIDTH = 0.5

    def measure(self, layer, draw_height):
        size = rendered_font_size(layer.font_size, draw_height)
        return len(layer.text) * size * self.CHAR_WIDTH, size


class UnavailableMeasurer(TextMeasurer):
    """Simulates a missing drawing context"""

    def measure(self, layer, draw_height):
        raise MeasurementUnavailable("no metrics in this test")


# ── Fixtures ────────────────────────────────────────────────────────────

@pytest.fixture
def measurer():
    return FakeMeasurer()


@pytest.fixture
def background(qapp):
    return solid_image(IMAGE_WIDTH, IMAGE_HEIGHT, BACKGROUND_COLOR)


@pytest.fixture
def cutout(qapp):
    return cutout_image(IMAGE_WIDTH, IMAGE_HEIGHT)


@pytest.fixture
def ready_scene(background, cutout):
    """Scene with both images loaded and its default layer"""
    from textbehind.models.scene import Scene
    scene = Scene()
    scene.set_images(background, cutout)
    return scene


@pytest.fixture
def controller(qapp, background, cutout, measurer):
    """SceneController with images loaded, container equal to the image size"""
    from textbehind.services.scene_controller import SceneController
    ctrl = SceneController(measurer=measurer)
    ctrl.set_images(background, cutout)
    ctrl.set_container_size(IMAGE_WIDTH, IMAGE_HEIGHT)
    return ctrl
