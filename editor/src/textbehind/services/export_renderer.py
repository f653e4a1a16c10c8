"""Export renderer service.

Re-renders the full composition at the background image's native resolution
(scaled by target_scale) instead of the on-screen canvas size. Positions are
percentages and font sizes follow the draw height, so running the compositor
again on the export surface reproduces the on-screen layout.

Encoding goes QImage -> numpy RGBA array -> Pillow, and can run in an
ExportWorker thread so a slow encode never blocks interactive dragging.
"""

import io
import logging
import os
from pathlib import Path

import numpy as np
from PIL import Image
from PyQt5.QtCore import QThread, pyqtSignal
from PyQt5.QtGui import QImage

from textbehind.constants import EXPORT_SCALE, EXPORT_QUALITY, EXPORT_FORMAT, EXPORT_FORMATS
from textbehind.errors import AssetNotReady, ExportError
from textbehind.services.compositor import RenderSurface, SceneCompositor

logger = logging.getLogger(__name__)

# Pillow formats that take a quality setting
_LOSSY_FORMATS = {'JPEG', 'WEBP'}


def qimage_to_array(image: QImage) -> np.ndarray:
    """Copy a QImage into an (height, width, 4) uint8 RGBA array (straight alpha)."""
    rgba = image.convertToFormat(QImage.Format_RGBA8888)
    width, height = rgba.width(), rgba.height()
    ptr = rgba.constBits()
    ptr.setsize(rgba.bytesPerLine() * height)
    rows = np.frombuffer(ptr, dtype=np.uint8).reshape(height, rgba.bytesPerLine())
    # bytesPerLine may be padded past width * 4
    return rows[:, :width * 4].reshape(height, width, 4).copy()


def format_for_path(path) -> str:
    """Pillow format name from a file extension (defaults to PNG)."""
    suffix = Path(path).suffix.lower()
    for name, extension in EXPORT_FORMATS.items():
        if suffix == extension or (name == 'JPEG' and suffix == '.jpeg'):
            return name
    return EXPORT_FORMAT


def encode_image(image: QImage, image_format: str = EXPORT_FORMAT, quality: int = EXPORT_QUALITY) -> bytes:
    """Serialize a rendered QImage with Pillow.

    Raises:
        ExportError: Null image or encoder failure
    """
    if image is None or image.isNull():
        raise ExportError("Nothing to encode: export surface is empty")

    image_format = image_format.upper()
    if image_format not in EXPORT_FORMATS:
        raise ExportError(f"Unsupported export format: {image_format}")

    try:
        pil_image = Image.fromarray(qimage_to_array(image), "RGBA")
        if image_format == 'JPEG':
            # No alpha channel in JPEG
            pil_image = pil_image.convert("RGB")

        params = {'quality': quality} if image_format in _LOSSY_FORMATS else {}
        buffer = io.BytesIO()
        pil_image.save(buffer, image_format, **params)
    except Exception as e:
        raise ExportError(f"Failed to encode {image_format}: {e}") from e
    return buffer.getvalue()


def write_atomic(path, data: bytes) -> Path:
    """Write bytes via a temporary sibling so a failure never leaves a partial file."""
    path = Path(path)
    tmp_path = path.with_name(path.name + ".part")
    try:
        os.makedirs(path.parent, exist_ok=True)
        with open(tmp_path, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except OSError as e:
        try:
            tmp_path.unlink()
        except OSError:
            pass
        raise ExportError(f"Failed to write {path}: {e}") from e
    return path


class ExportRenderer:
    """Renders a Scene to a raster independent of the on-screen canvas."""

    def __init__(self, compositor: SceneCompositor = None):
        self.compositor = compositor or SceneCompositor()

    @staticmethod
    def export_size(scene, target_scale: float = EXPORT_SCALE):
        """Export surface (width, height): native background size times target_scale."""
        width, height = scene.image_size()
        return (max(1, int(round(width * target_scale))), max(1, int(round(height * target_scale))))

    def render_to_image(self, scene, target_scale: float = EXPORT_SCALE) -> QImage:
        """Draw the composition (without selection highlight) onto a new QImage.

        Raises:
            ExportError: Scene not ready, bad scale, or drawing failure
        """
        try:
            scene.require_ready()
        except AssetNotReady as e:
            raise ExportError(f"Nothing to export: {e}") from e
        if target_scale <= 0:
            raise ExportError(f"Export scale must be positive, got {target_scale}")

        width, height = self.export_size(scene, target_scale)
        surface = RenderSurface()
        try:
            self.compositor.render(surface, scene, width, height, show_selection=False, raise_errors=True)
        except Exception as e:
            raise ExportError(f"Failed to render export: {e}") from e
        if surface.is_null():
            raise ExportError(f"Could not allocate a {width}x{height} export surface")

        logger.info("Rendered export at %dx%d (scale %.2f)", width, height, target_scale)
        return surface.image()

    def export_image(self, scene, target_scale: float = EXPORT_SCALE,
                     image_format: str = EXPORT_FORMAT, quality: int = EXPORT_QUALITY) -> bytes:
        """Render and serialize the scene; returns the encoded raster bytes.

        Raises:
            ExportError: On any render or encode failure
        """
        image = self.render_to_image(scene, target_scale)
        return encode_image(image, image_format, quality)

    def save_export(self, scene, path, target_scale: float = EXPORT_SCALE,
                    image_format: str = None, quality: int = EXPORT_QUALITY) -> Path:
        """Render, encode and write the scene to path (format from the extension by default).

        Raises:
            ExportError: On any failure; no partial file is left behind
        """
        image_format = image_format or format_for_path(path)
        data = self.export_image(scene, target_scale, image_format, quality)
        written = write_atomic(path, data)
        logger.info("Exported %s (%d bytes)", written, len(data))
        return written


class ExportWorker(QThread):
    """Worker thread that encodes and writes an already-rendered export."""

    completed = pyqtSignal(bool, str)  # success, path or error message

    def __init__(self, image: QImage, path, image_format: str = None, quality: int = EXPORT_QUALITY):
        super().__init__()
        self.image = image
        self.path = Path(path)
        self.image_format = image_format or format_for_path(path)
        self.quality = quality

    def run(self):
        try:
            data = encode_image(self.image, self.image_format, self.quality)
            write_atomic(self.path, data)
        except ExportError as e:
            logger.error("Export failed: %s", e)
            self.completed.emit(False, str(e))
            return
        except Exception as e:
            logger.exception("Unexpected export failure")
            self.completed.emit(False, f"Unexpected export failure: {e}")
            return
        logger.info("Exported %s", self.path)
        self.completed.emit(True, str(self.path))
