"""Scene compositor - the three-layer text-behind-subject sandwich.

Draw order, all under the whole-composition rotation about the canvas center:
	1. background image into the letterboxed draw rectangle
	2. every text layer, rotated about its own anchor
	3. the foreground cutout into the same rectangle

The cutout's transparent pixels let the text show through everywhere except
over the subject, which is what puts the text "behind" it.
"""
import logging

from PyQt5.QtCore import Qt, QRectF
from PyQt5.QtGui import QColor, QImage, QPainter, QPen

from textbehind.constants import DEFAULT_TEXT_COLOR, HIGHLIGHT_COLOR, HIGHLIGHT_WIDTH
from textbehind.errors import MeasurementUnavailable
from textbehind.services.text_metrics import TextMeasurer
from textbehind.utils.layout import percent_to_pixels, rendered_font_size, resolve_for_scene

logger = logging.getLogger(__name__)

# Wide enough that centered single-line text is never clipped
_TEXT_BOX_HALF_WIDTH = 100000.0

_TEXT_FLAGS = int(Qt.AlignCenter) | int(Qt.TextDontClip) | int(Qt.TextSingleLine)


class RenderSurface:
	"""Mutable drawing target backed by a QImage.
	
	QImage cannot change size in place, so resize() swaps in a new, cleared
	image. A zero-sized surface holds a null image.
	"""
	
	IMAGE_FORMAT = QImage.Format_ARGB32_Premultiplied
	
	def __init__(self, width=0, height=0):
		self._image = QImage()
		self.resize(width, height)
	
	def resize(self, width, height):
		"""Reallocate to width x height and clear to transparent"""
		width = int(round(width))
		height = int(round(height))
		if width <= 0 or height <= 0:
			self._image = QImage()
			return
		self._image = QImage(width, height, self.IMAGE_FORMAT)
		self.clear()
	
	def clear(self):
		if not self._image.isNull():
			self._image.fill(Qt.transparent)
	
	def image(self):
		return self._image
	
	def is_null(self):
		return self._image.isNull()
	
	def width(self):
		return self._image.width()
	
	def height(self):
		return self._image.height()


# Invalid color values already logged
_reported_colors = set()


def _parse_color(value):
	color = QColor(value)
	if not color.isValid():
		if value not in _reported_colors:
			_reported_colors.add(value)
			logger.warning("Invalid text color %r, using %s", value, DEFAULT_TEXT_COLOR)
		color = QColor(DEFAULT_TEXT_COLOR)
	return color


class SceneCompositor:
	"""Draws a Scene onto a RenderSurface"""
	
	def __init__(self, measurer=None, highlight_color=HIGHLIGHT_COLOR, highlight_width=HIGHLIGHT_WIDTH):
		self.measurer = measurer or TextMeasurer()
		self.highlight_color = QColor(highlight_color)
		self.highlight_width = highlight_width
	
	def render(self, surface, scene, container_width, container_height, show_selection=True, raise_errors=False):
		"""Resize/clear the surface and draw the composition onto it.
		
		A scene without both images is skipped silently. A painting failure
		is logged and leaves a cleared surface (the frame is skipped), unless
		raise_errors is set, in which case it is re-raised after cleanup.
		"""
		surface.resize(container_width, container_height)
		if surface.is_null():
			return
		
		if not scene.is_ready():
			logger.debug("Render skipped: images not loaded")
			return
		
		draw_rect = resolve_for_scene(scene, container_width, container_height)
		if draw_rect.is_empty:
			return
		
		painter = QPainter(surface.image())
		try:
			self._paint(painter, scene, draw_rect, container_width, container_height, show_selection)
		except Exception:
			painter.end()
			surface.clear()
			if raise_errors:
				raise
			logger.warning("Render failed, frame skipped", exc_info=True)
			return
		painter.end()
	
	def _paint(self, painter, scene, draw_rect, container_width, container_height, show_selection):
		painter.setRenderHint(QPainter.Antialiasing)
		painter.setRenderHint(QPainter.TextAntialiasing)
		painter.setRenderHint(QPainter.SmoothPixmapTransform)
		
		# Whole-composition rotation about the canvas center
		painter.save()
		painter.translate(container_width / 2, container_height / 2)
		painter.rotate(scene.image_rotation)
		painter.translate(-container_width / 2, -container_height / 2)
		
		target = QRectF(draw_rect.offset_x, draw_rect.offset_y, draw_rect.draw_width, draw_rect.draw_height)
		painter.drawImage(target, scene.background_image)
		
		for layer in scene.layers:
			selected = show_selection and layer.id == scene.selected_layer_id
			self._draw_layer(painter, layer, draw_rect, selected)
		
		painter.drawImage(target, scene.cutout_image)
		
		painter.restore()
	
	def _draw_layer(self, painter, layer, draw_rect, selected):
		"""Draw one text layer centered on its anchor, under its own rotation"""
		size = rendered_font_size(layer.font_size, draw_rect.draw_height)
		anchor = percent_to_pixels(draw_rect, layer.position_x, layer.position_y)
		
		painter.save()
		painter.translate(anchor.x, anchor.y)
		painter.rotate(layer.rotation)
		
		painter.setFont(self.measurer.font_for(layer, draw_rect.draw_height))
		painter.setPen(_parse_color(layer.color))
		text_box = QRectF(-_TEXT_BOX_HALF_WIDTH, -size / 2, 2 * _TEXT_BOX_HALF_WIDTH, size)
		painter.drawText(text_box, _TEXT_FLAGS, layer.text)
		
		if selected:
			self._draw_highlight(painter, layer, draw_rect)
		
		painter.restore()
	
	def _draw_highlight(self, painter, layer, draw_rect):
		try:
			width, height = self.measurer.measure(layer, draw_rect.draw_height)
		except MeasurementUnavailable as e:
			logger.debug("No highlight for %s: %s", layer.id, e)
			return
		pen = QPen(self.highlight_color, self.highlight_width)
		painter.setPen(pen)
		painter.setBrush(Qt.NoBrush)
		painter.drawRect(QRectF(-width / 2, -height / 2, width, height))
