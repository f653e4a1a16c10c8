"""Font resolution and text measurement.

TextMeasurer builds the QFont a layer renders with and measures its text box.
The compositor draws with the same font objects, so hit boxes, constraint
bounds and the selection rectangle all agree with what is on screen.

FontLoader registers font files with Qt as an explicit asynchronous step
that signals when the families are usable for measurement.
"""
import logging
from pathlib import Path

from PyQt5.QtCore import QObject, QTimer, pyqtSignal
from PyQt5.QtGui import QFont, QFontDatabase, QFontMetricsF, QGuiApplication

from textbehind.errors import MeasurementUnavailable
from textbehind.utils.layout import rendered_font_size

logger = logging.getLogger(__name__)


class TextMeasurer:
	"""Builds layer fonts and measures text at the layer's rendered size"""
	
	def font_for(self, layer, draw_height):
		"""QFont for a layer drawn inside an image of draw_height pixels"""
		pixel_size = rendered_font_size(layer.font_size, draw_height)
		font = QFont(layer.font_family)
		font.setStyleHint(QFont.SansSerif)
		font.setBold(bool(layer.bold))
		font.setPixelSize(max(1, int(round(pixel_size))))
		return font
	
	def measure(self, layer, draw_height):
		"""Measure a layer's unrotated text box.
		
		Width is the text advance, height is the rendered font size (the
		text is drawn vertically centered on its anchor).
		
		Returns:
			(width, height) in pixels
			
		Raises:
			MeasurementUnavailable: No QGuiApplication or metrics failure
		"""
		if QGuiApplication.instance() is None:
			raise MeasurementUnavailable("Font metrics need a QGuiApplication")
		try:
			metrics = QFontMetricsF(self.font_for(layer, draw_height))
			width = metrics.horizontalAdvance(layer.text)
		except Exception as e:
			raise MeasurementUnavailable(f"Could not measure layer {layer.id}: {e}") from e
		return width, rendered_font_size(layer.font_size, draw_height)


def register_font_files(font_paths):
	"""Register font files with Qt right away.
	
	Returns:
		Family names that became available; unreadable files are logged and skipped
	"""
	families = []
	for path in font_paths:
		font_id = QFontDatabase.addApplicationFont(str(path))
		if font_id < 0:
			logger.warning("Failed to load font file: %s", path)
			continue
		families.extend(QFontDatabase.applicationFontFamilies(font_id))
	return families


class FontLoader(QObject):
	"""Registers font files with Qt before they are needed for measurement.
	
	load() returns immediately; the files are registered on the next event
	loop turn and fonts_ready is emitted with the families that became
	available (font files that fail to load are logged and skipped).
	"""
	
	fonts_ready = pyqtSignal(list)  # family names
	
	def __init__(self, parent=None):
		super().__init__(parent)
		self.loaded_families = []
		self._pending = []
	
	def load(self, font_paths):
		"""Queue font files for registration"""
		self._pending.extend(Path(p) for p in font_paths)
		QTimer.singleShot(0, self._register_pending)
	
	def _register_pending(self):
		pending, self._pending = self._pending, []
		if not pending:
			return
		families = register_font_files(pending)
		self.loaded_families.extend(f for f in families if f not in self.loaded_families)
		logger.info("Registered %d font famil(ies) from %d file(s)", len(families), len(pending))
		self.fonts_ready.emit(families)
	
	@staticmethod
	def is_available(family):
		"""True if Qt can resolve this family exactly"""
		return family in QFontDatabase().families()
