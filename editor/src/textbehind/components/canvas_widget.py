# PyQt5 imports
from PyQt5.QtWidgets import QWidget, QSizePolicy
from PyQt5.QtCore import Qt, QSize, QEvent, pyqtSignal
from PyQt5.QtGui import QPainter

import logging
from pathlib import Path

from textbehind.constants import (
	DEFAULT_CANVAS_WIDTH, DEFAULT_CANVAS_HEIGHT, EXPORT_FILENAME,
	EXPORT_SCALE, EXPORT_FORMAT, EXPORT_QUALITY,
	ARROW_KEY_MOVE_NORMAL, ARROW_KEY_MOVE_FINE,
)
from textbehind.errors import ExportError
from textbehind.services.compositor import RenderSurface, SceneCompositor
from textbehind.services.drag_controller import DragController
from textbehind.services.export_renderer import ExportRenderer, ExportWorker, format_for_path
from textbehind.services.redraw_scheduler import RedrawScheduler
from textbehind.services.scene_controller import SceneController

logger = logging.getLogger(__name__)


class EditorCanvas(QWidget):
	"""Interactive canvas showing the text-behind-subject composition.
	
	Paints from the drag controller's render scene (the fast-path copy while a
	drag is active), redraws through a coalescing scheduler, and exposes
	download_image() for exporting the committed scene.
	"""
	
	export_finished = pyqtSignal(bool, str)  # success, path or error message
	
	def __init__(self, controller=None, parent=None, config=None):
		super().__init__(parent)
		
		self.setFocusPolicy(Qt.StrongFocus)
		self.setMouseTracking(True)
		self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
		
		self.controller = controller or SceneController(parent=self)
		self.measurer = self.controller.measurer
		self.compositor = SceneCompositor(self.measurer)
		self.export_renderer = ExportRenderer(SceneCompositor(self.measurer))
		self.surface = RenderSurface()
		
		self.scheduler = RedrawScheduler(self._redraw, self)
		self.drag = DragController(self.controller, self.measurer, self.scheduler.request)
		self.controller.scene_changed.connect(self.scheduler.request)
		
		# Export settings
		self.export_scale = config.export_scale if config else EXPORT_SCALE
		self.export_format = config.export_format if config else EXPORT_FORMAT
		self.export_quality = config.export_quality if config else EXPORT_QUALITY
		self._preferred_size = QSize(
			config.canvas_width if config else DEFAULT_CANVAS_WIDTH,
			config.canvas_height if config else DEFAULT_CANVAS_HEIGHT
		)
		
		# Running export threads (kept alive until they report back)
		self._export_workers = []
	
	# ========================================
	# Qt Widget Overrides
	# ========================================
	
	def sizeHint(self):
		return self._preferred_size
	
	def resizeEvent(self, event):
		"""Track the new size; layers are re-constrained to the new draw rectangle"""
		super().resizeEvent(event)
		self.controller.set_container_size(self.width(), self.height())
		self.scheduler.request()
	
	def paintEvent(self, event):
		painter = QPainter(self)
		if not self.surface.is_null():
			painter.drawImage(0, 0, self.surface.image())
		painter.end()
	
	def _redraw(self):
		"""Render the current scene into the back surface and repaint"""
		self.compositor.render(self.surface, self.drag.render_scene, self.width(), self.height())
		self.update()
	
	# ========================================
	# Pointer input
	# ========================================
	
	def mousePressEvent(self, event):
		"""Start dragging the layer under the cursor"""
		if event.button() == Qt.LeftButton:
			pos = event.localPos()
			if self.drag.pointer_down(pos.x(), pos.y()):
				self.setCursor(Qt.ClosedHandCursor)
				event.accept()
				return
		super().mousePressEvent(event)
	
	def mouseMoveEvent(self, event):
		"""Move the dragged layer, or update the hover cursor"""
		pos = event.localPos()
		if self.drag.is_dragging:
			self.drag.pointer_move(pos.x(), pos.y())
			event.accept()
			return
		
		if self.drag.layer_at(pos.x(), pos.y()) is not None:
			self.setCursor(Qt.OpenHandCursor)
		else:
			self.setCursor(Qt.ArrowCursor)
		super().mouseMoveEvent(event)
	
	def mouseReleaseEvent(self, event):
		"""Commit the drag; Qt keeps the mouse grabbed so this also fires outside the widget"""
		if event.button() == Qt.LeftButton and self.drag.pointer_up():
			self.setCursor(Qt.OpenHandCursor)
			event.accept()
			return
		super().mouseReleaseEvent(event)
	
	def focusOutEvent(self, event):
		self._cancel_drag()
		super().focusOutEvent(event)
	
	def hideEvent(self, event):
		self._cancel_drag()
		super().hideEvent(event)
	
	def changeEvent(self, event):
		"""Window deactivated mid-drag: close the drag"""
		if event.type() == QEvent.ActivationChange and not self.isActiveWindow():
			self._cancel_drag()
		super().changeEvent(event)
	
	def _cancel_drag(self):
		if self.drag.is_dragging:
			self.drag.cancel()
			self.setCursor(Qt.ArrowCursor)
	
	def keyPressEvent(self, event):
		"""Escape ends a drag, Delete removes the selected layer, arrows nudge it"""
		key = event.key()
		if key == Qt.Key_Escape:
			self._cancel_drag()
			event.accept()
			return
		
		if self.drag.is_dragging:
			super().keyPressEvent(event)
			return
		
		if key in (Qt.Key_Delete, Qt.Key_Backspace):
			self.controller.delete_selected_layer()
			event.accept()
			return
		
		moves = {
			Qt.Key_Left: (-1, 0),
			Qt.Key_Right: (1, 0),
			Qt.Key_Up: (0, -1),
			Qt.Key_Down: (0, 1),
		}
		layer = self.controller.scene.selected_layer
		if key in moves and layer is not None:
			step = ARROW_KEY_MOVE_FINE if event.modifiers() & Qt.ShiftModifier else ARROW_KEY_MOVE_NORMAL
			dx, dy = moves[key]
			self.controller.set_position(layer.position_x + dx * step, layer.position_y + dy * step)
			event.accept()
			return
		super().keyPressEvent(event)
	
	# ========================================
	# Public API
	# ========================================
	
	def layer_at(self, x, y):
		"""Which layer, if any, is under the canvas point (x, y)"""
		return self.drag.layer_at(x, y)
	
	def download_image(self, on_complete=None, path=None):
		"""Export the committed scene and save it to path.
		
		Rendering happens here on the GUI thread; encoding and writing run in an
		ExportWorker. on_complete(success, message) is called exactly once,
		whether the export succeeds or fails.
		
		Returns:
			The started ExportWorker, or None if the export failed up front
		"""
		path = Path(path) if path else Path(EXPORT_FILENAME)
		try:
			image = self.export_renderer.render_to_image(self.controller.scene, self.export_scale)
		except ExportError as e:
			logger.error("Export failed: %s", e)
			self._finish_export(on_complete, False, str(e))
			return None
		
		image_format = format_for_path(path) if path.suffix else self.export_format
		worker = ExportWorker(image, path, image_format, self.export_quality)
		worker.completed.connect(
			lambda success, message: self._on_export_completed(worker, on_complete, success, message)
		)
		self._export_workers.append(worker)
		worker.start()
		return worker
	
	def _on_export_completed(self, worker, on_complete, success, message):
		worker.wait()
		if worker in self._export_workers:
			self._export_workers.remove(worker)
		worker.deleteLater()
		self._finish_export(on_complete, success, message)
	
	def _finish_export(self, on_complete, success, message):
		self.export_finished.emit(success, message)
		if on_complete is not None:
			on_complete(success, message)
