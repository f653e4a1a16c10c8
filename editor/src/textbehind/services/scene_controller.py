"""Scene controller - the control interface over the authoritative Scene.

Every setter replaces one value atomically, re-applies the position
constraint where geometry may have changed, records an undo snapshot and
emits scene_changed so the canvas schedules a redraw.
"""
import logging

from PyQt5.QtCore import QObject, pyqtSignal
from PyQt5.QtGui import QColor

from textbehind.constants import (
	NEW_LAYER_TEXT, LAYER_ROTATION_STEP, IMAGE_ROTATION_STEP, PERCENT_CENTER,
)
from textbehind.models.scene import Scene
from textbehind.models.text_layer import TextLayer, clamp_font_size, new_layer_id
from textbehind.services.hit_testing import constrain, constrain_all
from textbehind.services.text_metrics import TextMeasurer
from textbehind.utils.history_manager import HistoryManager
from textbehind.utils.layout import normalize_degrees, resolve_for_scene

logger = logging.getLogger(__name__)

# Offset for duplicated layers, in percent
DUPLICATE_OFFSET = 5.0


class SceneController(QObject):
	"""Owns the authoritative Scene and mutates it on behalf of controls"""
	
	scene_changed = pyqtSignal()
	selection_changed = pyqtSignal(object)  # layer id or None
	gesture_changed = pyqtSignal(bool)  # True while a pointer gesture owns the scene
	
	def __init__(self, scene=None, measurer=None, history=None, parent=None):
		super().__init__(parent)
		self.scene = scene if scene is not None else Scene()
		self.measurer = measurer or TextMeasurer()
		self.history = history if history is not None else HistoryManager()
		self.container_size = (0, 0)
		self.gesture_active = False
		if self.scene.is_ready():
			self._record("Initial state")
	
	# ========================================
	# Geometry
	# ========================================
	
	def draw_rect(self):
		"""Letterboxed image rectangle for the current container"""
		width, height = self.container_size
		return resolve_for_scene(self.scene, width, height)
	
	def set_container_size(self, width, height):
		"""Track the canvas size and re-constrain all layers to it"""
		if (width, height) == self.container_size:
			return
		self.container_size = (width, height)
		self._reconstrain_all()
		self.scene_changed.emit()
	
	def refresh_layout(self):
		"""Re-constrain and redraw after text metrics changed (e.g. fonts loaded)"""
		self._reconstrain_all()
		self.scene_changed.emit()
	
	def _reconstrain_all(self):
		if constrain_all(self.scene, self.draw_rect(), self.measurer):
			logger.debug("Layers re-constrained to %dx%d", *self.container_size)
	
	def _constrained(self, layer, previous=None):
		"""Constrained position for layer; without metrics it stays where previous was"""
		rect = self.draw_rect()
		fallback = (previous.position_x, previous.position_y) if previous is not None else None
		return constrain(layer.position_x, layer.position_y, layer, rect.draw_width, rect.draw_height,
			self.measurer, fallback=fallback)
	
	# ========================================
	# History
	# ========================================
	
	def _record(self, label):
		self.history.record(self.scene.snapshot(), label)
	
	def undo(self):
		if self.gesture_active:
			logger.debug("Undo ignored during a drag")
			return False
		state = self.history.undo()
		if state is None:
			return False
		self._apply_state(state)
		return True
	
	def redo(self):
		if self.gesture_active:
			logger.debug("Redo ignored during a drag")
			return False
		state = self.history.redo()
		if state is None:
			return False
		self._apply_state(state)
		return True
	
	def _apply_state(self, state):
		previous_selection = self.scene.selected_layer_id
		self.scene.restore(state)
		self._reconstrain_all()
		self.scene_changed.emit()
		if self.scene.selected_layer_id != previous_selection:
			self.selection_changed.emit(self.scene.selected_layer_id)
	
	# ========================================
	# Pointer gestures
	# ========================================
	
	def begin_gesture(self):
		"""A drag now writes the scene; history stays put until end_gesture()"""
		if not self.gesture_active:
			self.gesture_active = True
			self.gesture_changed.emit(True)
	
	def end_gesture(self):
		if self.gesture_active:
			self.gesture_active = False
			self.gesture_changed.emit(False)
	
	# ========================================
	# Images and composition
	# ========================================
	
	def set_images(self, background_image, cutout_image):
		"""Install a new background/cutout pair (starts a fresh history).
		
		Raises:
			AssetMismatchError: If the images differ in native size
		"""
		previous_selection = self.scene.selected_layer_id
		self.scene.set_images(background_image, cutout_image)
		self._reconstrain_all()
		self.history.clear()
		self._record("Load images")
		self.scene_changed.emit()
		if self.scene.selected_layer_id != previous_selection:
			self.selection_changed.emit(self.scene.selected_layer_id)
	
	def set_image_rotation(self, degrees):
		self.scene.image_rotation = degrees
		self._reconstrain_all()
		self._record("Rotate image")
		self.scene_changed.emit()
	
	def rotate_image_step(self, direction=1):
		"""Rotate the composition by one step (+1 clockwise, -1 counter-clockwise)"""
		self.set_image_rotation(normalize_degrees(self.scene.image_rotation + direction * IMAGE_ROTATION_STEP))
	
	# ========================================
	# Selection
	# ========================================
	
	def select_layer(self, layer_id):
		"""Select a layer by id, or clear the selection with None"""
		if layer_id is not None and self.scene.get_layer(layer_id) is None:
			raise KeyError(f"No layer with id {layer_id}")
		if layer_id == self.scene.selected_layer_id:
			return
		self.scene.selected_layer_id = layer_id
		self.selection_changed.emit(layer_id)
		self.scene_changed.emit()
	
	# ========================================
	# Layer fields
	# ========================================
	
	def _update_layer(self, layer_id, description, **changes):
		"""Swap in a changed copy of a layer, constrained, as one step.
		
		Returns:
			The new layer object, or None if there is no such layer
		"""
		if layer_id is None:
			layer_id = self.scene.selected_layer_id
		layer = self.scene.get_layer(layer_id) if layer_id is not None else None
		if layer is None:
			logger.debug("%s ignored: no layer %r", description, layer_id)
			return None
		
		updated = layer.copy(**changes)
		updated.position_x, updated.position_y = self._constrained(updated, layer)
		self.scene.replace_layer(updated)
		self._record(description)
		self.scene_changed.emit()
		return updated
	
	def set_text(self, text, layer_id=None):
		return self._update_layer(layer_id, "Edit text", text=text)
	
	def set_font_family(self, font_family, layer_id=None):
		return self._update_layer(layer_id, "Change font", font_family=font_family)
	
	def set_bold(self, bold, layer_id=None):
		return self._update_layer(layer_id, "Toggle bold", bold=bool(bold))
	
	def set_color(self, color, layer_id=None):
		"""Set the text color (any name or #hex Qt accepts).
	
		Raises:
			ValueError: If Qt cannot parse the color
		"""
		if not QColor(color).isValid():
			raise ValueError(f"Invalid text color: {color!r}")
		return self._update_layer(layer_id, "Change color", color=color)
	
	def set_position(self, x_percent, y_percent, layer_id=None):
		return self._update_layer(layer_id, "Move text", position_x=x_percent, position_y=y_percent)
	
	def set_font_size(self, font_size, layer_id=None):
		return self._update_layer(layer_id, "Resize text", font_size=clamp_font_size(font_size))
	
	def set_rotation(self, degrees, layer_id=None):
		return self._update_layer(layer_id, "Rotate text", rotation=degrees)
	
	def rotate_layer_step(self, direction=1, layer_id=None):
		"""Rotate a layer by one step (+1 clockwise, -1 counter-clockwise)"""
		layer = self.scene.get_layer(layer_id or self.scene.selected_layer_id)
		if layer is None:
			return None
		return self.set_rotation(normalize_degrees(layer.rotation + direction * LAYER_ROTATION_STEP), layer.id)
	
	def commit_position(self, layer_id, x_percent, y_percent):
		"""Final position of a drag gesture, recorded as a single undo step"""
		return self._update_layer(layer_id, "Drag text", position_x=x_percent, position_y=y_percent)
	
	# ========================================
	# Layer list
	# ========================================
	
	def add_layer(self, text=NEW_LAYER_TEXT, **fields):
		"""Append a new layer at the center and select it"""
		layer = TextLayer(text=text, **fields)
		layer.position_x, layer.position_y = self._constrained(layer)
		self.scene.add_layer(layer, select=True)
		self._record("Add text")
		self.scene_changed.emit()
		self.selection_changed.emit(layer.id)
		return layer
	
	def delete_layer(self, layer_id):
		removed = self.scene.remove_layer(layer_id)
		if removed is None:
			return None
		self._record("Delete text")
		self.scene_changed.emit()
		if self.scene.selected_layer_id is None:
			self.selection_changed.emit(None)
		return removed
	
	def delete_selected_layer(self):
		if self.scene.selected_layer_id is None:
			return None
		return self.delete_layer(self.scene.selected_layer_id)
	
	def duplicate_selected_layer(self):
		"""Copy the selected layer, nudged down-right, and select the copy"""
		layer = self.scene.selected_layer
		if layer is None:
			return None
		clone = layer.copy(
			id=new_layer_id(),
			position_x=min(layer.position_x + DUPLICATE_OFFSET, 100.0),
			position_y=min(layer.position_y + DUPLICATE_OFFSET, 100.0),
		)
		clone.position_x, clone.position_y = self._constrained(clone, layer)
		self.scene.add_layer(clone, select=True)
		self._record("Duplicate text")
		self.scene_changed.emit()
		self.selection_changed.emit(clone.id)
		return clone
	
	def center_selected_layer(self):
		return self.set_position(PERCENT_CENTER, PERCENT_CENTER)
