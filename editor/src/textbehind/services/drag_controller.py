"""Hit-test & drag controller.

Two states, IDLE and DRAGGING. While dragging, pointer moves are written to
a fast-path copy of the scene that the canvas paints from; the authoritative
scene only receives the final position, once, on release (or on cancel).
"""
import logging
from enum import Enum

from textbehind.models.drag_session import DragSession
from textbehind.services.hit_testing import constrain, layer_at
from textbehind.services.text_metrics import TextMeasurer
from textbehind.utils.layout import percent_to_pixels, pixels_to_percent, rotate_point, unrotate_canvas_point

logger = logging.getLogger(__name__)


class DragState(Enum):
	IDLE = 'idle'
	DRAGGING = 'dragging'


class DragController:
	"""Interprets pointer input against the scene owned by a SceneController.
	
	Requires from the controller:
	- scene (authoritative Scene)
	- container_size -> (width, height)
	- draw_rect() -> DrawRect for the current container
	- select_layer(layer_id)
	- begin_gesture() / end_gesture() around a drag
	- commit_position(layer_id, x_percent, y_percent)
	"""
	
	def __init__(self, controller, measurer=None, request_redraw=None):
		self.controller = controller
		self.measurer = measurer or TextMeasurer()
		self._request_redraw = request_redraw or (lambda: None)
		self.state = DragState.IDLE
		self.session = None
		self._fast_scene = None
	
	@property
	def is_dragging(self):
		return self.state is DragState.DRAGGING
	
	@property
	def render_scene(self):
		"""Scene to paint: the fast-path copy mid-drag, else the authoritative one"""
		if self._fast_scene is not None:
			return self._fast_scene
		return self.controller.scene
	
	# ========================================
	# Selection query
	# ========================================
	
	def layer_at(self, x, y):
		"""Topmost layer under the canvas point (x, y), or None"""
		scene = self.render_scene
		if not scene.is_ready():
			return None
		width, height = self.controller.container_size
		point = unrotate_canvas_point(x, y, width, height, scene.image_rotation)
		return layer_at(scene, point.x, point.y, self.controller.draw_rect(), self.measurer)
	
	# ========================================
	# Pointer events
	# ========================================
	
	def pointer_down(self, x, y):
		"""Start dragging the topmost layer under (x, y).
		
		Returns:
			True if a layer was hit; a miss leaves state and selection unchanged
		"""
		if self.is_dragging:
			return False
		
		layer = self.layer_at(x, y)
		if layer is None:
			return False
		
		self.controller.select_layer(layer.id)
		self.controller.begin_gesture()
		self._fast_scene = self.controller.scene.copy()
		self.session = DragSession(layer_id=layer.id, pointer_start_x=x, pointer_start_y=y)
		self.state = DragState.DRAGGING
		logger.debug("Drag started on %s at (%.1f, %.1f)", layer.id, x, y)
		self._request_redraw()
		return True
	
	def pointer_move(self, x, y):
		"""Move the dragged layer by the delta from the previous pointer sample"""
		if not self.is_dragging:
			return
		
		session = self.session
		layer = self._fast_scene.get_layer(session.layer_id)
		if layer is None:
			# Layer removed underneath us
			self._end_drag(commit=False)
			return
		
		draw_rect = self.controller.draw_rect()
		if draw_rect.is_empty:
			session.last_x, session.last_y = x, y
			return
		
		# Deltas are taken in the unrotated composition frame
		delta = rotate_point(x - session.last_x, y - session.last_y, -self._fast_scene.image_rotation)
		
		current = percent_to_pixels(draw_rect, layer.position_x, layer.position_y)
		proposed = pixels_to_percent(draw_rect, current.x + delta.x, current.y + delta.y)
		layer.position_x, layer.position_y = constrain(
			proposed.x, proposed.y, layer, draw_rect.draw_width, draw_rect.draw_height, self.measurer)
		
		session.last_x, session.last_y = x, y
		session.moved = True
		self._request_redraw()
	
	def pointer_up(self):
		"""Commit the dragged layer's final position and return to IDLE.
		
		Returns:
			True if a drag was ended
		"""
		if not self.is_dragging:
			return False
		self._end_drag(commit=True)
		return True
	
	def cancel(self):
		"""End a drag that lost its pointer (leave, focus loss, hide).
		
		Commits the last known good position; a drag is never left open.
		"""
		if self.is_dragging:
			logger.debug("Drag cancelled on %s, committing last position", self.session.layer_id)
			self._end_drag(commit=True)
	
	def _end_drag(self, commit):
		session = self.session
		layer = self._fast_scene.get_layer(session.layer_id) if self._fast_scene else None
		
		self.state = DragState.IDLE
		self.session = None
		self._fast_scene = None
		self.controller.end_gesture()
		
		# A click without movement leaves no undo step
		if commit and layer is not None and session.moved:
			self.controller.commit_position(session.layer_id, layer.position_x, layer.position_y)
		self._request_redraw()
