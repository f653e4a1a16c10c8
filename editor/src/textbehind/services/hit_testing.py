"""Hit testing and position constraints for text layers.

All functions work in the unrotated composition frame: canvas pixels before
the scene's whole-image rotation is applied (see
utils.layout.unrotate_canvas_point for mapping pointer input into it).

Coordinate spaces:
- Canvas: pixels, top-left origin, Y-down
- Layer-local: pixels, layer anchor at origin, layer rotation removed
- Percent: 0-100 of the image draw rectangle
"""
import logging
import math

from textbehind.constants import MIN_HIT_BOX_PX, PERCENT_CENTER, PERCENT_MAX
from textbehind.errors import MeasurementUnavailable
from textbehind.utils.layout import percent_to_pixels, rotate_point

logger = logging.getLogger(__name__)


def rotated_half_extents(half_width, half_height, rotation):
	"""Half-extents of the axis-aligned box around a rotated box.
	
	Returns:
		(rotated_half_width, rotated_half_height) in pixels
	"""
	radians = math.radians(rotation)
	cos = math.cos(radians)
	sin = math.sin(radians)
	return (
		abs(half_width * cos) + abs(half_height * sin),
		abs(half_width * sin) + abs(half_height * cos)
	)


def canvas_to_layer_local(layer, x, y, draw_rect):
	"""Map a canvas point into the layer's local, unrotated frame"""
	center = percent_to_pixels(draw_rect, layer.position_x, layer.position_y)
	return rotate_point(x - center.x, y - center.y, -layer.rotation)


def hit_test_layer(layer, x, y, draw_rect, measurer, min_box=MIN_HIT_BOX_PX):
	"""Inverse-rotation hit test of one layer.
	
	The measured box is widened to at least min_box pixels on each edge so
	that empty or tiny text stays selectable.
	
	Raises:
		MeasurementUnavailable: Propagated from the measurer
	"""
	if draw_rect.is_empty:
		return False
	width, height = measurer.measure(layer, draw_rect.draw_height)
	half_width = max(width, min_box) / 2
	half_height = max(height, min_box) / 2
	local = canvas_to_layer_local(layer, x, y, draw_rect)
	return -half_width <= local.x <= half_width and -half_height <= local.y <= half_height


def layer_at(scene, x, y, draw_rect, measurer):
	"""Return the topmost layer under (x, y), or None.
	
	Layers are tested in reverse list order, so the most recently listed
	layer wins on overlap. A layer whose metrics are unavailable never hits.
	"""
	for layer in reversed(scene.layers):
		try:
			if hit_test_layer(layer, x, y, draw_rect, measurer):
				return layer
		except MeasurementUnavailable as e:
			logger.debug("Hit test skipped for %s: %s", layer.id, e)
	return None


def position_bounds(layer, draw_width, draw_height, measurer):
	"""Allowed percentage ranges keeping the rotated text box inside the image.
	
	Returns:
		((min_x, max_x), (min_y, max_y)); an axis where the text is larger
		than the image collapses to the center
		
	Raises:
		MeasurementUnavailable: Propagated from the measurer
	"""
	width, height = measurer.measure(layer, draw_height)
	rotated_half_width, rotated_half_height = rotated_half_extents(width / 2, height / 2, layer.rotation)
	
	min_x = rotated_half_width / draw_width * 50
	min_y = rotated_half_height / draw_height * 50
	bounds = []
	for low in (min_x, min_y):
		high = PERCENT_MAX - low
		if low > high:
			low = high = PERCENT_CENTER
		bounds.append((low, high))
	return tuple(bounds)


def clamp_percent(x_percent, y_percent):
	"""Clamp a position into the [0, 100] percent square"""
	return (
		max(0.0, min(PERCENT_MAX, x_percent)),
		max(0.0, min(PERCENT_MAX, y_percent))
	)


def constrain(x_percent, y_percent, layer, draw_width, draw_height, measurer, fallback=None):
	"""Clamp a proposed position so the layer's rotated box stays in the image.
	
	Fails closed: with no metrics or an empty draw rectangle the fallback
	position is returned (no movement). fallback defaults to the layer's
	current position; pass the pre-change position when `layer` is an
	already edited copy. The result is always inside [0, 100].
	
	Returns:
		(x_percent, y_percent)
	"""
	if fallback is None:
		fallback = (layer.position_x, layer.position_y)
	if draw_width <= 0 or draw_height <= 0:
		return clamp_percent(*fallback)
	try:
		(min_x, max_x), (min_y, max_y) = position_bounds(layer, draw_width, draw_height, measurer)
	except MeasurementUnavailable as e:
		logger.debug("Constraint skipped for %s: %s", layer.id, e)
		return clamp_percent(*fallback)
	return (
		max(min_x, min(max_x, x_percent)),
		max(min_y, min(max_y, y_percent))
	)


def constrain_all(scene, draw_rect, measurer):
	"""Re-apply the constraint to every layer of a scene in place.
	
	Returns:
		True if any layer moved
	"""
	if draw_rect.is_empty:
		return False
	changed = False
	for layer in scene.layers:
		x, y = constrain(layer.position_x, layer.position_y, layer, draw_rect.draw_width, draw_rect.draw_height, measurer)
		if (x, y) != (layer.position_x, layer.position_y):
			layer.position_x = x
			layer.position_y = y
			changed = True
	return changed
