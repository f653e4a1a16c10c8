"""Layout and coordinate transformation utilities.

Provides conversion between the coordinate systems used by the editor:
- Canvas pixels (Qt, top-left origin, Y-down)
- Draw rectangle percentages (0-100, layer positions)
- Layer-local pixels (layer anchor at origin, unrotated)
"""
import math

from textbehind.constants import FONT_SIZE_REFERENCE, FONT_SIZE_SCALE
from textbehind.models.transform import DrawRect, Vec2


def resolve(container_width, container_height, image_width, image_height):
	"""Letterbox an image inside a container, preserving aspect ratio.
	
	If the image is relatively wider than the container it is fitted to the
	container width and centered vertically, otherwise fitted to the height
	and centered horizontally. The image is never cropped or stretched.
	
	Args:
		container_width, container_height: Container size in pixels
		image_width, image_height: Native image size in pixels
		
	Returns:
		DrawRect; all zeros for degenerate (zero/negative) input
	"""
	if container_width <= 0 or container_height <= 0 or image_width <= 0 or image_height <= 0:
		return DrawRect(0.0, 0.0, 0.0, 0.0)
	
	image_aspect = image_width / image_height
	container_aspect = container_width / container_height
	
	if image_aspect > container_aspect:
		draw_width = float(container_width)
		draw_height = container_width / image_aspect
		offset_x = 0.0
		offset_y = (container_height - draw_height) / 2
	else:
		draw_height = float(container_height)
		draw_width = container_height * image_aspect
		offset_x = (container_width - draw_width) / 2
		offset_y = 0.0
	
	return DrawRect(draw_width, draw_height, offset_x, offset_y)


def resolve_for_scene(scene, container_width, container_height):
	"""resolve() using the scene background's native size"""
	image_width, image_height = scene.image_size()
	return resolve(container_width, container_height, image_width, image_height)


def percent_to_pixels(draw_rect, x_percent, y_percent):
	"""Convert a draw-rectangle percentage position to canvas pixels.
	
	Returns:
		Vec2 in canvas pixels
	"""
	return Vec2(
		draw_rect.offset_x + x_percent / 100 * draw_rect.draw_width,
		draw_rect.offset_y + y_percent / 100 * draw_rect.draw_height
	)


def pixels_to_percent(draw_rect, pixel_x, pixel_y):
	"""Convert canvas pixels to a draw-rectangle percentage position.
	
	Returns:
		Vec2 in percentages; (0, 0) for an empty draw rectangle
	"""
	if draw_rect.is_empty:
		return Vec2(0.0, 0.0)
	return Vec2(
		(pixel_x - draw_rect.offset_x) / draw_rect.draw_width * 100,
		(pixel_y - draw_rect.offset_y) / draw_rect.draw_height * 100
	)


def rendered_font_size(font_size, draw_height):
	"""Map the abstract font size to pixels.
	
	Proportional to the displayed image height (not the canvas), so the same
	layer looks identical on screen and in export.
	"""
	return font_size / FONT_SIZE_REFERENCE * draw_height * FONT_SIZE_SCALE


def rotate_point(x, y, degrees):
	"""Rotate (x, y) about the origin, Y-down (clockwise on screen for +degrees).
	
	Returns:
		Vec2 rotated point
	"""
	radians = math.radians(degrees)
	cos = math.cos(radians)
	sin = math.sin(radians)
	return Vec2(x * cos - y * sin, x * sin + y * cos)


def normalize_degrees(degrees):
	"""Wrap an angle into [0, 360)"""
	return degrees % 360


def unrotate_canvas_point(x, y, container_width, container_height, image_rotation):
	"""Undo the whole-composition rotation for a canvas point.
	
	The composition is rotated about the canvas center; pointer input has to
	be rotated back before it can be compared with layer geometry.
	
	Returns:
		Vec2 in the unrotated composition frame
	"""
	if not image_rotation:
		return Vec2(x, y)
	center_x = container_width / 2
	center_y = container_height / 2
	local = rotate_point(x - center_x, y - center_y, -image_rotation)
	return Vec2(local.x + center_x, local.y + center_y)
