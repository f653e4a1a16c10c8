"""Transform data structures for coordinate and layout representation."""
from dataclasses import dataclass


@dataclass
class Vec2:
	"""2D vector for coordinate pairs.
	
	Used for any x/y coordinate pair across different spaces:
	- Canvas pixels (top-left origin)
	- Layer-local pixels (layer anchor at origin, unrotated)
	- Percentages of the image draw rectangle
	"""
	x: float
	y: float
	
	def __iter__(self):
		"""Allow tuple unpacking: x, y = vec2"""
		return iter((self.x, self.y))


@dataclass(frozen=True)
class DrawRect:
	"""Letterboxed image placement inside a container.
	
	All values in container pixels. A zero-size rect means nothing can be drawn.
	"""
	draw_width: float
	draw_height: float
	offset_x: float
	offset_y: float
	
	def __iter__(self):
		"""Allow tuple unpacking: w, h, ox, oy = rect"""
		return iter((self.draw_width, self.draw_height, self.offset_x, self.offset_y))
	
	@property
	def is_empty(self):
		return self.draw_width <= 0 or self.draw_height <= 0
